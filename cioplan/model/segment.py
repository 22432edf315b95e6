from logging import getLogger

from cached_property import cached_property
import numpy as np


logger = getLogger(__name__)

_joint_types = ('revolute', 'prismatic', 'fixed')


class Segment(object):
    """Rigid body of the kinematic tree.

    Parameters
    ----------
    name : str
        Unique segment name.
    parent : str or None
        Name of the parent segment. ``None`` for the root.
    joint_index : int or None
        Index of the driving joint in the full joint array. ``None``
        for segments rigidly attached to their parent.
    joint_type : str
        'revolute', 'prismatic' or 'fixed'.
    axis : array-like
        Joint axis in the segment's joint frame.
    origin : numpy.ndarray
        4x4 transform from the parent frame to the joint frame.
    mass : float
        Segment mass. Massless segments are skipped by the dynamics.
    center_of_gravity : array-like
        Center of gravity in the segment frame.
    rotational_inertia : numpy.ndarray
        3x3 rotational inertia about the center of gravity, expressed in
        the segment frame.
    """

    def __init__(self, name, parent=None, joint_index=None,
                 joint_type=None, axis=(0.0, 0.0, 1.0), origin=None,
                 mass=0.0, center_of_gravity=(0.0, 0.0, 0.0),
                 rotational_inertia=None):
        if joint_type is None:
            joint_type = 'fixed' if joint_index is None else 'revolute'
        if joint_type not in _joint_types:
            raise ValueError(
                'Invalid joint type {} for segment {}'.format(
                    joint_type, name))
        if joint_type == 'fixed' and joint_index is not None:
            raise ValueError(
                'Fixed segment {} cannot have a joint index'.format(name))
        if joint_type != 'fixed' and joint_index is None:
            raise ValueError(
                'Segment {} needs a joint index'.format(name))
        self.name = name
        self.parent = parent
        self.joint_index = joint_index
        self.joint_type = joint_type
        self.axis = np.array(axis, dtype=np.float64)
        self.origin = np.eye(4) if origin is None \
            else np.array(origin, dtype=np.float64)
        self.mass = float(mass)
        self.center_of_gravity = np.array(center_of_gravity,
                                          dtype=np.float64)
        if rotational_inertia is None:
            rotational_inertia = np.zeros((3, 3))
        self.rotational_inertia = np.array(rotational_inertia,
                                           dtype=np.float64)

    def __repr__(self):
        return '<Segment {} parent={} joint={} mass={}>'.format(
            self.name, self.parent, self.joint_index, self.mass)


class RobotDescription(object):
    """Kinematic tree with mass properties.

    Segments must be listed parents first. The order is the order of
    ``segment_frames`` produced by forward kinematics.

    Parameters
    ----------
    segments : list[Segment]
        Segments in topological order.
    joint_names : list[str]
        Names of the full joint array entries.
    """

    def __init__(self, segments, joint_names):
        self.segments = list(segments)
        self.joint_names = list(joint_names)
        self._name_to_index = {}
        for i, segment in enumerate(self.segments):
            if segment.name in self._name_to_index:
                raise ValueError(
                    'Duplicated segment name {}'.format(segment.name))
            if segment.parent is not None \
               and segment.parent not in self._name_to_index:
                raise ValueError(
                    'Parent {} of segment {} must be listed before it'
                    .format(segment.parent, segment.name))
            if segment.joint_index is not None \
               and not 0 <= segment.joint_index < len(self.joint_names):
                raise ValueError(
                    'Joint index {} of segment {} is out of range'.format(
                        segment.joint_index, segment.name))
            self._name_to_index[segment.name] = i

    @property
    def n_segments(self):
        return len(self.segments)

    @property
    def n_joints(self):
        return len(self.joint_names)

    def segment_index(self, name):
        try:
            return self._name_to_index[name]
        except KeyError:
            raise KeyError('Unknown segment {}'.format(name))

    def parent_index(self, name):
        """Return the index of the parent segment, or None for the root."""
        parent = self.segments[self.segment_index(name)].parent
        if parent is None:
            return None
        return self._name_to_index[parent]

    def joint_index(self, joint_name):
        return self.joint_names.index(joint_name)

    @cached_property
    def parent_indices(self):
        return [None if s.parent is None else self._name_to_index[s.parent]
                for s in self.segments]

    @cached_property
    def mass_segment_indices(self):
        indices = np.array(
            [i for i, s in enumerate(self.segments) if s.mass != 0.0],
            dtype=np.int64)
        if len(indices) == 0:
            logger.warning('Robot description has no segment with mass')
        return indices

    @cached_property
    def masses(self):
        return np.array([self.segments[i].mass
                         for i in self.mass_segment_indices])

    @cached_property
    def total_mass(self):
        return float(np.sum(self.masses))

    @cached_property
    def centers_of_gravity(self):
        return np.array([self.segments[i].center_of_gravity
                         for i in self.mass_segment_indices]).reshape(-1, 3)

    @cached_property
    def rotational_inertias(self):
        return np.array([self.segments[i].rotational_inertia
                         for i in self.mass_segment_indices]).reshape(
                             -1, 3, 3)
