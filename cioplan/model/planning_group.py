import numpy as np


class GroupJoint(object):
    """Joint of a planning group.

    Parameters
    ----------
    name : str
        Joint name.
    full_index : int
        Index of the joint in the full joint array.
    min_angle : float or None
        Lower limit. The joint has limits only if both bounds are given.
    max_angle : float or None
        Upper limit.
    """

    def __init__(self, name, full_index, min_angle=None, max_angle=None):
        if min_angle is not None and max_angle is not None \
           and min_angle > max_angle:
            raise ValueError(
                'min_angle {} > max_angle {} for joint {}'.format(
                    min_angle, max_angle, name))
        self.name = name
        self.full_index = int(full_index)
        self.min_angle = min_angle
        self.max_angle = max_angle

    @property
    def has_limits(self):
        return self.min_angle is not None and self.max_angle is not None

    def __repr__(self):
        return '<GroupJoint {} -> {} [{}, {}]>'.format(
            self.name, self.full_index, self.min_angle, self.max_angle)


class PlanningGroup(object):
    """Subset of the robot joints that is optimized.

    Parameters
    ----------
    name : str
        Group name, used for logging only.
    joints : list[GroupJoint]
        Optimized joints, in group column order.
    contact_points : list[ContactPoint]
        Contact points whose activations are optimized.
    participates_in_dynamics : bool
        If True the whole-body dynamics and contact stability costs are
        evaluated for this group. Otherwise they are zero.
    """

    def __init__(self, name, joints, contact_points=(),
                 participates_in_dynamics=False):
        self.name = name
        self.joints = list(joints)
        self.contact_points = list(contact_points)
        self.participates_in_dynamics = bool(participates_in_dynamics)
        full_indices = [j.full_index for j in self.joints]
        if len(set(full_indices)) != len(full_indices):
            raise ValueError(
                'Planning group {} maps two joints to the same full '
                'joint index'.format(name))
        self.group_to_full = np.array(full_indices, dtype=np.int64)

    @property
    def n_joints(self):
        return len(self.joints)

    @property
    def n_contacts(self):
        return len(self.contact_points)

    @property
    def joint_names(self):
        return [j.name for j in self.joints]

    def __repr__(self):
        return '<PlanningGroup {} joints={} contacts={} dynamics={}>'.format(
            self.name, self.n_joints, self.n_contacts,
            self.participates_in_dynamics)
