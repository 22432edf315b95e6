"""Forward kinematics consumed by the trajectory evaluator."""

from abc import ABC
from abc import abstractmethod

import numpy as np

from cioplan.math import rotation_matrix


class KinematicsResult(object):
    """Output of one forward kinematics pass.

    Attributes
    ----------
    joint_positions : numpy.ndarray
        World position of every segment's joint origin (n_segments, 3).
    joint_axes : numpy.ndarray
        World joint axis of every segment (n_segments, 3). Fixed segments
        report the z axis of their frame.
    segment_frames : numpy.ndarray
        World 4x4 frame of every segment (n_segments, 4, 4).
    """

    def __init__(self, joint_positions, joint_axes, segment_frames):
        self.joint_positions = joint_positions
        self.joint_axes = joint_axes
        self.segment_frames = segment_frames


class ForwardKinematicsSolver(ABC):
    """Interface of a forward kinematics solver.

    Both methods take the full joint array of one waypoint and must be
    deterministic. ``fk_partial`` is allowed to reuse anything computed by
    a previous call that does not depend on the joints.
    """

    @abstractmethod
    def fk_full(self, joint_array):
        """Compute the kinematics of every segment.

        Returns
        -------
        KinematicsResult
        """
        pass

    def fk_partial(self, joint_array):
        return self.fk_full(joint_array)


class TreeKinematics(ForwardKinematicsSolver):
    """Forward kinematics of a segment tree.

    Each segment frame is ``parent_frame @ origin @ joint_motion`` where the
    joint motion is a rotation about (revolute) or a translation along
    (prismatic) the segment axis.

    Parameters
    ----------
    robot : cioplan.model.RobotDescription
        Segment tree with joint indices.
    base_frame : numpy.ndarray, optional
        World frame of the root segment's parent.
    """

    def __init__(self, robot, base_frame=None):
        self.robot = robot
        self.base_frame = np.eye(4) if base_frame is None \
            else np.array(base_frame, dtype=np.float64)
        self._parents = robot.parent_indices

    def _joint_motion(self, segment, value):
        T = np.eye(4)
        if segment.joint_type == 'revolute':
            T[:3, :3] = rotation_matrix(value, segment.axis)
        elif segment.joint_type == 'prismatic':
            axis = segment.axis / np.linalg.norm(segment.axis)
            T[:3, 3] = value * axis
        return T

    def fk_full(self, joint_array):
        joint_array = np.asarray(joint_array, dtype=np.float64)
        if joint_array.shape != (self.robot.n_joints,):
            raise ValueError(
                'Joint array shape {} does not match {} joints'.format(
                    joint_array.shape, self.robot.n_joints))
        n = self.robot.n_segments
        frames = np.empty((n, 4, 4))
        positions = np.empty((n, 3))
        axes = np.empty((n, 3))
        for i, segment in enumerate(self.robot.segments):
            parent = self._parents[i]
            parent_frame = self.base_frame if parent is None \
                else frames[parent]
            joint_frame = parent_frame.dot(segment.origin)
            positions[i] = joint_frame[:3, 3]
            if segment.joint_type == 'fixed':
                frames[i] = joint_frame
                axes[i] = joint_frame[:3, 2]
                continue
            axis = segment.axis / np.linalg.norm(segment.axis)
            axes[i] = joint_frame[:3, :3].dot(axis)
            frames[i] = joint_frame.dot(
                self._joint_motion(segment,
                                   joint_array[segment.joint_index]))
        return KinematicsResult(positions, axes, frames)
