"""Group and full trajectories of one planning attempt."""

from logging import getLogger

import numpy as np

from cioplan.exceptions import PreconditionViolation


logger = getLogger(__name__)


def interpolate_trajectory(start_angles, end_angles, n_waypoints):
    """Create linear interpolation between start and end configurations.

    Parameters
    ----------
    start_angles : array-like
        Starting joint angles (n_joints,).
    end_angles : array-like
        Ending joint angles (n_joints,).
    n_waypoints : int
        Number of waypoints including start and end.

    Returns
    -------
    numpy.ndarray
        Interpolated trajectory (n_waypoints, n_joints).
    """
    start = np.array(start_angles, dtype=np.float64)
    end = np.array(end_angles, dtype=np.float64)
    t = np.linspace(0, 1, n_waypoints)[:, np.newaxis]
    return start + t * (end - start)


class TrajectoryStore(object):
    """Trajectory matrices shared by the evaluator and the optimizer.

    The group trajectory (planning group joints only) is the source of
    truth. The full trajectory holds every robot joint and is overwritten
    from the group trajectory by :meth:`sync_full_from_group`.

    Waypoint 0 is the start state and the last two waypoints hold the
    goal. Waypoints ``1 .. n_waypoints - 3`` are free. Contact activations
    are stored per contact phase. Phase ``p`` covers the waypoints
    ``p * stride .. (p + 1) * stride - 1`` and the last phase also covers
    the goal waypoints, so with a stride of 1 there is one phase per free
    waypoint plus the initial phase. Every phase covers at least one
    waypoint.

    Parameters
    ----------
    group : cioplan.model.PlanningGroup
        Optimized joints and contacts.
    n_full_joints : int
        Size of the full joint array.
    n_waypoints : int
        Number of waypoints, at least 4.
    discretization : float
        Time between two waypoints.
    contact_phase_stride : int
        Number of waypoints covered by one contact phase.
    """

    def __init__(self, group, n_full_joints, n_waypoints, discretization,
                 contact_phase_stride=1):
        if n_waypoints < 4:
            raise PreconditionViolation(
                'A trajectory needs at least 4 waypoints, got {}'.format(
                    n_waypoints))
        if discretization <= 0.0:
            raise ValueError('discretization must be positive')
        if contact_phase_stride < 1:
            raise ValueError('contact_phase_stride must be >= 1')
        if len(group.group_to_full) and \
           group.group_to_full.max() >= n_full_joints:
            raise ValueError(
                'Planning group {} refers to joints outside the full '
                'joint array'.format(group.name))
        self.group = group
        self.n_waypoints = n_waypoints
        self.n_full_joints = n_full_joints
        self.discretization = float(discretization)
        self.contact_phase_stride = int(contact_phase_stride)

        self.full_trajectory = np.zeros((n_waypoints, n_full_joints))
        self.positions = np.zeros((n_waypoints, group.n_joints))
        self.velocities = np.zeros((n_waypoints, group.n_joints))
        self.contacts = np.zeros((self.n_contact_phases, group.n_contacts))

    @property
    def n_joints(self):
        return self.group.n_joints

    @property
    def n_contacts(self):
        return self.group.n_contacts

    @property
    def n_free(self):
        return self.n_waypoints - 3

    @property
    def n_contact_phases(self):
        return self.n_free // self.contact_phase_stride + 1

    @property
    def free_slice(self):
        return slice(1, self.n_waypoints - 2)

    @property
    def free_positions(self):
        return self.positions[self.free_slice]

    @property
    def free_velocities(self):
        return self.velocities[self.free_slice]

    def initialize(self, full_trajectory, velocities=None,
                   contact_value=1.0):
        """Set the trajectory of a new planning attempt.

        Parameters
        ----------
        full_trajectory : numpy.ndarray
            Full joint trajectory (n_waypoints, n_full_joints).
        velocities : numpy.ndarray, optional
            Group joint velocities (n_waypoints, n_joints). Zero if
            omitted.
        contact_value : float
            Initial activation of every contact in every phase.
        """
        full_trajectory = np.asarray(full_trajectory, dtype=np.float64)
        if full_trajectory.shape != self.full_trajectory.shape:
            raise PreconditionViolation(
                'Trajectory shape {} does not match expected shape {}'
                .format(full_trajectory.shape, self.full_trajectory.shape))
        self.full_trajectory[...] = full_trajectory
        self.positions[...] = full_trajectory[:, self.group.group_to_full]
        if velocities is None:
            self.velocities[...] = 0.0
        else:
            velocities = np.asarray(velocities, dtype=np.float64)
            if velocities.shape != self.velocities.shape:
                raise PreconditionViolation(
                    'Velocity shape {} does not match expected shape {}'
                    .format(velocities.shape, self.velocities.shape))
            self.velocities[...] = velocities
        self.contacts[...] = contact_value

    def initialize_from_endpoints(self, start, goal, contact_value=1.0):
        """Linearly interpolate full joint arrays from start to goal.

        The goal is copied into the last two waypoints.
        """
        trajectory = np.empty((self.n_waypoints, self.n_full_joints))
        trajectory[:-1] = interpolate_trajectory(start, goal,
                                                 self.n_waypoints - 1)
        trajectory[-1] = goal
        self.initialize(trajectory, contact_value=contact_value)

    def write_free_block(self, positions, velocities, contacts):
        """Copy optimizer variables into the group trajectory.

        Parameters
        ----------
        positions : numpy.ndarray
            Free joint positions (n_free, n_joints).
        velocities : numpy.ndarray
            Free joint velocities (n_free, n_joints).
        contacts : numpy.ndarray
            Contact activations (n_contact_phases, n_contacts).

        Raises
        ------
        PreconditionViolation
            If a block does not have the expected shape.
        """
        expected = (self.n_free, self.n_joints)
        for name, block in (('positions', positions),
                            ('velocities', velocities)):
            if np.shape(block) != expected:
                raise PreconditionViolation(
                    '{} block shape {} does not match expected shape {}'
                    .format(name, np.shape(block), expected))
        if np.shape(contacts) != self.contacts.shape:
            raise PreconditionViolation(
                'contacts block shape {} does not match expected shape {}'
                .format(np.shape(contacts), self.contacts.shape))
        self.positions[self.free_slice] = positions
        self.velocities[self.free_slice] = velocities
        self.contacts[...] = contacts

    def project_joint_limits(self):
        """Clamp free waypoints into the joint limits.

        Returns
        -------
        int
            Number of clamped samples.
        """
        n_clamped = 0
        free = self.positions[self.free_slice]
        for j, joint in enumerate(self.group.joints):
            if not joint.has_limits:
                continue
            column = free[:, j]
            outside = (column < joint.min_angle) | (column > joint.max_angle)
            if np.any(outside):
                n_clamped += int(np.count_nonzero(outside))
                np.clip(column, joint.min_angle, joint.max_angle,
                        out=column)
        if n_clamped:
            logger.debug('Clamped %d samples into joint limits', n_clamped)
        return n_clamped

    def correct_joint_limits(self, smoothness, max_passes=10):
        """Pull free waypoints into the joint limits smoothly.

        Each pass finds the largest violation of a joint and shifts its
        whole free column along the matching column of the inverse
        smoothness matrix, which fixes that sample while keeping the
        trajectory smooth. At most ``max_passes + 1`` passes are made per
        joint, so the result may still violate the limits.

        Parameters
        ----------
        smoothness : cioplan.cost.SmoothnessModel
            Model providing ``quadratic_cost_inverse(joint)``.
        max_passes : int
            Pass budget per joint.

        Returns
        -------
        int
            Number of corrections applied.
        """
        n_corrections = 0
        free = self.positions[self.free_slice]
        for j, joint in enumerate(self.group.joints):
            if not joint.has_limits:
                continue
            inverse = smoothness.quadratic_cost_inverse(j)
            for _ in range(max_passes + 1):
                column = free[:, j]
                amount = np.where(
                    column > joint.max_angle, joint.max_angle - column,
                    np.where(column < joint.min_angle,
                             joint.min_angle - column, 0.0))
                k = int(np.argmax(np.abs(amount)))
                if abs(amount[k]) <= 1e-6:
                    break
                free[:, j] += amount[k] / inverse[k, k] * inverse[:, k]
                n_corrections += 1
        return n_corrections

    def sync_full_from_group(self):
        self.full_trajectory[:, self.group.group_to_full] = self.positions

    def contact_phase_of(self, waypoint):
        return min(waypoint // self.contact_phase_stride,
                   self.n_contact_phases - 1)

    def contact_value(self, phase, contact):
        return self.contacts[phase, contact]

    def waypoint_contact_values(self, waypoint):
        return self.contacts[self.contact_phase_of(waypoint)]
