import numpy as np

from cioplan.config import PlanningParameters
from cioplan.math import ACCELERATION_RULE
from cioplan.math import central_difference
from cioplan.math import matrix_log
from cioplan.math import normalize_vector
from cioplan.math import VELOCITY_RULE


class RigidBodyDynamicsEvaluator(object):
    """Center of mass, momentum and reference wrench of a trajectory.

    All results are written into an
    :class:`cioplan.evaluation.EvaluationScratch`. Moments are taken about
    the world origin. The gravity force has unit magnitude.

    Parameters
    ----------
    robot : cioplan.model.RobotDescription
        Mass properties of the segments.
    parameters : cioplan.config.PlanningParameters, optional
        ``gravity_direction`` and ``include_inertial_wrench`` are read.
    """

    def __init__(self, robot, parameters=None):
        if parameters is None:
            parameters = PlanningParameters()
        self.robot = robot
        self.parameters = parameters
        self.mass_segment_indices = robot.mass_segment_indices
        self.masses = robot.masses
        self.total_mass = robot.total_mass
        self.centers_of_gravity = robot.centers_of_gravity
        self.rotational_inertias = robot.rotational_inertias

    @property
    def gravity_force(self):
        return normalize_vector(self.parameters.gravity_direction)

    def update_com(self, scratch, start, end):
        """Compute the mass segment positions and the CoM for start..end."""
        if self.total_mass == 0.0:
            return
        frames = scratch.segment_frames[start:end + 1,
                                        self.mass_segment_indices]
        positions = np.einsum('nmij,mj->nmi', frames[:, :, :3, :3],
                              self.centers_of_gravity) + frames[:, :, :3, 3]
        scratch.link_positions[start:end + 1] = positions
        scratch.com_positions[start:end + 1] = np.einsum(
            'm,nmi->ni', self.masses, positions) / self.total_mass

    def update_angular_velocities(self, scratch, start, end, dt):
        """Backward rotation difference of every mass segment."""
        frames = scratch.segment_frames
        for point in range(max(start, 1), end + 1):
            for k, sn in enumerate(self.mass_segment_indices):
                prev_rotation = frames[point - 1, sn, :3, :3]
                cur_rotation = frames[point, sn, :3, :3]
                scratch.angular_velocities[point, k] = matrix_log(
                    cur_rotation.dot(prev_rotation.T)) / dt

    def update_angular_momentums(self, scratch, start, end):
        frames = scratch.segment_frames
        for point in range(start, end + 1):
            com = scratch.com_positions[point]
            momentum = np.zeros(3)
            for k, sn in enumerate(self.mass_segment_indices):
                relative = scratch.link_positions[point, k] - com
                momentum += self.masses[k] * np.cross(
                    relative, scratch.link_velocities[point, k])
                R = frames[point, sn, :3, :3]
                inertia = R.dot(self.rotational_inertias[k]).dot(R.T)
                momentum += inertia.dot(scratch.angular_velocities[point, k])
            scratch.angular_momentums[point] = momentum

    def update_wrenches(self, scratch, start, end):
        gravity = self.gravity_force
        for point in range(start, end + 1):
            com = scratch.com_positions[point]
            force = gravity.copy()
            torque = np.cross(com, gravity)
            if self.parameters.include_inertial_wrench:
                acc = scratch.com_accelerations[point]
                force -= self.total_mass * acc
                torque -= self.total_mass * np.cross(com, acc) \
                    + scratch.torques[point]
            scratch.wrenches[point, :3] = force
            scratch.wrenches[point, 3:] = torque

    def compute(self, scratch, start, end, dt):
        """Fill the dynamics fields of ``scratch``.

        Parameters
        ----------
        scratch : cioplan.evaluation.EvaluationScratch
            Buffers holding the current forward kinematics.
        start : int
            First waypoint whose kinematics changed.
        end : int
            Last waypoint whose kinematics changed.
        dt : float
            Discretization step.
        """
        n = scratch.n_waypoints
        self.update_com(scratch, start, end)

        central_difference(scratch.com_positions, 1, n - 2, dt,
                           VELOCITY_RULE, out=scratch.com_velocities)
        central_difference(scratch.com_positions, 1, n - 2, dt,
                           ACCELERATION_RULE, out=scratch.com_accelerations)
        central_difference(scratch.link_positions, 1, n - 2, dt,
                           VELOCITY_RULE, out=scratch.link_velocities)

        self.update_angular_velocities(scratch, 1, n - 2, dt)
        self.update_angular_momentums(scratch, 1, n - 2)
        # momentum is only known on 1..n-2
        central_difference(scratch.angular_momentums, 2, n - 3, dt,
                           VELOCITY_RULE, out=scratch.torques)
        self.update_wrenches(scratch, 1, n - 2)
