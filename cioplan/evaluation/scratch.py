import numpy as np


class EvaluationScratch(object):
    """Per-waypoint buffers of one planning attempt.

    Buffers are allocated once. They fall in two groups:

    - caches that survive between evaluations: the forward kinematics
      output, the center of mass and the mass segment positions. Boundary
      waypoints are only recomputed on the first evaluation of an attempt,
      later evaluations overwrite the interior waypoints.
    - per-evaluation fields listed in ``per_evaluation_fields``. They are
      zero-filled by :meth:`begin_evaluation` so nothing computed by a
      previous evaluation can be read back.

    Parameters
    ----------
    n_waypoints : int
        Number of waypoints.
    n_segments : int
        Number of kinematic segments.
    n_mass_segments : int
        Number of segments with a non-zero mass.
    n_contacts : int
        Number of contact points.
    """

    per_evaluation_fields = (
        'com_velocities',
        'com_accelerations',
        'link_velocities',
        'angular_velocities',
        'angular_momentums',
        'torques',
        'wrenches',
        'contact_positions',
        'contact_violations',
        'contact_velocities',
        'contact_forces',
        'contact_invariant_costs',
        'physics_violation_costs',
        'collision_costs',
        'state_validity',
    )

    def __init__(self, n_waypoints, n_segments, n_mass_segments, n_contacts):
        self.n_waypoints = n_waypoints
        N = n_waypoints

        self.joint_positions = np.zeros((N, n_segments, 3))
        self.joint_axes = np.zeros((N, n_segments, 3))
        self.segment_frames = np.tile(np.eye(4), (N, n_segments, 1, 1))
        self.com_positions = np.zeros((N, 3))
        self.link_positions = np.zeros((N, n_mass_segments, 3))

        self.com_velocities = np.zeros((N, 3))
        self.com_accelerations = np.zeros((N, 3))
        self.link_velocities = np.zeros((N, n_mass_segments, 3))
        self.angular_velocities = np.zeros((N, n_mass_segments, 3))
        self.angular_momentums = np.zeros((N, 3))
        self.torques = np.zeros((N, 3))
        self.wrenches = np.zeros((N, 6))
        self.contact_positions = np.zeros((N, n_contacts, 3))
        self.contact_violations = np.zeros((n_contacts, N, 4))
        self.contact_velocities = np.zeros((n_contacts, N, 3))
        self.contact_forces = np.zeros((N, n_contacts, 3))
        self.contact_invariant_costs = np.zeros(N)
        self.physics_violation_costs = np.zeros(N)
        self.collision_costs = np.zeros(N)
        self.state_validity = np.ones(N, dtype=bool)

    @classmethod
    def for_robot(cls, n_waypoints, robot, group):
        return cls(n_waypoints, robot.n_segments,
                   len(robot.mass_segment_indices), group.n_contacts)

    def begin_evaluation(self):
        for name in self.per_evaluation_fields:
            getattr(self, name)[...] = 0
        self.state_validity[...] = True

    def store_kinematics(self, point, result):
        self.joint_positions[point] = result.joint_positions
        self.joint_axes[point] = result.joint_axes
        self.segment_frames[point] = result.segment_frames
