"""State validity and collision depth collaborators."""

from abc import ABC
from abc import abstractmethod

import numpy as np


class StateValidityChecker(ABC):
    """Interface of the per-waypoint collision query."""

    @abstractmethod
    def is_state_valid(self, joint_array):
        pass

    def collision_depth_sum(self, joint_array):
        """Return the summed penetration depth, 0 when collision free."""
        return 0.0


class AlwaysValidChecker(StateValidityChecker):
    """Checker for scenes without obstacles."""

    def is_state_valid(self, joint_array):
        return True


def compute_sphere_obstacle_distances(sphere_positions, sphere_radii,
                                      obstacle_centers, obstacle_radii):
    """Compute signed distances between collision spheres and obstacles.

    Parameters
    ----------
    sphere_positions : numpy.ndarray
        Collision sphere positions (n_spheres, 3).
    sphere_radii : numpy.ndarray
        Collision sphere radii (n_spheres,).
    obstacle_centers : numpy.ndarray
        Obstacle centers (n_obstacles, 3).
    obstacle_radii : numpy.ndarray
        Obstacle radii (n_obstacles,).

    Returns
    -------
    numpy.ndarray
        Signed distances (n_spheres, n_obstacles).
        Positive = separated, negative = penetrating.
    """
    diff = sphere_positions[:, None, :] - obstacle_centers[None, :, :]
    dists = np.sqrt(np.sum(diff ** 2, axis=-1))
    return dists - sphere_radii[:, None] - obstacle_radii[None, :]


class SphereObstacleChecker(StateValidityChecker):
    """Spheres attached to robot segments against spherical obstacles.

    Parameters
    ----------
    kinematics : cioplan.kinematics.ForwardKinematicsSolver
        Solver giving the segment frames of a joint array.
    robot : cioplan.model.RobotDescription
        Robot the spheres are attached to.
    spheres : list[tuple(str, array-like, float)]
        ``(segment_name, local_center, radius)`` for every robot sphere.
    obstacles : list[tuple(array-like, float)]
        ``(center, radius)`` for every obstacle.
    """

    def __init__(self, kinematics, robot, spheres, obstacles):
        self.kinematics = kinematics
        self.segment_indices = np.array(
            [robot.segment_index(name) for name, _, _ in spheres],
            dtype=np.int64)
        self.local_centers = np.array(
            [c for _, c, _ in spheres], dtype=np.float64).reshape(-1, 3)
        self.radii = np.array([r for _, _, r in spheres], dtype=np.float64)
        self.obstacle_centers = np.array(
            [c for c, _ in obstacles], dtype=np.float64).reshape(-1, 3)
        self.obstacle_radii = np.array(
            [r for _, r in obstacles], dtype=np.float64)

    def sphere_positions(self, joint_array):
        frames = self.kinematics.fk_full(joint_array).segment_frames
        frames = frames[self.segment_indices]
        return np.einsum('ijk,ik->ij', frames[:, :3, :3],
                         self.local_centers) + frames[:, :3, 3]

    def signed_distances(self, joint_array):
        return compute_sphere_obstacle_distances(
            self.sphere_positions(joint_array), self.radii,
            self.obstacle_centers, self.obstacle_radii)

    def is_state_valid(self, joint_array):
        if len(self.radii) == 0 or len(self.obstacle_radii) == 0:
            return True
        return bool(np.all(self.signed_distances(joint_array) >= 0.0))

    def collision_depth_sum(self, joint_array):
        if len(self.radii) == 0 or len(self.obstacle_radii) == 0:
            return 0.0
        distances = self.signed_distances(joint_array)
        return float(-np.sum(np.minimum(distances, 0.0)))
