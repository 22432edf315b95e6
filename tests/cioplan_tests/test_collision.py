import unittest

import numpy as np
from numpy import testing

from cioplan.collision import AlwaysValidChecker
from cioplan.collision import compute_sphere_obstacle_distances
from cioplan.collision import SphereObstacleChecker
from cioplan.kinematics import TreeKinematics

from builders import build_arm_robot


class TestSphereObstacleChecker(unittest.TestCase):

    def setUp(self):
        robot = build_arm_robot()
        self.checker = SphereObstacleChecker(
            TreeKinematics(robot), robot,
            spheres=[('tip', (0, 0, 0), 0.1)],
            obstacles=[((0, 1, 0), 0.2)])

    def test_distances(self):
        d = compute_sphere_obstacle_distances(
            np.array([[0.0, 0, 0], [3, 0, 0]]), np.array([0.5, 0.5]),
            np.array([[1.0, 0, 0]]), np.array([0.25]))
        testing.assert_almost_equal(d, [[0.25], [1.25]])

    def test_free_state(self):
        self.assertTrue(self.checker.is_state_valid(np.zeros(1)))
        self.assertEqual(self.checker.collision_depth_sum(np.zeros(1)), 0.0)

    def test_colliding_state(self):
        q = np.array([np.pi / 2])
        testing.assert_almost_equal(self.checker.sphere_positions(q),
                                    [[0, 1, 0]])
        self.assertFalse(self.checker.is_state_valid(q))
        self.assertAlmostEqual(self.checker.collision_depth_sum(q), 0.3)

    def test_without_obstacles(self):
        robot = build_arm_robot()
        checker = SphereObstacleChecker(
            TreeKinematics(robot), robot, [('tip', (0, 0, 0), 0.1)], [])
        self.assertTrue(checker.is_state_valid(np.zeros(1)))
        self.assertEqual(checker.collision_depth_sum(np.zeros(1)), 0.0)

    def test_always_valid(self):
        checker = AlwaysValidChecker()
        self.assertTrue(checker.is_state_valid(np.zeros(3)))
        self.assertEqual(checker.collision_depth_sum(np.zeros(3)), 0.0)
