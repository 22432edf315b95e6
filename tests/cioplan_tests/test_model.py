import unittest

import numpy as np
from numpy import testing

from cioplan.math import make_transform
from cioplan.math import rotation_matrix
from cioplan.model import ContactPoint
from cioplan.model import GroundPlane
from cioplan.model import GroupJoint
from cioplan.model import PlanningGroup
from cioplan.model import RobotDescription
from cioplan.model import Segment

from builders import BODY_MASS
from builders import build_quadruped_robot


class TestRobotDescription(unittest.TestCase):

    def test_mass_properties(self):
        robot = build_quadruped_robot()
        self.assertEqual(robot.n_joints, 3)
        self.assertEqual(robot.n_segments, 8)
        testing.assert_equal(robot.mass_segment_indices, [2])
        testing.assert_equal(robot.masses, [BODY_MASS])
        self.assertEqual(robot.total_mass, BODY_MASS)
        self.assertEqual(robot.centers_of_gravity.shape, (1, 3))
        self.assertEqual(robot.rotational_inertias.shape, (1, 3, 3))

    def test_indices(self):
        robot = build_quadruped_robot()
        self.assertEqual(robot.segment_index('body'), 2)
        self.assertEqual(robot.parent_index('foot_fl'), 2)
        self.assertIsNone(robot.parent_index('slider_x'))
        with self.assertRaises(KeyError):
            robot.segment_index('head')

    def test_invalid_trees(self):
        with self.assertRaises(ValueError):
            RobotDescription([Segment('a', parent='b'), Segment('b')], [])
        with self.assertRaises(ValueError):
            RobotDescription([Segment('a'), Segment('a')], [])
        with self.assertRaises(ValueError):
            RobotDescription([Segment('a', joint_index=1)], ['j0'])

    def test_invalid_segments(self):
        with self.assertRaises(ValueError):
            Segment('a', joint_index=0, joint_type='spherical')
        with self.assertRaises(ValueError):
            Segment('a', joint_index=0, joint_type='fixed')
        with self.assertRaises(ValueError):
            Segment('a', joint_type='prismatic')
        self.assertEqual(Segment('a', joint_index=0).joint_type, 'revolute')
        self.assertEqual(Segment('a').joint_type, 'fixed')


class TestPlanningGroup(unittest.TestCase):

    def test_group_to_full(self):
        group = PlanningGroup('legs', [GroupJoint('b', 2), GroupJoint('a', 0)])
        testing.assert_equal(group.group_to_full, [2, 0])
        self.assertEqual(group.n_joints, 2)
        self.assertEqual(group.n_contacts, 0)
        self.assertFalse(group.participates_in_dynamics)
        self.assertEqual(group.joint_names, ['b', 'a'])

    def test_duplicated_joint(self):
        with self.assertRaises(ValueError):
            PlanningGroup('legs', [GroupJoint('a', 0), GroupJoint('b', 0)])

    def test_limits(self):
        self.assertTrue(GroupJoint('a', 0, -1.0, 1.0).has_limits)
        self.assertFalse(GroupJoint('a', 0, -1.0).has_limits)
        with self.assertRaises(ValueError):
            GroupJoint('a', 0, 1.0, -1.0)


class TestContactPoint(unittest.TestCase):

    def setUp(self):
        self.robot = build_quadruped_robot()

    def _frames(self, n_points, foot_frame):
        frames = np.tile(np.eye(4), (n_points, self.robot.n_segments, 1, 1))
        frames[:, self.robot.segment_index('foot_fl')] = foot_frame
        return frames

    def test_root_contact_rejected(self):
        with self.assertRaises(ValueError):
            ContactPoint('slider_x', self.robot)

    def test_queries(self):
        contact = ContactPoint('foot_fl', self.robot)
        self.assertEqual(contact.parent_segment_index, 2)
        frames = self._frames(3, make_transform(translation=(1, 2, 0.25)))
        testing.assert_almost_equal(contact.position(1, frames),
                                    [1, 2, 0.25])
        self.assertAlmostEqual(contact.distance_to_ground(1, frames), 0.25)
        self.assertAlmostEqual(
            contact.distance_to_ground(1, frames, GroundPlane(0.5)), -0.25)
        testing.assert_equal(contact.parent_frame(1, frames), np.eye(4))

    def test_planted_contact_has_no_violation(self):
        contact = ContactPoint('foot_fl', self.robot)
        frames = self._frames(5, make_transform(translation=(1, 2, 0)))
        violations = np.full((5, 4), np.nan)
        velocities = np.full((5, 3), np.nan)
        contact.update_violation(1, 3, 0.1, frames, violations, velocities)
        testing.assert_almost_equal(violations, 0.0)
        testing.assert_almost_equal(velocities, 0.0)

    def test_violation(self):
        contact = ContactPoint('foot_fl', self.robot)
        tilt = rotation_matrix(0.3, [1, 0, 0])
        frames = self._frames(5, make_transform(tilt))
        for i in range(5):
            frames[i, contact.segment_index, :3, 3] = (0.1 * i, 0, 0.2)
        violations = np.zeros((5, 4))
        velocities = np.zeros((5, 3))
        contact.update_violation(1, 3, 0.1, frames, violations, velocities)
        normal = tilt[:, 2]
        testing.assert_almost_equal(
            violations[2], [0.2, normal[0], normal[1], 1.0 - normal[2]])
        testing.assert_equal(violations[[0, 4]], 0.0)
        testing.assert_almost_equal(velocities[1:4], [[1, 0, 0]] * 3)
        testing.assert_equal(velocities[[0, 4]], 0.0)
