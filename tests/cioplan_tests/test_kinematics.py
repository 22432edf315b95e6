import unittest

import numpy as np
from numpy import pi
from numpy import testing

from cioplan.kinematics import TreeKinematics
from cioplan.math import make_transform

from builders import BODY_HEIGHT
from builders import build_arm_robot
from builders import build_quadruped_robot


class TestTreeKinematics(unittest.TestCase):

    def test_revolute_arm(self):
        robot = build_arm_robot()
        kinematics = TreeKinematics(robot)
        result = kinematics.fk_full(np.array([pi / 2]))
        tip = robot.segment_index('tip')
        testing.assert_almost_equal(result.segment_frames[tip, :3, 3],
                                    [0, 1, 0])
        testing.assert_almost_equal(result.joint_axes[0], [0, 0, 1])
        testing.assert_almost_equal(result.joint_positions[tip], [0, 1, 0])
        self.assertEqual(result.segment_frames.shape, (2, 4, 4))

    def test_prismatic_base(self):
        robot = build_quadruped_robot()
        kinematics = TreeKinematics(robot)
        result = kinematics.fk_full(np.array([0.1, -0.2, BODY_HEIGHT]))
        body = robot.segment_index('body')
        testing.assert_almost_equal(result.segment_frames[body, :3, 3],
                                    [0.1, -0.2, BODY_HEIGHT])
        testing.assert_almost_equal(result.segment_frames[body, :3, :3],
                                    np.eye(3))
        foot = robot.segment_index('foot_hr')
        testing.assert_almost_equal(result.segment_frames[foot, :3, 3],
                                    [-0.2, -0.4, 0.0])
        testing.assert_almost_equal(result.joint_axes[1], [0, 1, 0])

    def test_partial_matches_full(self):
        robot = build_quadruped_robot()
        kinematics = TreeKinematics(robot)
        q = np.array([0.3, 0.1, 0.7])
        full = kinematics.fk_full(q)
        partial = kinematics.fk_partial(q)
        testing.assert_equal(full.segment_frames, partial.segment_frames)

    def test_base_frame(self):
        robot = build_arm_robot()
        kinematics = TreeKinematics(
            robot, base_frame=make_transform(translation=(0, 0, 1)))
        result = kinematics.fk_full(np.zeros(1))
        testing.assert_almost_equal(result.segment_frames[1, :3, 3],
                                    [1, 0, 1])

    def test_wrong_joint_array(self):
        kinematics = TreeKinematics(build_arm_robot())
        with self.assertRaises(ValueError):
            kinematics.fk_full(np.zeros(2))
