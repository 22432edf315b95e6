import numpy as np

from cioplan.config import PlanningParameters
from cioplan.kinematics import TreeKinematics
from cioplan.math import make_transform
from cioplan.model import ContactPoint
from cioplan.model import GroupJoint
from cioplan.model import PlanningGroup
from cioplan.model import RobotDescription
from cioplan.model import Segment
from cioplan.trajectory import TrajectoryStore


BODY_HEIGHT = 0.5
BODY_MASS = 4.0
FOOT_OFFSETS = {
    'foot_fl': (0.3, 0.2),
    'foot_fr': (0.3, -0.2),
    'foot_hl': (-0.3, 0.2),
    'foot_hr': (-0.3, -0.2),
}


def build_quadruped_robot():
    """Floating box body on three prismatic joints with massless feet.

    With ``base_z == BODY_HEIGHT`` every foot touches the ground.
    """
    segments = [
        Segment('slider_x', joint_index=0, joint_type='prismatic',
                axis=(1, 0, 0)),
        Segment('slider_y', parent='slider_x', joint_index=1,
                joint_type='prismatic', axis=(0, 1, 0)),
        Segment('body', parent='slider_y', joint_index=2,
                joint_type='prismatic', axis=(0, 0, 1), mass=BODY_MASS,
                rotational_inertia=np.diag([0.1, 0.2, 0.3])),
    ]
    for name, (x, y) in sorted(FOOT_OFFSETS.items()):
        segments.append(Segment(
            name, parent='body',
            origin=make_transform(translation=(x, y, -BODY_HEIGHT))))
    segments.append(Segment(
        'foot_center', parent='body',
        origin=make_transform(translation=(0, 0, -BODY_HEIGHT))))
    return RobotDescription(segments, ['base_x', 'base_y', 'base_z'])


def build_quadruped_group(robot, contact_names=None,
                          participates_in_dynamics=True):
    if contact_names is None:
        contact_names = sorted(FOOT_OFFSETS)
    joints = [GroupJoint('base_x', 0, -1.0, 1.0),
              GroupJoint('base_y', 1, -1.0, 1.0),
              GroupJoint('base_z', 2, 0.0, 2.0)]
    contacts = [ContactPoint(name, robot) for name in contact_names]
    return PlanningGroup('whole_body', joints, contacts,
                         participates_in_dynamics=participates_in_dynamics)


def build_quadruped_store(group, n_waypoints=6, discretization=0.1,
                          height=BODY_HEIGHT, contact_value=1.0):
    store = TrajectoryStore(group, 3, n_waypoints, discretization)
    trajectory = np.zeros((n_waypoints, 3))
    trajectory[:, 2] = height
    store.initialize(trajectory, contact_value=contact_value)
    return store


def build_arm_robot(mass=1.0):
    """One revolute joint about z carrying a 1 m link."""
    segments = [
        Segment('link0', joint_index=0, joint_type='revolute',
                axis=(0, 0, 1), mass=mass, center_of_gravity=(0.5, 0, 0)),
        Segment('tip', parent='link0',
                origin=make_transform(translation=(1.0, 0, 0))),
    ]
    return RobotDescription(segments, ['joint0'])


def build_arm_group(min_angle=None, max_angle=None):
    return PlanningGroup('arm', [GroupJoint('joint0', 0, min_angle,
                                            max_angle)])


def build_arm_store(group, positions, discretization=1.0):
    positions = np.asarray(positions, dtype=np.float64)
    store = TrajectoryStore(group, 1, len(positions), discretization)
    store.initialize(positions[:, None])
    return store


def velocity_only_parameters(**kwargs):
    """Parameters whose smoothness cost is the squared velocity only."""
    return PlanningParameters(smoothness_cost_velocity=1.0,
                              smoothness_cost_acceleration=0.0, **kwargs)


class CountingKinematics(TreeKinematics):

    def __init__(self, robot):
        super(CountingKinematics, self).__init__(robot)
        self.full_calls = []
        self.partial_calls = []

    def fk_full(self, joint_array):
        self.full_calls.append(np.array(joint_array))
        return super(CountingKinematics, self).fk_full(joint_array)

    def fk_partial(self, joint_array):
        self.partial_calls.append(np.array(joint_array))
        return super(CountingKinematics, self).fk_full(joint_array)

    def clear(self):
        self.full_calls = []
        self.partial_calls = []
