#!/usr/bin/env python

import argparse
import logging

import numpy as np

from cioplan.collision import SphereObstacleChecker
from cioplan.config import PlanningParameters
from cioplan.evaluation import DiagnosticsObserver
from cioplan.evaluation import TrajectoryEvaluator
from cioplan.kinematics import TreeKinematics
from cioplan.math import make_transform
from cioplan.model import ContactPoint
from cioplan.model import GroupJoint
from cioplan.model import PlanningGroup
from cioplan.model import RobotDescription
from cioplan.model import Segment
from cioplan.optimization import IterativeOptimizer
from cioplan.trajectory import TrajectoryStore


parser = argparse.ArgumentParser(
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
parser.add_argument(
    '-n', type=int, default=12,
    help='number of waypoints.')
parser.add_argument(
    '--dt', type=float, default=0.1,
    help='discretization step [s].')
parser.add_argument(
    '--config', type=str, default=None,
    help='YAML file with planning parameters. '
    'It is re-read during the optimization.')
parser.add_argument(
    '--with-obstacle',
    action='store_true',
    help='Put a spherical obstacle above the straight line path.')
parser.add_argument(
    '--noise',
    action='store_true',
    help='Perturb the initial trajectory.')
parser.add_argument(
    '--seed', type=int, default=0,
    help='random seed of the initial noise.')
args = parser.parse_args()

logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s %(name)s %(levelname)s %(message)s')

body_height = 0.4
feet = {
    'lf_foot': (0.25, 0.15),
    'rf_foot': (0.25, -0.15),
    'lh_foot': (-0.25, 0.15),
    'rh_foot': (-0.25, -0.15),
}

# floating body on three prismatic joints and a yaw joint
segments = [
    Segment('base_x_link', joint_index=0, joint_type='prismatic',
            axis=(1, 0, 0)),
    Segment('base_y_link', parent='base_x_link', joint_index=1,
            joint_type='prismatic', axis=(0, 1, 0)),
    Segment('base_z_link', parent='base_y_link', joint_index=2,
            joint_type='prismatic', axis=(0, 0, 1)),
    Segment('torso', parent='base_z_link', joint_index=3,
            joint_type='revolute', axis=(0, 0, 1), mass=10.0,
            rotational_inertia=np.diag([0.08, 0.25, 0.3])),
]
for name, (x, y) in feet.items():
    segments.append(Segment(
        name, parent='torso',
        origin=make_transform(translation=(x, y, -body_height))))
robot = RobotDescription(
    segments, ['base_x', 'base_y', 'base_z', 'base_yaw'])

group = PlanningGroup(
    'whole_body',
    [GroupJoint('base_x', 0, -2.0, 2.0),
     GroupJoint('base_y', 1, -2.0, 2.0),
     GroupJoint('base_z', 2, 0.2, 0.8),
     GroupJoint('base_yaw', 3, -np.pi, np.pi)],
    [ContactPoint(name, robot) for name in feet],
    participates_in_dynamics=True)

if args.config is not None:
    params = PlanningParameters.from_yaml(args.config)
else:
    params = PlanningParameters(friction_coefficient=0.7,
                                diagnostics_interval=500)

kinematics = TreeKinematics(robot)
if args.with_obstacle:
    checker = SphereObstacleChecker(
        kinematics, robot,
        spheres=[('torso', (0, 0, 0), 0.2)],
        obstacles=[((0.25, 0.0, 0.75), 0.2)])
else:
    checker = None

store = TrajectoryStore(group, robot.n_joints, args.n, args.dt)
start = np.array([0.0, 0.0, body_height, 0.0])
goal = np.array([0.5, 0.0, body_height, 0.0])
store.initialize_from_endpoints(start, goal)

evaluator = TrajectoryEvaluator(
    store, robot, kinematics, validity_checker=checker, parameters=params,
    observers=[DiagnosticsObserver()])
optimizer = IterativeOptimizer(evaluator, random_state=args.seed)
result = optimizer.optimize(add_noise=args.noise)

print('success: {}  feasible: {}  cost: {:.6f}'.format(
    result.success, result.feasible, result.cost))
print('evaluations: {}  iterations: {}'.format(
    result.n_evaluations, result.iterations))
print('waypoint  x       y       z       yaw     cost')
for i, (q, c) in enumerate(zip(result.trajectory, result.waypoint_costs)):
    print('{:8d}  {}  {:.4f}'.format(
        i, '  '.join('{:6.3f}'.format(v) for v in q), c))
