import unittest

import numpy as np
from numpy import testing

from cioplan.config import PlanningParameters
from cioplan.evaluation import EvaluationObserver
from cioplan.evaluation import TrajectoryEvaluator
from cioplan.kinematics import TreeKinematics
from cioplan.optimization import IterativeOptimizer
from cioplan.optimization import LBFGSMinimizer
from cioplan.optimization import Minimizer
from cioplan.optimization import MinimizeResult
from cioplan.optimization import ObjectiveAdapter
from cioplan.trajectory import OptimizationVectorSchema

from builders import build_arm_group
from builders import build_arm_robot
from builders import build_arm_store
from builders import build_quadruped_group
from builders import build_quadruped_robot
from builders import build_quadruped_store


BUMPY = [0.0, 0.8, -0.5, 0.9, 0.0, 0.0]


class ShiftingMinimizer(Minimizer):
    """Moves every variable by ``shift`` without calling the objective."""

    def __init__(self, shift):
        self.shift = shift

    def minimize(self, objective, x0, history_size, tolerance):
        return MinimizeResult(x0 + self.shift, fun=0.0, success=False,
                              iterations=3, message='budget exhausted')


class RepeatingMinimizer(Minimizer):
    """Calls the objective ``n_calls`` times and keeps the start."""

    def __init__(self, n_calls):
        self.n_calls = n_calls

    def minimize(self, objective, x0, history_size, tolerance):
        for _ in range(self.n_calls):
            fun = objective(x0)
        return MinimizeResult(x0, fun=fun, iterations=1,
                              n_evaluations=self.n_calls)


class _Recorder(EvaluationObserver):

    def __init__(self):
        self.events = []

    def on_optimization_start(self, evaluator):
        self.events.append('start')

    def on_optimization_end(self, evaluator, result):
        self.events.append(('end', result.cost))


def _arm_evaluator(positions=BUMPY, parameters=None, observers=()):
    robot = build_arm_robot()
    store = build_arm_store(build_arm_group(), positions)
    return TrajectoryEvaluator(store, robot, TreeKinematics(robot),
                               parameters=parameters, observers=observers)


class TestLBFGSMinimizer(unittest.TestCase):

    def test_minimize_quadratic(self):
        target = np.array([1.0, -2.0, 3.0])

        def objective(x):
            return float(np.sum((x - target) ** 2))

        result = LBFGSMinimizer().minimize(objective, np.zeros(3), 10, 1e-12)
        self.assertTrue(result.success)
        testing.assert_almost_equal(result.x, target, decimal=4)
        self.assertGreater(result.n_evaluations, 0)

    def test_iteration_budget(self):
        weights = np.array([1.0, 1e2, 1e4])

        def objective(x):
            return float(np.sum(weights * (x - 1.0) ** 2))

        result = LBFGSMinimizer(max_iterations=1).minimize(
            objective, np.zeros(3), 10, 1e-12)
        self.assertFalse(result.success)
        self.assertEqual(result.iterations, 1)


class TestObjectiveAdapter(unittest.TestCase):

    def test_call(self):
        evaluator = _arm_evaluator()
        schema = OptimizationVectorSchema.from_store(evaluator.store)
        objective = ObjectiveAdapter(evaluator, schema)
        vector = schema.pack_store(evaluator.store)
        total = objective(vector)
        self.assertEqual(objective.n_calls, 1)
        self.assertEqual(evaluator.evaluation_count, 1)
        self.assertAlmostEqual(total, evaluator.accumulator.trajectory_cost)
        testing.assert_almost_equal(objective.costs.sum(), total)

    def test_contacts_are_magnitudes(self):
        robot = build_quadruped_robot()
        store = build_quadruped_store(build_quadruped_group(robot))
        evaluator = TrajectoryEvaluator(store, robot, TreeKinematics(robot))
        schema = OptimizationVectorSchema.from_store(store)
        vector = schema.pack_store(store)
        vector[:4] = -0.5
        ObjectiveAdapter(evaluator, schema)(vector)
        testing.assert_equal(store.contacts[0], 0.5)


class TestIterativeOptimizer(unittest.TestCase):

    def test_initial_vector(self):
        evaluator = _arm_evaluator()
        optimizer = IterativeOptimizer(evaluator)
        testing.assert_equal(optimizer.initial_vector(),
                             optimizer.schema.pack_store(evaluator.store))
        self.assertEqual(len(optimizer.initial_vector()), 6)

    def test_initial_noise(self):
        params = PlanningParameters(noise_scale=0.01)
        evaluator = _arm_evaluator(parameters=params)
        optimizer = IterativeOptimizer(evaluator, random_state=0)
        base = optimizer.schema.pack_store(evaluator.store)
        expected = base + 0.01 * np.random.RandomState(0).standard_normal(6)
        testing.assert_almost_equal(optimizer.initial_vector(True), expected)

    def test_optimize_reduces_cost(self):
        recorder = _Recorder()
        evaluator = _arm_evaluator(observers=[recorder])
        optimizer = IterativeOptimizer(evaluator)
        initial_cost = optimizer.objective(optimizer.initial_vector())

        with self.assertLogs('cioplan', 'INFO'):
            result = optimizer.optimize()
        self.assertLess(result.cost, 0.5 * initial_cost)
        self.assertTrue(result.feasible)
        self.assertGreater(result.n_evaluations, 1)
        self.assertAlmostEqual(result.waypoint_costs.sum(), result.cost)
        testing.assert_equal(result.trajectory, evaluator.store.positions)
        testing.assert_equal(
            result.vector, optimizer.schema.pack_store(evaluator.store))
        testing.assert_equal(evaluator.store.full_trajectory[:, 0],
                             evaluator.store.positions[:, 0])
        # boundary waypoints are not optimized
        testing.assert_equal(evaluator.store.positions[[0, 4, 5], 0], 0.0)
        self.assertEqual(recorder.events, ['start', ('end', result.cost)])

    def test_non_convergence_keeps_last_iterate(self):
        evaluator = _arm_evaluator()
        optimizer = IterativeOptimizer(evaluator,
                                       minimizer=ShiftingMinimizer(0.1))
        with self.assertLogs('cioplan', 'WARNING') as cm:
            result = optimizer.optimize()
        self.assertIn('did not converge', '\n'.join(cm.output))
        self.assertFalse(result.success)
        self.assertEqual(result.iterations, 3)
        self.assertEqual(result.message, 'budget exhausted')
        self.assertEqual(result.n_evaluations, 0)
        testing.assert_almost_equal(evaluator.store.positions[1:4, 0],
                                    np.array(BUMPY[1:4]) + 0.1)
        testing.assert_almost_equal(evaluator.store.velocities[1:4, 0], 0.1)

    def test_evaluation_count_excludes_write_back(self):
        evaluator = _arm_evaluator()
        optimizer = IterativeOptimizer(evaluator,
                                       minimizer=RepeatingMinimizer(3))
        optimizer.objective(optimizer.initial_vector())
        result = optimizer.optimize()
        self.assertTrue(result.success)
        self.assertEqual(result.n_evaluations, 3)
        self.assertEqual(optimizer.objective.n_calls, 1 + 3 + 1)
