from logging import getLogger

import numpy as np

from cioplan.collision import AlwaysValidChecker
from cioplan.config import PlanningParameters
from cioplan.cost.accumulator import TrajectoryCostAccumulator
from cioplan.cost.contact import ContactStabilityEvaluator
from cioplan.cost.dynamics import RigidBodyDynamicsEvaluator
from cioplan.cost.smoothness import SmoothnessModel
from cioplan.evaluation.observer import ObserverList
from cioplan.evaluation.scratch import EvaluationScratch
from cioplan.exceptions import PreconditionViolation


logger = getLogger(__name__)


class TrajectoryEvaluator(object):
    """Cost of a trajectory for given optimization variables.

    One evaluation writes the free variables into the store, enforces the
    joint limits, refreshes the full trajectory and its forward
    kinematics, checks every interior state and aggregates the costs.

    Evaluations must not run concurrently: they share the store and the
    scratch buffers.

    Parameters
    ----------
    store : cioplan.trajectory.TrajectoryStore
        Trajectory of the planning attempt, initialized.
    robot : cioplan.model.RobotDescription
        Robot model.
    kinematics : cioplan.kinematics.ForwardKinematicsSolver
        Forward kinematics of the full joint array.
    validity_checker : cioplan.collision.StateValidityChecker, optional
        Collision queries. Every state is valid if omitted.
    force_solver : cioplan.contact_force.ContactForceSolver, optional
        Contact force solver of the stability costs.
    parameters : cioplan.config.PlanningParameters, optional
        Planning parameters.
    accumulator : cioplan.cost.TrajectoryCostAccumulator, optional
        Cost terms. Defaults to ``TrajectoryCostAccumulator.default()``.
    observers : list[cioplan.evaluation.EvaluationObserver]
        Called after every evaluation.
    ground : cioplan.model.GroundPlane, optional
        Ground of the contact costs.
    """

    def __init__(self, store, robot, kinematics, validity_checker=None,
                 force_solver=None, parameters=None, accumulator=None,
                 observers=(), ground=None):
        if parameters is None:
            parameters = PlanningParameters()
        if validity_checker is None:
            validity_checker = AlwaysValidChecker()
        if accumulator is None:
            accumulator = TrajectoryCostAccumulator.default()
        self.store = store
        self.robot = robot
        self.group = store.group
        self.kinematics = kinematics
        self.validity_checker = validity_checker
        self.parameters = parameters
        self.accumulator = accumulator
        self.observers = ObserverList(observers)

        self.smoothness = SmoothnessModel(store, parameters)
        self.dynamics = RigidBodyDynamicsEvaluator(robot, parameters)
        self.stability = ContactStabilityEvaluator(
            self.group, force_solver, parameters, ground)
        self.scratch = EvaluationScratch.for_robot(
            store.n_waypoints, robot, self.group)

        self.evaluation_count = 0
        self.trajectory_validity = True
        self.is_collision_free = False
        self._kinematics_initialized = False
        self._kinematics_range = (0, store.n_waypoints - 1)

    @property
    def n_waypoints(self):
        return self.store.n_waypoints

    @property
    def is_first_evaluation(self):
        return not self._kinematics_initialized

    @property
    def is_feasible(self):
        return self.trajectory_validity and self.accumulator.is_feasible

    @property
    def state_validity(self):
        return self.scratch.state_validity

    def reset(self):
        """Start a new planning attempt on the current store contents."""
        self.evaluation_count = 0
        self._kinematics_initialized = False
        self.is_collision_free = False

    def evaluate(self, positions, velocities, contacts, costs=None):
        """Evaluate the trajectory for the given free variables.

        Parameters
        ----------
        positions : numpy.ndarray
            Free joint positions (n_free, n_joints).
        velocities : numpy.ndarray
            Free joint velocities (n_free, n_joints).
        contacts : numpy.ndarray
            Contact activations (n_contact_phases, n_contacts).
        costs : numpy.ndarray, optional
            Output of the per-waypoint costs, length n_waypoints.

        Returns
        -------
        total : float
            Trajectory cost.
        costs : numpy.ndarray
            Per-waypoint costs.

        Raises
        ------
        PreconditionViolation
            If a block or ``costs`` has the wrong size.
        """
        if costs is not None and np.shape(costs) != (self.n_waypoints,):
            raise PreconditionViolation(
                'Cost vector shape {} does not match ({},)'.format(
                    np.shape(costs), self.n_waypoints))
        self.store.write_free_block(positions, velocities, contacts)
        self.smoothness.refresh()
        self.handle_joint_limits()
        self.store.sync_full_from_group()

        self.scratch.begin_evaluation()
        self.is_collision_free = self.perform_forward_kinematics()
        self.compute_trajectory_validity()
        self.is_collision_free &= self.trajectory_validity

        total = self.compute_costs()
        self.is_collision_free &= self.accumulator.is_feasible

        waypoint_costs = self.accumulator.waypoint_costs
        if costs is None:
            costs = waypoint_costs.copy()
        else:
            costs[...] = waypoint_costs

        self.evaluation_count += 1
        logger.debug('Evaluation %d cost %f', self.evaluation_count, total)
        self.observers.on_evaluation_end(self, total)
        return total, costs

    def handle_joint_limits(self):
        if self.parameters.smooth_joint_limits:
            return self.store.correct_joint_limits(
                self.smoothness, self.parameters.joint_limit_passes)
        return self.store.project_joint_limits()

    def perform_forward_kinematics(self):
        """Refresh the kinematics cache.

        The first evaluation of an attempt computes every waypoint. Later
        evaluations only recompute ``1 .. n_waypoints - 2``; the start and
        the last goal waypoint keep their cached results.

        Returns
        -------
        bool
            True. Collisions are reported by the validity check.
        """
        n = self.n_waypoints
        if self._kinematics_initialized:
            start, end = 1, n - 2
        else:
            start, end = 0, n - 1
        for point in range(start, end + 1):
            q = self.store.full_trajectory[point]
            if point == 0:
                result = self.kinematics.fk_full(q)
            else:
                result = self.kinematics.fk_partial(q)
            self.scratch.store_kinematics(point, result)
        self._kinematics_initialized = True
        self._kinematics_range = (start, end)
        return True

    def compute_trajectory_validity(self):
        self.trajectory_validity = True
        for point in range(1, self.n_waypoints - 1):
            valid = bool(self.validity_checker.is_state_valid(
                self.store.full_trajectory[point]))
            self.scratch.state_validity[point] = valid
            if not valid:
                self.trajectory_validity = False
        return self.trajectory_validity

    def compute_collision_costs(self):
        for point in range(self.n_waypoints):
            self.scratch.collision_costs[point] = \
                self.validity_checker.collision_depth_sum(
                    self.store.full_trajectory[point])

    def compute_costs(self):
        """Run the physics pipeline and aggregate the cost terms.

        Also used to report the costs of the current store contents after
        an optimization.

        Returns
        -------
        float
            Total weighted cost.
        """
        self.compute_collision_costs()
        if self.group.participates_in_dynamics:
            start, end = self._kinematics_range
            self.dynamics.compute(self.scratch, start, end,
                                  self.store.discretization)
            self.stability.compute(self.scratch, self.store)
        return self.accumulator.compute(self)
