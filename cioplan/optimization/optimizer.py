from logging import getLogger

import numpy as np

from cioplan.optimization.minimizer import LBFGSMinimizer
from cioplan.trajectory.schema import OptimizationVectorSchema


logger = getLogger(__name__)


class OptimizationResult:
    """Result of :meth:`IterativeOptimizer.optimize`.

    Attributes
    ----------
    vector : ndarray
        Final optimization vector.
    trajectory : ndarray
        Final group trajectory (n_waypoints, n_joints).
    cost : float
        Total cost of the final trajectory.
    waypoint_costs : ndarray
        Per-waypoint costs of the final trajectory.
    success : bool
        Whether the minimizer met its tolerance.
    iterations : int
        Number of minimizer iterations.
    n_evaluations : int
        Number of objective evaluations.
    message : str
        Minimizer status message.
    feasible : bool
        Whether the final trajectory is feasible.
    """

    def __init__(
        self,
        vector,
        trajectory,
        cost,
        waypoint_costs,
        success=True,
        iterations=0,
        n_evaluations=0,
        message='',
        feasible=True,
    ):
        self.vector = np.asarray(vector)
        self.trajectory = np.asarray(trajectory)
        self.cost = cost
        self.waypoint_costs = np.asarray(waypoint_costs)
        self.success = success
        self.iterations = iterations
        self.n_evaluations = n_evaluations
        self.message = message
        self.feasible = feasible


class ObjectiveAdapter(object):
    """Objective function of the minimizer.

    Owns the blocks a flat vector is unpacked into, so repeated calls do
    not allocate.

    Parameters
    ----------
    evaluator : cioplan.evaluation.TrajectoryEvaluator
        Evaluator the blocks are passed to.
    schema : cioplan.trajectory.OptimizationVectorSchema
        Layout of the vector.
    """

    def __init__(self, evaluator, schema):
        self.evaluator = evaluator
        self.schema = schema
        self.positions = np.zeros((schema.n_free, schema.n_joints))
        self.velocities = np.zeros((schema.n_free, schema.n_joints))
        self.contacts = np.zeros((schema.n_contact_phases,
                                  schema.n_contacts))
        self.costs = np.zeros(evaluator.n_waypoints)
        self.n_calls = 0

    def __call__(self, vector):
        self.schema.unpack(vector, self.positions, self.velocities,
                           self.contacts)
        total, _ = self.evaluator.evaluate(
            self.positions, self.velocities, self.contacts, self.costs)
        self.n_calls += 1
        return total


class IterativeOptimizer(object):
    """Minimize the trajectory cost over the free variables.

    Parameters
    ----------
    evaluator : cioplan.evaluation.TrajectoryEvaluator
        Objective. Its store holds the initial trajectory and receives
        the result.
    minimizer : cioplan.optimization.Minimizer, optional
        Defaults to :class:`LBFGSMinimizer`.
    parameters : cioplan.config.PlanningParameters, optional
        Defaults to the evaluator's parameters.
    random_state : int or numpy.random.RandomState, optional
        Source of the initial noise.
    """

    def __init__(self, evaluator, minimizer=None, parameters=None,
                 random_state=None):
        if parameters is None:
            parameters = evaluator.parameters
        if minimizer is None:
            minimizer = LBFGSMinimizer(
                max_iterations=parameters.max_iterations)
        if not isinstance(random_state, np.random.RandomState):
            random_state = np.random.RandomState(random_state)
        self.evaluator = evaluator
        self.minimizer = minimizer
        self.parameters = parameters
        self.random_state = random_state
        self.schema = OptimizationVectorSchema.from_store(evaluator.store)
        self.objective = ObjectiveAdapter(evaluator, self.schema)

    def initial_vector(self, add_noise=False):
        """Pack the store, optionally adding Gaussian noise.

        The noise is ``noise_scale * N(0, I)``.
        """
        vector = self.schema.pack_store(self.evaluator.store)
        if add_noise:
            vector += self.parameters.noise_scale \
                * self.random_state.standard_normal(self.schema.size)
        return vector

    def optimize(self, add_noise=False):
        """Run the minimizer from the current store contents.

        The last iterate is written back into the store whether or not
        the minimizer converged.

        Parameters
        ----------
        add_noise : bool
            Perturb the initial vector.

        Returns
        -------
        OptimizationResult
            Result.
        """
        evaluator = self.evaluator
        x0 = self.initial_vector(add_noise)
        logger.info('Optimizing %d variables (%d free waypoints, '
                    '%d joints, %d contacts)', self.schema.size,
                    self.schema.n_free, self.schema.n_joints,
                    self.schema.n_contacts)
        evaluator.observers.on_optimization_start(evaluator)
        n_calls = self.objective.n_calls

        result = self.minimizer.minimize(
            self.objective, x0,
            self.parameters.lbfgs_history,
            self.parameters.objective_delta_tolerance)
        if not result.success:
            logger.warning('Minimizer did not converge after %d '
                           'iterations: %s', result.iterations,
                           result.message)

        n_evaluations = self.objective.n_calls - n_calls
        self.objective(result.x)
        cost = evaluator.compute_costs()
        evaluator.accumulator.log_summary(evaluator.evaluation_count)

        optimization_result = OptimizationResult(
            vector=self.schema.pack_store(evaluator.store),
            trajectory=evaluator.store.positions.copy(),
            cost=cost,
            waypoint_costs=evaluator.accumulator.waypoint_costs.copy(),
            success=result.success,
            iterations=result.iterations,
            n_evaluations=n_evaluations,
            message=result.message,
            feasible=evaluator.is_feasible,
        )
        evaluator.observers.on_optimization_end(evaluator,
                                                optimization_result)
        logger.info('Optimization finished with cost %f', cost)
        return optimization_result
