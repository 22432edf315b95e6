"""Weighted sum of per-waypoint cost terms."""

from logging import getLogger

import numpy as np

from cioplan.exceptions import PreconditionViolation


logger = getLogger(__name__)


class CostTerm:
    """Definition of one cost term.

    This class holds the function computing the per-waypoint costs and
    its weight, allowing the accumulator to combine terms.
    """

    def __init__(
        self,
        name,
        cost_fn,
        weight=1.0,
        hard_limit=None,
        weight_parameter=None,
    ):
        """Initialize cost term.

        Parameters
        ----------
        name : str
            Term name for logging.
        cost_fn : callable
            ``cost_fn(evaluator)`` returning the per-waypoint costs
            (n_waypoints,).
        weight : float
            Term weight.
        hard_limit : float or None
            The evaluation is infeasible if the unweighted trajectory cost
            of this term exceeds it.
        weight_parameter : str or None
            Name of a ``PlanningParameters`` attribute the weight is
            refreshed from on every computation.
        """
        self.name = name
        self.cost_fn = cost_fn
        self.weight = weight
        self.hard_limit = hard_limit
        self.weight_parameter = weight_parameter
        self.waypoint_costs = None

    @property
    def cost(self):
        if self.waypoint_costs is None:
            return 0.0
        return float(np.sum(self.waypoint_costs))

    @property
    def is_feasible(self):
        return self.hard_limit is None or self.cost <= self.hard_limit


def _smoothness_costs(evaluator):
    return evaluator.smoothness.waypoint_costs()


def _velocity_consistency_costs(evaluator):
    return evaluator.smoothness.velocity_residual_costs()


def _contact_invariant_costs(evaluator):
    return evaluator.scratch.contact_invariant_costs


def _physics_violation_costs(evaluator):
    return evaluator.scratch.physics_violation_costs


def _collision_costs(evaluator):
    return evaluator.scratch.collision_costs


class TrajectoryCostAccumulator(object):
    """Combine cost terms into per-waypoint and total costs.

    Parameters
    ----------
    terms : list[CostTerm], optional
        Terms to combine. :meth:`default` builds the usual set.
    """

    def __init__(self, terms=()):
        self.terms = list(terms)
        self.waypoint_costs = None
        self.trajectory_cost = 0.0
        self.is_feasible = True

    @classmethod
    def default(cls):
        """Build the usual set of terms.

        Smoothness, velocity consistency, contact-invariant, physics
        violation and collision. The velocity consistency term ties the free velocities to the
        central difference of the free positions.

        The collision term is a hard constraint: any penetration makes the
        evaluation infeasible.
        """
        return cls([
            CostTerm('smoothness', _smoothness_costs,
                     weight_parameter='smoothness_weight'),
            CostTerm('velocity_consistency', _velocity_consistency_costs,
                     weight_parameter='velocity_consistency_weight'),
            CostTerm('contact_invariant', _contact_invariant_costs,
                     weight_parameter='contact_invariant_weight'),
            CostTerm('physics_violation', _physics_violation_costs,
                     weight_parameter='physics_violation_weight'),
            CostTerm('collision', _collision_costs, hard_limit=0.0,
                     weight_parameter='collision_weight'),
        ])

    def add(self, term):
        self.terms.append(term)
        return term

    def term(self, name):
        for t in self.terms:
            if t.name == name:
                return t
        raise KeyError('Unknown cost term {}'.format(name))

    def compute(self, evaluator):
        """Evaluate every term on the evaluator's current state.

        Returns
        -------
        float
            Total weighted cost.
        """
        n = evaluator.store.n_waypoints
        if self.waypoint_costs is None or len(self.waypoint_costs) != n:
            self.waypoint_costs = np.zeros(n)
        else:
            self.waypoint_costs[...] = 0.0
        self.is_feasible = True
        for term in self.terms:
            if term.weight_parameter is not None:
                term.weight = getattr(evaluator.parameters,
                                      term.weight_parameter)
            costs = np.asarray(term.cost_fn(evaluator), dtype=np.float64)
            if costs.shape != (n,):
                raise PreconditionViolation(
                    'Cost term {} returned shape {}, expected ({},)'.format(
                        term.name, costs.shape, n))
            term.waypoint_costs = costs.copy()
            self.waypoint_costs += term.weight * costs
            if not term.is_feasible:
                self.is_feasible = False
        self.trajectory_cost = float(np.sum(self.waypoint_costs))
        return self.trajectory_cost

    def waypoint_cost(self, point):
        return self.waypoint_costs[point]

    def summary(self):
        """Return ``{term name: weighted trajectory cost}``."""
        return {term.name: term.weight * term.cost for term in self.terms}

    def log_summary(self, iteration=None):
        parts = ['{}: {:.6g}'.format(name, value)
                 for name, value in self.summary().items()]
        prefix = '' if iteration is None else '[{}] '.format(iteration)
        logger.info('%sTotal cost %.6g (%s)%s', prefix, self.trajectory_cost,
                    ', '.join(parts),
                    '' if self.is_feasible else ' infeasible')
