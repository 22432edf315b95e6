"""Black-box minimizers of a scalar objective."""

from abc import ABC
from abc import abstractmethod

import numpy as np
from scipy.optimize import minimize


class MinimizeResult:
    """Result of a minimization.

    Attributes
    ----------
    x : ndarray
        Last iterate.
    fun : float
        Objective value at ``x``.
    success : bool
        Whether the stopping tolerance was met.
    iterations : int
        Number of iterations.
    n_evaluations : int
        Number of objective evaluations.
    message : str
        Status message.
    """

    def __init__(
        self,
        x,
        fun,
        success=True,
        iterations=0,
        n_evaluations=0,
        message='',
    ):
        self.x = np.asarray(x)
        self.fun = fun
        self.success = success
        self.iterations = iterations
        self.n_evaluations = n_evaluations
        self.message = message


class Minimizer(ABC):
    """Interface of a minimizer working without analytic gradients."""

    @abstractmethod
    def minimize(self, objective, x0, history_size, tolerance):
        """Minimize ``objective`` starting from ``x0``.

        Parameters
        ----------
        objective : callable
            ``objective(x) -> float``.
        x0 : ndarray
            Initial vector.
        history_size : int
            Number of correction pairs of the quasi-Newton update.
        tolerance : float
            Relative objective change under which the search stops.

        Returns
        -------
        MinimizeResult
            Result. ``success`` is False if the budget ran out first.
        """
        pass


class LBFGSMinimizer(Minimizer):
    """SciPy L-BFGS-B with finite-difference gradients.

    Parameters
    ----------
    max_iterations : int or None
        Iteration budget, scipy's default if None.
    max_evaluations : int or None
        Objective evaluation budget, scipy's default if None.
    """

    def __init__(self, max_iterations=None, max_evaluations=None):
        self.max_iterations = max_iterations
        self.max_evaluations = max_evaluations

    def minimize(self, objective, x0, history_size, tolerance):
        options = {
            'maxcor': history_size,
            'ftol': tolerance,
        }
        if self.max_iterations is not None:
            options['maxiter'] = self.max_iterations
        if self.max_evaluations is not None:
            options['maxfun'] = self.max_evaluations

        result = minimize(
            objective, np.asarray(x0, dtype=np.float64),
            method='L-BFGS-B',
            jac=None,
            options=options,
        )
        return MinimizeResult(
            x=result.x,
            fun=float(result.fun),
            success=bool(result.success),
            iterations=int(result.nit),
            n_evaluations=int(result.nfev),
            message=str(result.message),
        )
