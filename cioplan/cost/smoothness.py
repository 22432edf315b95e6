from logging import getLogger

import numpy as np

from cioplan.config import PlanningParameters
from cioplan.math import central_difference
from cioplan.math import DIFF_RULES
from cioplan.math import difference_matrix
from cioplan.math import VELOCITY_RULE


logger = getLogger(__name__)


class SmoothnessModel(object):
    """Quadratic smoothness cost of every group joint.

    For joint ``j`` the cost matrix is::

        Q_j = sum_d w_d * c_j * D_d^T D_d + ridge * I

    where ``D_d`` applies the velocity, acceleration or jerk stencil to
    the joint column, ``w_d`` is the global weight of that derivative and
    ``c_j`` the per-joint multiplier. When ``normalize_smoothness`` is set
    every matrix is multiplied by :meth:`max_inverse_eigenvalue_scale` so
    that the stiffest joint does not dominate by scale alone.

    The matrices are rebuilt by :meth:`refresh` when the smoothness
    parameters change, e.g. after ``PlanningParameters.reload``.

    Parameters
    ----------
    store : cioplan.trajectory.TrajectoryStore
        Trajectory the costs are read from.
    parameters : cioplan.config.PlanningParameters, optional
        Cost weights.
    """

    def __init__(self, store, parameters=None):
        if parameters is None:
            parameters = PlanningParameters()
        self.store = store
        self.parameters = parameters
        n = store.n_waypoints
        dt = store.discretization
        operators = [difference_matrix(n, rule, dt) for rule in DIFF_RULES]
        self._operators = [D.T.dot(D) for D in operators]
        self._velocity_residuals = np.zeros((n, store.n_joints))
        self._build()

    def _parameter_key(self):
        p = self.parameters
        return (tuple(p.derivative_costs(name)
                      for name in self.store.group.joint_names),
                p.ridge_factor, p.normalize_smoothness)

    def _build(self):
        n = self.store.n_waypoints
        self.cost_matrices = np.empty((self.store.n_joints, n, n))
        for j, name in enumerate(self.store.group.joint_names):
            Q = self.parameters.ridge_factor * np.eye(n)
            for weight, DtD in zip(self.parameters.derivative_costs(name),
                                   self._operators):
                if weight != 0.0:
                    Q = Q + weight * DtD
            self.cost_matrices[j] = Q

        self.scale = 1.0
        if self.parameters.normalize_smoothness and self.store.n_joints > 0:
            self.scale = self.max_inverse_eigenvalue_scale()
            self.cost_matrices *= self.scale
        self._inverses = [None] * self.store.n_joints
        self._key = self._parameter_key()

    def refresh(self):
        """Rebuild the cost matrices if the smoothness parameters changed.

        Returns
        -------
        bool
            True if the matrices were rebuilt.
        """
        if self._parameter_key() == self._key:
            return False
        self._build()
        logger.debug('Rebuilt smoothness matrices (scale %g)', self.scale)
        return True

    def _free_block(self, joint):
        s = self.store.free_slice
        return self.cost_matrices[joint][s, s]

    def max_inverse_eigenvalue_scale(self):
        """Largest eigenvalue of the inverted free blocks over all joints.

        Joints whose free block is singular are skipped. If every block
        is singular 1.0 is returned.
        """
        scale = None
        for j in range(self.store.n_joints):
            eigenvalues = np.linalg.eigvalsh(self._free_block(j))
            smallest = eigenvalues[0]
            if smallest <= 1e-12 * max(eigenvalues[-1], 1.0):
                logger.warning(
                    'Smoothness matrix of joint %s is ill-conditioned '
                    '(smallest eigenvalue %g)',
                    self.store.group.joint_names[j], smallest)
                continue
            value = 1.0 / smallest
            if scale is None or value > scale:
                scale = value
        if scale is None:
            return 1.0
        return scale

    def quadratic_cost_inverse(self, joint):
        """Inverse of the free block of the cost matrix of ``joint``."""
        if self._inverses[joint] is None:
            self._inverses[joint] = np.linalg.pinv(self._free_block(joint))
        return self._inverses[joint]

    def cost(self, joint):
        x = self.store.positions[:, joint]
        return float(x.dot(self.cost_matrices[joint]).dot(x))

    def total_cost(self):
        return sum(self.cost(j) for j in range(self.store.n_joints))

    def waypoint_costs(self, out=None):
        """Split the smoothness cost over waypoints.

        Waypoint ``i`` gets ``sum_j x_j[i] * (Q_j x_j)[i]``, so the
        entries sum to :meth:`total_cost`.
        """
        if out is None:
            out = np.zeros(self.store.n_waypoints)
        else:
            out[...] = 0.0
        for j in range(self.store.n_joints):
            x = self.store.positions[:, j]
            out += x * self.cost_matrices[j].dot(x)
        return out

    def velocity_residual_costs(self, out=None):
        """Mismatch of the free velocities and the position differences.

        Free waypoint ``i`` gets ``sum_j (v_j[i] - (x_j[i+1] - x_j[i-1]) /
        (2 dt))^2``. Every other waypoint gets zero.
        """
        if out is None:
            out = np.zeros(self.store.n_waypoints)
        else:
            out[...] = 0.0
        store = self.store
        s = store.free_slice
        differences = central_difference(
            store.positions, s.start, s.stop - 1, store.discretization,
            VELOCITY_RULE, out=self._velocity_residuals)
        residuals = store.velocities[s] - differences[s]
        out[s] = np.sum(residuals ** 2, axis=1)
        return out
