"""Contact force solvers.

A solver receives the reference wrench of one waypoint and returns one
force per contact so that the summed contact wrench approximately
cancels it.
"""

from abc import ABC
from abc import abstractmethod
from logging import getLogger

import numpy as np
from scipy.optimize import nnls

from cioplan.math import normalize_vector


logger = getLogger(__name__)


class ContactForceSolver(ABC):

    @abstractmethod
    def solve(self, friction_coefficient, positions, parent_frames,
              activations, reference_wrench):
        """Solve the contact forces of one waypoint.

        Parameters
        ----------
        friction_coefficient : float
            Coulomb friction coefficient.
        positions : numpy.ndarray
            World contact positions (n_contacts, 3).
        parent_frames : numpy.ndarray
            World frames of the contact parent segments (n_contacts, 4, 4).
        activations : numpy.ndarray
            Non-negative activation weights (n_contacts,).
        reference_wrench : numpy.ndarray
            (force, torque) 6-vector, torque about the world origin.

        Returns
        -------
        numpy.ndarray
            Contact forces (n_contacts, 3).
        """
        pass


class FrictionPyramidForceSolver(ContactForceSolver):
    """Non-negative least squares over linearised friction cones.

    Each active contact spans its force with the four edges of a friction
    pyramid around the z axis of its parent frame. Edge magnitudes are the
    non-negative solution of::

        minimize ||A lambda + w||^2 + sum_c (regularization / a_c) ||lambda_c||^2

    so a weakly activated contact is expensive to push with. Contacts with
    a zero activation get no force.

    Parameters
    ----------
    regularization : float
        Force regularization weight.
    activation_threshold : float
        Activations at or below this value are treated as inactive.
    """

    def __init__(self, regularization=1e-4, activation_threshold=1e-8):
        self.regularization = regularization
        self.activation_threshold = activation_threshold

    @staticmethod
    def pyramid_edges(friction_coefficient, parent_frame):
        """Return the four unit pyramid edges (4, 3) of one contact."""
        R = parent_frame[:3, :3]
        normal = R[:, 2]
        tangents = (R[:, 0], -R[:, 0], R[:, 1], -R[:, 1])
        return np.array([normalize_vector(normal + friction_coefficient * t)
                         for t in tangents])

    def solve(self, friction_coefficient, positions, parent_frames,
              activations, reference_wrench):
        positions = np.asarray(positions, dtype=np.float64)
        activations = np.asarray(activations, dtype=np.float64)
        n_contacts = len(activations)
        forces = np.zeros((n_contacts, 3))
        active = np.where(activations > self.activation_threshold)[0]
        if len(active) == 0:
            return forces

        edges = np.array([self.pyramid_edges(friction_coefficient,
                                             parent_frames[c])
                          for c in active])
        n_vars = 4 * len(active)
        A = np.zeros((6 + n_vars, n_vars))
        for k, c in enumerate(active):
            for e in range(4):
                col = 4 * k + e
                A[:3, col] = edges[k, e]
                A[3:6, col] = np.cross(positions[c], edges[k, e])
                A[6 + col, col] = np.sqrt(
                    self.regularization / activations[c])
        b = np.zeros(6 + n_vars)
        b[:6] = -np.asarray(reference_wrench, dtype=np.float64)
        magnitudes, residual = nnls(A, b)
        logger.debug('Contact force residual %f with %d active contacts',
                     residual, len(active))
        magnitudes = magnitudes.reshape(len(active), 4)
        forces[active] = np.einsum('ke,kej->kj', magnitudes, edges)
        return forces


class FixedForceSolver(ContactForceSolver):
    """Return pre-computed forces, ignoring the waypoint state.

    Useful when the forces are known in advance, for instance from a
    previous planning attempt.
    """

    def __init__(self, forces):
        self.forces = np.array(forces, dtype=np.float64)

    def solve(self, friction_coefficient, positions, parent_frames,
              activations, reference_wrench):
        return self.forces.copy()
