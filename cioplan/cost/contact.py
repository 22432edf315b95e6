import numpy as np

from cioplan.config import PlanningParameters
from cioplan.contact_force import FrictionPyramidForceSolver
from cioplan.model.contact_point import GroundPlane


class ContactStabilityEvaluator(object):
    """Contact-invariant and physics-violation costs.

    For every interior waypoint the contact forces are solved against the
    reference wrench computed by
    :class:`cioplan.cost.RigidBodyDynamicsEvaluator`. Then

    - the contact-invariant cost is
      ``sum_c a_c * (||violation_c||^2 + w_v * ||velocity_c||^2)``
    - the physics-violation cost is the norm of the contact wrench plus
      the reference wrench.

    Parameters
    ----------
    group : cioplan.model.PlanningGroup
        Contact points.
    force_solver : cioplan.contact_force.ContactForceSolver, optional
        Defaults to :class:`FrictionPyramidForceSolver`.
    parameters : cioplan.config.PlanningParameters, optional
        ``friction_coefficient`` and ``contact_velocity_weight`` are read.
    ground : cioplan.model.GroundPlane, optional
        Ground the contacts should stay on.
    """

    def __init__(self, group, force_solver=None, parameters=None,
                 ground=None):
        if force_solver is None:
            force_solver = FrictionPyramidForceSolver()
        if parameters is None:
            parameters = PlanningParameters()
        if ground is None:
            ground = GroundPlane()
        self.group = group
        self.force_solver = force_solver
        self.parameters = parameters
        self.ground = ground

    def update_violations(self, scratch, start, end, dt):
        for c, contact in enumerate(self.group.contact_points):
            contact.update_violation(
                start, end, dt, scratch.segment_frames,
                scratch.contact_violations[c],
                scratch.contact_velocities[c], self.ground)

    def contact_invariant_cost(self, activations, violations, velocities):
        """Cost of one waypoint.

        Parameters
        ----------
        activations : numpy.ndarray
            (n_contacts,)
        violations : numpy.ndarray
            (n_contacts, 4)
        velocities : numpy.ndarray
            (n_contacts, 3)
        """
        per_contact = np.sum(violations ** 2, axis=1) \
            + self.parameters.contact_velocity_weight \
            * np.sum(velocities ** 2, axis=1)
        return float(np.dot(activations, per_contact))

    @staticmethod
    def contact_wrench(positions, forces):
        wrench = np.zeros(6)
        wrench[:3] = np.sum(forces, axis=0)
        wrench[3:] = np.sum(np.cross(positions, forces), axis=0)
        return wrench

    def compute(self, scratch, store):
        """Fill the contact fields and costs of ``scratch`` for 1..N-2."""
        n = store.n_waypoints
        dt = store.discretization
        self.update_violations(scratch, 1, n - 2, dt)
        if self.group.n_contacts == 0:
            for point in range(1, n - 1):
                scratch.physics_violation_costs[point] = np.linalg.norm(
                    scratch.wrenches[point])
            return

        frames = scratch.segment_frames
        mu = self.parameters.friction_coefficient
        for point in range(1, n - 1):
            parent_frames = np.empty((self.group.n_contacts, 4, 4))
            for c, contact in enumerate(self.group.contact_points):
                parent_frames[c] = contact.parent_frame(point, frames)
                scratch.contact_positions[point, c] = contact.position(
                    point, frames)
            positions = scratch.contact_positions[point]
            activations = store.waypoint_contact_values(point)

            forces = np.asarray(self.force_solver.solve(
                mu, positions, parent_frames, activations,
                scratch.wrenches[point]), dtype=np.float64)
            scratch.contact_forces[point] = forces

            scratch.contact_invariant_costs[point] = \
                self.contact_invariant_cost(
                    activations, scratch.contact_violations[:, point],
                    scratch.contact_velocities[:, point])
            residual = self.contact_wrench(positions, forces) \
                + scratch.wrenches[point]
            scratch.physics_violation_costs[point] = np.linalg.norm(residual)
