import numpy as np

from cioplan.math import central_difference
from cioplan.math import VELOCITY_RULE


class GroundPlane(object):
    """Horizontal ground plane ``z = height``."""

    def __init__(self, height=0.0):
        self.height = float(height)
        self.normal = np.array([0.0, 0.0, 1.0])

    def distance(self, point):
        """Signed distance of ``point`` above the plane."""
        return float(point[2]) - self.height


class ContactPoint(object):
    """Link that may touch the ground.

    The contact point is the origin of the link's segment frame. It does
    not hold any state besides its identity; every query reads the
    segment frames of the current forward kinematics.

    Parameters
    ----------
    link_name : str
        Name of the segment the contact is attached to.
    robot : cioplan.model.RobotDescription
        Robot the segment belongs to.
    """

    def __init__(self, link_name, robot):
        self.link_name = link_name
        self.segment_index = robot.segment_index(link_name)
        self.parent_segment_index = robot.parent_index(link_name)
        if self.parent_segment_index is None:
            raise ValueError(
                'Contact link {} must have a parent segment'.format(
                    link_name))

    def __repr__(self):
        return '<ContactPoint {} segment={}>'.format(
            self.link_name, self.segment_index)

    def frame(self, point, frames):
        """Return the 4x4 world frame of the contact link at ``point``.

        Parameters
        ----------
        point : int
            Waypoint index.
        frames : numpy.ndarray
            Segment frames, shape (n_waypoints, n_segments, 4, 4).
        """
        return frames[point, self.segment_index]

    def parent_frame(self, point, frames):
        return frames[point, self.parent_segment_index]

    def position(self, point, frames):
        return frames[point, self.segment_index, :3, 3]

    def distance_to_ground(self, point, frames, ground=None):
        if ground is None:
            ground = GroundPlane()
        return ground.distance(self.position(point, frames))

    def update_violation(self, start, end, dt, frames, violations,
                         velocities, ground=None):
        """Fill the contact violation and velocity for ``start..end``.

        The violation is the 4-vector (distance to the ground, n_x, n_y,
        1 - n_z), where n is the z axis of the contact frame. A planted
        contact lying flat on the ground has a zero violation. The
        velocity is the central difference of the contact position.

        Parameters
        ----------
        start : int
            First waypoint (inclusive).
        end : int
            Last waypoint (inclusive).
        dt : float
            Discretization step.
        frames : numpy.ndarray
            Segment frames, shape (n_waypoints, n_segments, 4, 4).
        violations : numpy.ndarray
            Output, shape (n_waypoints, 4).
        velocities : numpy.ndarray
            Output, shape (n_waypoints, 3).
        ground : GroundPlane, optional
            Defaults to the plane ``z = 0``.
        """
        if ground is None:
            ground = GroundPlane()
        violations[...] = 0.0
        for i in range(start, end + 1):
            normal = frames[i, self.segment_index, :3, 2]
            violations[i, 0] = self.distance_to_ground(i, frames, ground)
            violations[i, 1] = normal[0]
            violations[i, 2] = normal[1]
            violations[i, 3] = 1.0 - normal[2]
        positions = frames[:, self.segment_index, :3, 3]
        central_difference(positions, start, end, dt, VELOCITY_RULE,
                           out=velocities)
        return violations, velocities
