# flake8: noqa

from cioplan.model.segment import RobotDescription
from cioplan.model.segment import Segment

from cioplan.model.planning_group import GroupJoint
from cioplan.model.planning_group import PlanningGroup

from cioplan.model.contact_point import ContactPoint
from cioplan.model.contact_point import GroundPlane
