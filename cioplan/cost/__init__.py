# flake8: noqa

from cioplan.cost.smoothness import SmoothnessModel

from cioplan.cost.dynamics import RigidBodyDynamicsEvaluator

from cioplan.cost.contact import ContactStabilityEvaluator

from cioplan.cost.accumulator import CostTerm
from cioplan.cost.accumulator import TrajectoryCostAccumulator
