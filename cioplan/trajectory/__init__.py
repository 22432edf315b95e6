# flake8: noqa

from cioplan.trajectory.store import interpolate_trajectory
from cioplan.trajectory.store import TrajectoryStore

from cioplan.trajectory.schema import FieldSpec
from cioplan.trajectory.schema import OptimizationVectorSchema
