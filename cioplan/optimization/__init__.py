# flake8: noqa

from cioplan.optimization.minimizer import LBFGSMinimizer
from cioplan.optimization.minimizer import Minimizer
from cioplan.optimization.minimizer import MinimizeResult

from cioplan.optimization.optimizer import IterativeOptimizer
from cioplan.optimization.optimizer import ObjectiveAdapter
from cioplan.optimization.optimizer import OptimizationResult
