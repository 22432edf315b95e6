# flake8: noqa

from cioplan.evaluation.scratch import EvaluationScratch

from cioplan.evaluation.observer import DiagnosticsObserver
from cioplan.evaluation.observer import EvaluationObserver
from cioplan.evaluation.observer import ObserverList

from cioplan.evaluation.evaluator import TrajectoryEvaluator
