"""Observers called by the trajectory evaluator after each evaluation."""

from logging import getLogger

import numpy as np
import yaml


logger = getLogger(__name__)


class EvaluationObserver(object):
    """Base class of evaluation observers.

    Observers see the evaluator after its costs are aggregated. They must
    not modify the trajectory.
    """

    def on_evaluation_end(self, evaluator, cost):
        pass

    def on_optimization_start(self, evaluator):
        pass

    def on_optimization_end(self, evaluator, result):
        pass


class ObserverList(EvaluationObserver):
    """Container for multiple observers."""

    def __init__(self, observers=None):
        self.observers = list(observers or [])

    def __len__(self):
        return len(self.observers)

    def append(self, observer):
        self.observers.append(observer)

    def on_evaluation_end(self, evaluator, cost):
        for observer in self.observers:
            observer.on_evaluation_end(evaluator, cost)

    def on_optimization_start(self, evaluator):
        for observer in self.observers:
            observer.on_optimization_start(evaluator)

    def on_optimization_end(self, evaluator, result):
        for observer in self.observers:
            observer.on_optimization_end(evaluator, result)


class DiagnosticsObserver(EvaluationObserver):
    """Periodic diagnostics of a running optimization.

    Every ``interval`` evaluations the planning parameters are re-read from
    their YAML file, ``render`` is called and the cost breakdown and the
    contact table are logged.

    Parameters
    ----------
    interval : int, optional
        Evaluation cadence. Defaults to the ``diagnostics_interval``
        planning parameter, read at every evaluation.
    render : callable, optional
        ``render(evaluator)``, e.g. to refresh a viewer.
    """

    def __init__(self, interval=None, render=None):
        self.interval = interval
        self.render = render
        self.n_reports = 0

    def _interval(self, evaluator):
        if self.interval is not None:
            return self.interval
        return evaluator.parameters.diagnostics_interval

    def on_evaluation_end(self, evaluator, cost):
        interval = self._interval(evaluator)
        if interval and evaluator.evaluation_count % interval == 0:
            self.report(evaluator)

    def on_optimization_end(self, evaluator, result):
        self.log_contact_table(evaluator)

    def report(self, evaluator):
        self.n_reports += 1
        try:
            evaluator.parameters.reload()
        except (ValueError, OSError, yaml.YAMLError) as e:
            logger.warning('Failed to reload planning parameters, keeping '
                           'the previous values: %s', e)
        if self.render is not None:
            self.render(evaluator)
        evaluator.accumulator.log_summary(evaluator.evaluation_count)
        self.log_contact_table(evaluator)

    @staticmethod
    def contact_table(evaluator):
        """Rows of (activations, contact y, contact z) per contact phase.

        Contact positions are read at the first waypoint of the phase.
        """
        store = evaluator.store
        frames = evaluator.scratch.segment_frames
        contact_points = store.group.contact_points
        rows = []
        for phase in range(store.n_contact_phases):
            point = min(phase * store.contact_phase_stride,
                        store.n_waypoints - 1)
            positions = np.array(
                [c.position(point, frames) for c in contact_points]
            ).reshape(-1, 3)
            rows.append((store.contacts[phase].copy(), positions[:, 1],
                         positions[:, 2]))
        return rows

    def log_contact_table(self, evaluator):
        if evaluator.store.n_contacts == 0:
            return
        lines = ['Contact values :']
        for phase, (values, y, z) in enumerate(
                self.contact_table(evaluator)):
            lines.append('{} : {}   {}   {}'.format(
                phase,
                ' '.join('{:f}'.format(v) for v in values),
                ' '.join('{:f}'.format(v) for v in y),
                ' '.join('{:f}'.format(v) for v in z)))
        logger.info('\n'.join(lines))
