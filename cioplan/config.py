"""Planning parameters read by the evaluation and optimization core."""

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from logging import getLogger
from typing import Dict
from typing import Optional
from typing import Tuple

import yaml


logger = getLogger(__name__)


@dataclass
class PlanningParameters:
    """Tunables of the trajectory evaluator and optimizer.

    Instances are usually created from a YAML file::

        planning:
          smoothness_cost_acceleration: 1.0
          friction_coefficient: 0.7
          joint_costs:
            base_prismatic_joint_x: 10.0

    The file is remembered so that :meth:`reload` can pick up edits made
    while a long optimization is running.
    """

    smoothness_cost_velocity: float = 0.0
    smoothness_cost_acceleration: float = 1.0
    smoothness_cost_jerk: float = 0.0
    ridge_factor: float = 0.0
    joint_costs: Dict[str, float] = field(default_factory=dict)
    normalize_smoothness: bool = True

    friction_coefficient: float = 0.5
    contact_velocity_weight: float = 16.0
    include_inertial_wrench: bool = False
    gravity_direction: Tuple[float, float, float] = (0.0, 0.0, -1.0)

    smoothness_weight: float = 1.0
    contact_invariant_weight: float = 1.0
    physics_violation_weight: float = 1.0
    collision_weight: float = 1.0
    velocity_consistency_weight: float = 1.0

    lbfgs_history: int = 10
    objective_delta_tolerance: float = 1e-7
    max_iterations: Optional[int] = None
    noise_scale: float = 0.01

    smooth_joint_limits: bool = False
    joint_limit_passes: int = 10

    diagnostics_interval: int = 1000

    source_path: Optional[str] = field(default=None, repr=False,
                                       compare=False)

    @classmethod
    def from_dict(cls, config):
        """Create parameters from a flat mapping.

        Raises
        ------
        ValueError
            If the mapping contains a key that is not a parameter.
        """
        known = {f.name for f in fields(cls)} - {'source_path'}
        unknown = set(config) - known
        if unknown:
            raise ValueError(
                'Unknown planning parameters: {}'.format(sorted(unknown)))
        config = dict(config)
        if 'gravity_direction' in config:
            config['gravity_direction'] = tuple(
                float(v) for v in config['gravity_direction'])
        if 'joint_costs' in config:
            config['joint_costs'] = {
                str(k): float(v) for k, v in config['joint_costs'].items()}
        return cls(**config)

    @classmethod
    def from_yaml(cls, path):
        """Load parameters from a YAML file.

        Either a top-level ``planning`` mapping or a flat mapping is
        accepted.
        """
        params = cls.from_dict(_read_yaml(path))
        params.source_path = str(path)
        return params

    def reload(self):
        """Re-read the YAML file these parameters were loaded from.

        Returns
        -------
        bool
            True if a file was read.
        """
        if self.source_path is None:
            return False
        updated = self.from_dict(_read_yaml(self.source_path))
        for f in fields(self):
            if f.name == 'source_path':
                continue
            setattr(self, f.name, getattr(updated, f.name))
        logger.debug('Reloaded planning parameters from %s',
                     self.source_path)
        return True

    def joint_cost(self, joint_name):
        return self.joint_costs.get(joint_name, 1.0)

    def derivative_costs(self, joint_name):
        """Return the (velocity, acceleration, jerk) weights of a joint."""
        c = self.joint_cost(joint_name)
        return (c * self.smoothness_cost_velocity,
                c * self.smoothness_cost_acceleration,
                c * self.smoothness_cost_jerk)

    def to_dict(self):
        d = asdict(self)
        d.pop('source_path')
        d['gravity_direction'] = list(d['gravity_direction'])
        return d


def _read_yaml(path):
    with open(path, 'r') as f:
        config = yaml.safe_load(f) or {}
    if isinstance(config, dict) and 'planning' in config:
        config = config['planning'] or {}
    if not isinstance(config, dict):
        raise ValueError(
            'Planning parameters in {} must be a mapping'.format(path))
    return config
