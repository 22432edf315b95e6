import os
import tempfile
import unittest

from cioplan.config import PlanningParameters


class TestPlanningParameters(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmpdir.name, 'planning.yaml')

    def tearDown(self):
        self._tmpdir.cleanup()

    def _write(self, text):
        with open(self.path, 'w') as f:
            f.write(text)

    def test_defaults(self):
        params = PlanningParameters()
        self.assertEqual(params.lbfgs_history, 10)
        self.assertEqual(params.objective_delta_tolerance, 1e-7)
        self.assertEqual(params.noise_scale, 0.01)
        self.assertEqual(params.contact_velocity_weight, 16.0)
        self.assertEqual(params.diagnostics_interval, 1000)
        self.assertEqual(params.gravity_direction, (0.0, 0.0, -1.0))
        self.assertFalse(params.smooth_joint_limits)

    def test_from_dict_unknown_key(self):
        with self.assertRaises(ValueError):
            PlanningParameters.from_dict({'friction': 0.3})

    def test_from_yaml_planning_section(self):
        self._write('planning:\n'
                    '  friction_coefficient: 0.7\n'
                    '  gravity_direction: [0, 0, -2]\n'
                    '  joint_costs:\n'
                    '    base_x: 10\n')
        params = PlanningParameters.from_yaml(self.path)
        self.assertEqual(params.friction_coefficient, 0.7)
        self.assertEqual(params.gravity_direction, (0.0, 0.0, -2.0))
        self.assertEqual(params.joint_cost('base_x'), 10.0)
        self.assertEqual(params.joint_cost('base_y'), 1.0)
        self.assertEqual(params.source_path, self.path)

    def test_from_yaml_flat(self):
        self._write('smoothness_cost_jerk: 2.0\n')
        params = PlanningParameters.from_yaml(self.path)
        self.assertEqual(params.smoothness_cost_jerk, 2.0)

    def test_from_yaml_empty(self):
        self._write('')
        self.assertEqual(PlanningParameters.from_yaml(self.path),
                         PlanningParameters())

    def test_from_yaml_not_a_mapping(self):
        self._write('- friction_coefficient\n- 0.7\n')
        with self.assertRaises(ValueError):
            PlanningParameters.from_yaml(self.path)
        self._write('planning: 0.7\n')
        with self.assertRaises(ValueError):
            PlanningParameters.from_yaml(self.path)

    def test_reload(self):
        self._write('planning:\n  noise_scale: 0.1\n')
        params = PlanningParameters.from_yaml(self.path)
        self.assertEqual(params.noise_scale, 0.1)
        self._write('planning:\n  noise_scale: 0.2\n  lbfgs_history: 5\n')
        self.assertTrue(params.reload())
        self.assertEqual(params.noise_scale, 0.2)
        self.assertEqual(params.lbfgs_history, 5)
        self.assertEqual(params.source_path, self.path)

    def test_reload_without_file(self):
        params = PlanningParameters(noise_scale=0.5)
        self.assertFalse(params.reload())
        self.assertEqual(params.noise_scale, 0.5)

    def test_derivative_costs(self):
        params = PlanningParameters(
            smoothness_cost_velocity=1.0, smoothness_cost_acceleration=2.0,
            smoothness_cost_jerk=3.0, joint_costs={'a': 2.0})
        self.assertEqual(params.derivative_costs('a'), (2.0, 4.0, 6.0))
        self.assertEqual(params.derivative_costs('b'), (1.0, 2.0, 3.0))

    def test_to_dict(self):
        params = PlanningParameters(friction_coefficient=0.9)
        d = params.to_dict()
        self.assertNotIn('source_path', d)
        self.assertEqual(PlanningParameters.from_dict(d), params)
