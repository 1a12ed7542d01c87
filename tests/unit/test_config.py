"""
Unit tests for configuration loading and settings validation.
"""

import unittest
import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

from pyarmsim.config import Config, Settings, get_config, set_config, reset_config
from pyarmsim.physics import RobotConfig
from pyarmsim.core.exceptions import InvalidConfigValueError


class ConfigTestCase(unittest.TestCase):
    """Base test case with an isolated home directory and environment."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)
        self.user_config = self.temp_path / "home" / "config.json"

        user_patch = patch.object(Config, "_get_user_config_path", return_value=self.user_config)
        user_patch.start()
        self.addCleanup(user_patch.stop)

        env = {k: v for k, v in os.environ.items() if not k.startswith(Config.ENV_PREFIX)}
        env_patch = patch.dict(os.environ, env, clear=True)
        env_patch.start()
        self.addCleanup(env_patch.stop)

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def write_json(self, path: Path, data) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path


class TestConfig(ConfigTestCase):
    """Test the layered configuration manager."""

    def test_defaults(self):
        """Test default values."""
        config = Config(load_user_config=False)

        self.assertEqual(config.get("robot.link1_length"), 0.6)
        self.assertEqual(config.get("robot.battery_capacity"), 3000)
        self.assertEqual(config.get("physics.motor_efficiency"), 0.85)
        self.assertEqual(config.get("simulation.sample_interval"), 0.1)
        self.assertEqual(config.log_level, "INFO")
        self.assertFalse(config.debug)

    def test_missing_key_default(self):
        """Test the fallback for unknown keys."""
        config = Config(load_user_config=False)

        self.assertIsNone(config.get("robot.unknown"))
        self.assertEqual(config.get("nope.deeper", 42), 42)

    def test_set_and_get(self):
        """Test dot-notation updates."""
        config = Config(load_user_config=False)
        config.set("robot.payload_mass", 2.5)
        config.set("custom.section.value", "x")

        self.assertEqual(config.get("robot.payload_mass"), 2.5)
        self.assertEqual(config.get("custom.section.value"), "x")

    def test_explicit_file_merges(self):
        """Test that a config file overrides only the keys it names."""
        path = self.write_json(self.temp_path / "arm.json", {"robot": {"link1_length": 1.0}})
        config = Config(path, load_user_config=False)

        self.assertEqual(config.get("robot.link1_length"), 1.0)
        self.assertEqual(config.get("robot.link2_length"), 0.6)

    def test_user_file_then_explicit_file(self):
        """Test source priority between user and explicit files."""
        self.write_json(self.user_config, {"robot": {"payload_mass": 1.0, "base_height": 0.5}})
        path = self.write_json(self.temp_path / "arm.json", {"robot": {"payload_mass": 2.0}})
        config = Config(path)

        self.assertEqual(config.get("robot.payload_mass"), 2.0)
        self.assertEqual(config.get("robot.base_height"), 0.5)

    def test_invalid_json_keeps_defaults(self):
        """Test that a malformed file is ignored."""
        path = self.temp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        config = Config(path, load_user_config=False)

        self.assertEqual(config.get("robot.payload_mass"), 5.0)

    def test_missing_explicit_file(self):
        """Test that a missing file leaves defaults in place."""
        config = Config(self.temp_path / "absent.json", load_user_config=False)
        self.assertEqual(config.get("robot.payload_mass"), 5.0)

    def test_environment_override(self):
        """Test env keys with underscores inside the setting name."""
        with patch.dict(os.environ, {
            "PYARMSIM_ROBOT_PAYLOAD_MASS": "3.5",
            "PYARMSIM_APP_DEBUG": "yes",
            "PYARMSIM_MOTION_AMPLITUDES": "[10, 20, 30]",
            "PYARMSIM_APP_LOG_LEVEL": "DEBUG",
        }):
            config = Config(load_user_config=False)

        self.assertEqual(config.get("robot.payload_mass"), 3.5)
        self.assertIs(config.get("app.debug"), True)
        self.assertEqual(config.get("motion.amplitudes"), [10, 20, 30])
        self.assertEqual(config.get("app.log_level"), "DEBUG")

    def test_environment_beats_file(self):
        """Test that environment variables override config files."""
        path = self.write_json(self.temp_path / "arm.json", {"robot": {"payload_mass": 2.0}})
        with patch.dict(os.environ, {"PYARMSIM_ROBOT_PAYLOAD_MASS": "4"}):
            config = Config(path, load_user_config=False)

        self.assertEqual(config.get("robot.payload_mass"), 4)

    def test_save_and_load_again(self):
        """Test saving to the user config file."""
        config = Config()
        config.set("robot.motor_torque", 25.0)
        saved = config.save()

        self.assertEqual(saved, self.user_config)
        self.assertEqual(json.loads(saved.read_text(encoding="utf-8"))["robot"]["motor_torque"], 25.0)
        self.assertEqual(Config().get("robot.motor_torque"), 25.0)

    def test_reset_to_defaults(self):
        """Test discarding overrides."""
        config = Config(load_user_config=False)
        config.set("robot.payload_mass", 9.0)
        config.reset_to_defaults()

        self.assertEqual(config.get("robot.payload_mass"), 5.0)

    def test_get_all_is_copy(self):
        """Test that get_all does not expose internal state."""
        config = Config(load_user_config=False)
        data = config.get_all()
        data["robot"]["link_masses"].append(99)

        self.assertEqual(config.get("robot.link_masses"), [2.0, 1.5, 1.0])

    def test_global_instance(self):
        """Test the global config accessors."""
        reset_config()
        try:
            custom = Config(load_user_config=False)
            set_config(custom)
            self.assertIs(get_config(), custom)
        finally:
            reset_config()


class TestSettings(ConfigTestCase):
    """Test typed settings access."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.config = Config(load_user_config=False)
        self.settings = Settings(self.config)

    def test_robot_values(self):
        """Test robot settings."""
        self.assertEqual(self.settings.link_lengths, (0.6, 0.6, 0.6))
        self.assertEqual(self.settings.link_masses, (2.0, 1.5, 1.0))
        self.assertEqual(self.settings.joint_velocities, (2.0, 2.0, 2.0))
        self.assertEqual(self.settings.gravity, 9.81)

    def test_clamping(self):
        """Test that simulation values are clamped."""
        self.config.set("simulation.sample_interval", 0)
        self.config.set("simulation.speed", 1000)
        self.config.set("simulation.trajectory_length", -5)

        self.assertEqual(self.settings.sample_interval, 0.001)
        self.assertEqual(self.settings.speed, 100.0)
        self.assertEqual(self.settings.trajectory_length, 1)

    def test_gravity_magnitude(self):
        """Test that gravity is used as a magnitude."""
        self.config.set("physics.gravity", -9.81)
        self.assertEqual(self.settings.gravity, 9.81)

    def test_invalid_log_level_falls_back(self):
        """Test unknown log levels fall back to INFO."""
        self.config.set("app.log_level", "verbose")
        self.assertEqual(self.settings.log_level, "INFO")

    def test_invalid_number(self):
        """Test that non-numeric values raise."""
        self.config.set("robot.payload_mass", "heavy")
        with self.assertRaises(InvalidConfigValueError) as ctx:
            _ = self.settings.payload_mass
        self.assertEqual(ctx.exception.key, "robot.payload_mass")

        self.config.set("robot.base_height", True)
        with self.assertRaises(InvalidConfigValueError):
            _ = self.settings.base_height

    def test_invalid_triple(self):
        """Test that per-joint settings need three values."""
        self.config.set("robot.link_masses", [1.0, 2.0])
        with self.assertRaises(InvalidConfigValueError):
            _ = self.settings.link_masses

        self.config.set("motion.frequencies", "fast")
        with self.assertRaises(InvalidConfigValueError):
            _ = self.settings.motion_frequencies

    def test_unordered_angle_limits(self):
        """Test that min_angle may not exceed max_angle."""
        self.config.set("motion.min_angle", 50.0)
        self.config.set("motion.max_angle", 10.0)
        with self.assertRaises(InvalidConfigValueError):
            _ = self.settings.joint_angle_limits

    def test_sample_rate(self):
        """Test the derived update rate."""
        self.config.set("simulation.sample_interval", 0.05)
        self.assertAlmostEqual(self.settings.get_sample_rate_hz(), 20.0)

    def test_robot_config_from_settings(self):
        """Test building the physics configuration from settings."""
        self.assertEqual(RobotConfig.from_settings(self.settings), RobotConfig())

        self.config.set("robot.link3_length", 0.9)
        self.config.set("robot.payload_mass", 1.0)
        robot = RobotConfig.from_settings(self.settings)

        self.assertEqual(robot.link3_length, 0.9)
        self.assertEqual(robot.payload_mass, 1.0)
        self.assertAlmostEqual(robot.max_reach, 2.1)


if __name__ == '__main__':
    unittest.main()
