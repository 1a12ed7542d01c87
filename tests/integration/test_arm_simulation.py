"""
Integration tests for the arm physics simulation.

Drives the estimator through the fixed-interval simulation loop with the
sine-wave motion profile.
"""

import unittest
import json
import os
from unittest.mock import Mock, patch

from pyarmsim.simulation import (
    ArmPhysicsSimulation, SimulationConfig, SimulationState, SineMotionProfile
)
from pyarmsim.physics import RobotConfig, RobotPhysics, DesignLimits, WarningKind
from pyarmsim.config import Config, Settings
from pyarmsim.core.exceptions import PhysicsError, SimulationError, SimulationStateError


def offline_config(**kwargs) -> SimulationConfig:
    """Simulation config that never sleeps."""
    kwargs.setdefault("realtime", False)
    return SimulationConfig(**kwargs)


class TestArmSimulationStepping(unittest.TestCase):
    """Test manual stepping and playback controls."""

    def setUp(self):
        """Set up test fixtures."""
        self.sim = ArmPhysicsSimulation(config=offline_config(sample_interval=0.1))

    def tearDown(self):
        """Clean up test fixtures."""
        self.sim.shutdown()

    def test_initial_state(self):
        """Test the simulation before the first tick."""
        self.assertEqual(self.sim.state, SimulationState.UNINITIALIZED)
        self.assertEqual(self.sim.sim_time, 0.0)
        self.assertEqual(self.sim.physics_state.stability, 85.0)
        self.assertEqual(self.sim.trajectory_points, [])

    def test_step_advances_motion(self):
        """Test that a tick samples the motion at the new time."""
        self.assertTrue(self.sim.step())

        self.assertEqual(self.sim.state, SimulationState.RUNNING)
        self.assertAlmostEqual(self.sim.sim_time, 0.1)
        expected = SineMotionProfile().angles_at(0.1)
        for actual, angle in zip(self.sim.physics_state.joint_angles, expected):
            self.assertAlmostEqual(actual, angle)
        self.assertEqual(self.sim.physics.update_count, 1)
        self.assertEqual(self.sim.stats.tick_count, 1)

    def test_state_matches_direct_evaluation(self):
        """Test that the simulation reports the estimator's result."""
        for _ in range(4):
            self.sim.step()

        angles = SineMotionProfile().angles_at(self.sim.sim_time)
        direct = RobotPhysics(RobotConfig()).update_physics(angles)

        for actual, expected in zip(self.sim.physics_state.end_effector_position,
                                    direct.end_effector_position):
            self.assertAlmostEqual(actual, expected, places=12)
        self.assertAlmostEqual(self.sim.physics_state.total_power, direct.total_power, places=12)

    def test_speed_scales_motion_clock(self):
        """Test playback speed."""
        self.sim.set_speed(2.0)
        self.sim.step()

        self.assertAlmostEqual(self.sim.sim_time, 0.2)

    def test_invalid_speed(self):
        """Test that the speed must be positive."""
        with self.assertRaises(SimulationError):
            self.sim.set_speed(0.0)

    def test_pause_and_resume(self):
        """Test that a paused simulation does not tick."""
        self.sim.step()
        self.sim.pause()

        self.assertFalse(self.sim.step())
        self.assertEqual(self.sim.stats.tick_count, 1)

        self.sim.toggle_pause()
        self.assertTrue(self.sim.is_running)
        self.assertTrue(self.sim.step())
        self.assertEqual(self.sim.stats.tick_count, 2)

    def test_step_after_stop(self):
        """Test that stepping a stopped simulation fails."""
        self.sim.step()
        self.sim.stop()

        with self.assertRaises(SimulationStateError):
            self.sim.step()

    def test_reset(self):
        """Test returning to t=0 with a full battery."""
        for _ in range(5):
            self.sim.step()
        self.assertLess(self.sim.physics_state.battery_charge, 100.0)

        state = self.sim.reset()

        self.assertEqual(self.sim.sim_time, 0.0)
        self.assertEqual(self.sim.trajectory_points, [])
        self.assertEqual(self.sim.warnings, [])
        self.assertEqual(state.battery_charge, 100.0)
        self.assertEqual(state.stability, 100.0)
        self.assertEqual(state.joint_angles, [0.0, 0.0, 0.0])

    def test_callbacks(self):
        """Test pre and post update callbacks."""
        pre, post = Mock(), Mock()
        self.sim.add_pre_update_callback(pre)
        self.sim.add_post_update_callback(post)

        self.sim.step(0.05)

        pre.assert_called_once_with(0.05)
        post.assert_called_once_with(0.05)
        self.assertAlmostEqual(self.sim.sim_time, 0.05)


class TestTrajectoryRecording(unittest.TestCase):
    """Test end effector trajectory recording."""

    def test_trajectory_length_limit(self):
        """Test that only the newest points are kept."""
        sim = ArmPhysicsSimulation(config=offline_config(), trajectory_length=3)
        for _ in range(10):
            sim.step()

        self.assertEqual(len(sim.trajectory_points), 3)
        last = sim.trajectory_points[-1].to_tuple()
        for actual, expected in zip(last, sim.physics_state.end_effector_position):
            self.assertAlmostEqual(actual, expected)

    def test_still_arm_records_once(self):
        """Test that a motionless arm adds no duplicate points."""
        still = SineMotionProfile(amplitudes=(0.0, 0.0, 0.0))
        sim = ArmPhysicsSimulation(config=offline_config(), motion=still)
        for _ in range(5):
            sim.step()

        self.assertEqual(len(sim.trajectory_points), 1)


class TestDesignWarnings(unittest.TestCase):
    """Test warnings raised while the arm moves."""

    def test_default_arm_warns(self):
        """Test that the default arm exceeds its ratings."""
        sim = ArmPhysicsSimulation(config=offline_config())
        sim.step()

        kinds = {w.kind for w in sim.warnings}
        self.assertIn(WarningKind.JOINT_OVERLOAD, kinds)
        self.assertIn(WarningKind.PAYLOAD_EXCEEDED, kinds)

    def test_new_warnings_logged_once(self):
        """Test that persistent warnings are logged only when they appear."""
        sim = ArmPhysicsSimulation(config=offline_config())

        with self.assertLogs("pyarmsim.simulation.arm_physics", level="WARNING") as logs:
            sim.step()
        self.assertEqual(len(logs.records), len(sim.warnings))

        with patch.object(sim.logger, "warning") as mock_warning:
            sim.step()
            sim.step()
        mock_warning.assert_not_called()

    def test_generous_limits(self):
        """Test that high ratings and no load raise no warnings."""
        limits = DesignLimits(joint_max_torques=(1000.0, 1000.0, 1000.0),
                              motor_rated_torques=(1000.0, 1000.0, 1000.0),
                              load_mass=0.0)
        sim = ArmPhysicsSimulation(config=offline_config(), limits=limits)
        for _ in range(3):
            sim.step()

        self.assertEqual(sim.warnings, [])


class TestSimulationRun(unittest.TestCase):
    """Test the simulation main loop."""

    def test_run_max_ticks(self):
        """Test a bounded offline run."""
        sim = ArmPhysicsSimulation(config=offline_config(max_ticks=5))
        sim.run()

        self.assertEqual(sim.state, SimulationState.STOPPED)
        self.assertEqual(sim.stats.tick_count, 5)
        self.assertAlmostEqual(sim.sim_time, 0.5)
        self.assertEqual(sim.physics.update_count, 5)

    def test_run_zero_ticks(self):
        """Test that a zero tick limit runs no update."""
        sim = ArmPhysicsSimulation(config=offline_config(max_ticks=0))
        sim.run()

        self.assertEqual(sim.state, SimulationState.STOPPED)
        self.assertEqual(sim.stats.tick_count, 0)
        self.assertEqual(sim.physics.update_count, 0)
        self.assertEqual(sim.sim_time, 0.0)

    def test_negative_tick_limit(self):
        """Test that the tick limit must not be negative."""
        with self.assertRaises(SimulationError):
            SimulationConfig(max_ticks=-1)

    def test_start_log_reports_slowest_joint_period(self):
        """Test the period logged when motion starts."""
        sim = ArmPhysicsSimulation(config=offline_config(max_ticks=1))

        with self.assertLogs("pyarmsim.simulation.arm_physics", level="INFO") as logs:
            sim.run()

        started = [r for r in logs.records if r.getMessage() == "Arm motion started"]
        self.assertEqual(len(started), 1)
        self.assertEqual(started[0].slowest_joint_period, 10.0)
        self.assertFalse(hasattr(started[0], "period"))

    def test_realtime_run_sleeps_between_ticks(self):
        """Test that realtime runs sleep after every tick but the last."""
        sim = ArmPhysicsSimulation(config=SimulationConfig(max_ticks=3, realtime=True))

        with patch("pyarmsim.simulation.base.time.sleep") as mock_sleep:
            sim.run()

        self.assertEqual(sim.stats.tick_count, 3)
        self.assertEqual(mock_sleep.call_count, 2)
        for call in mock_sleep.call_args_list:
            self.assertLessEqual(call[0][0], 0.1)

    def test_zero_duration_runs_one_tick(self):
        """Test that a duration limit is checked after each tick."""
        sim = ArmPhysicsSimulation(config=SimulationConfig(max_duration=0.0))
        sim.run()

        self.assertEqual(sim.stats.tick_count, 1)

    def test_error_during_run(self):
        """Test that errors stop the loop and propagate."""
        sim = ArmPhysicsSimulation(config=offline_config(max_ticks=5))
        sim.physics.update_physics = Mock(side_effect=PhysicsError("broken"))

        with self.assertRaises(PhysicsError):
            sim.run()
        self.assertEqual(sim.state, SimulationState.ERROR)

    def test_invalid_interval(self):
        """Test that the interval must be positive."""
        with self.assertRaises(SimulationError):
            SimulationConfig(sample_interval=0.0)

    def test_summary(self):
        """Test the plain data summary."""
        sim = ArmPhysicsSimulation(config=offline_config(max_ticks=3))
        sim.run()
        summary = sim.summary()

        self.assertEqual(summary["name"], "arm_physics")
        self.assertEqual(summary["state"], "stopped")
        self.assertEqual(summary["ticks"], 3)
        self.assertIn("battery_life", summary["metrics"])
        self.assertEqual(len(summary["warnings"]), len(sim.warnings))
        json.dumps(summary)


class TestSimulationFromSettings(unittest.TestCase):
    """Test building the simulation from configuration."""

    def setUp(self):
        """Set up test fixtures."""
        env = {k: v for k, v in os.environ.items() if not k.startswith(Config.ENV_PREFIX)}
        env_patch = patch.dict(os.environ, env, clear=True)
        env_patch.start()
        self.addCleanup(env_patch.stop)

        self.config = Config(load_user_config=False)
        self.settings = Settings(self.config)

    def test_from_settings(self):
        """Test that configured values reach every component."""
        self.config.set("simulation.sample_interval", 0.05)
        self.config.set("simulation.trajectory_length", 7)
        self.config.set("robot.payload_mass", 1.0)
        self.config.set("limits.load_mass", 0.5)
        self.config.set("motion.amplitudes", [5.0, 5.0, 5.0])

        sim = ArmPhysicsSimulation.from_settings(self.settings, max_ticks=2, realtime=False)

        self.assertEqual(sim.config.sample_interval, 0.05)
        self.assertEqual(sim.config.max_ticks, 2)
        self.assertEqual(sim.trajectory_length, 7)
        self.assertEqual(sim.physics.config.payload_mass, 1.0)
        self.assertEqual(sim.limits.load_mass, 0.5)
        self.assertEqual(list(sim.motion.amplitudes), [5.0, 5.0, 5.0])

        sim.run()
        self.assertAlmostEqual(sim.sim_time, 0.1)


if __name__ == '__main__':
    unittest.main()
