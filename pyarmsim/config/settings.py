"""
Settings module for PyArmSim.

Provides convenient access to configuration settings with validation and type hints.
"""

from typing import Optional, Tuple

from .config import get_config, Config
from ..core.exceptions import InvalidConfigValueError


class Settings:
    """
    High-level settings interface with validation and type safety.

    Scalar values are clamped to sane ranges; per-joint values must be
    three-element lists of numbers.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize settings with optional config instance.

        Args:
            config: Optional Config instance, uses global if not provided
        """
        self._config = config or get_config()

    @property
    def config(self) -> Config:
        return self._config

    # Application settings
    @property
    def debug_mode(self) -> bool:
        """Debug mode enabled."""
        return bool(self._config.get("app.debug", False))

    @property
    def log_level(self) -> str:
        """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        level = str(self._config.get("app.log_level", "INFO")).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        return level if level in valid_levels else "INFO"

    @property
    def log_to_file(self) -> bool:
        """Write rotating log files under ~/.pyarmsim/logs."""
        return bool(self._config.get("app.log_to_file", False))

    # Simulation settings
    @property
    def sample_interval(self) -> float:
        """Seconds between physics re-evaluations."""
        interval = self._float("simulation.sample_interval", 0.1)
        return max(0.001, min(interval, 10.0))

    @property
    def speed(self) -> float:
        """Playback speed multiplier for the motion profile."""
        speed = self._float("simulation.speed", 1.0)
        return max(0.01, min(speed, 100.0))

    @property
    def trajectory_length(self) -> int:
        """Maximum number of recorded end effector points."""
        length = int(self._float("simulation.trajectory_length", 200))
        return max(1, min(length, 100000))

    @property
    def performance_log_interval(self) -> float:
        """Seconds between performance log records."""
        interval = self._float("simulation.performance_log_interval", 5.0)
        return max(0.1, interval)

    # Robot settings
    @property
    def link_lengths(self) -> Tuple[float, float, float]:
        """Link lengths in meters."""
        return (
            self._float("robot.link1_length", 0.6),
            self._float("robot.link2_length", 0.6),
            self._float("robot.link3_length", 0.6),
        )

    @property
    def base_height(self) -> float:
        return self._float("robot.base_height", 0.3)

    @property
    def battery_voltage(self) -> float:
        return self._float("robot.battery_voltage", 20.0)

    @property
    def battery_capacity(self) -> float:
        """Battery capacity in mAh."""
        return self._float("robot.battery_capacity", 3000)

    @property
    def min_battery_voltage(self) -> float:
        return self._float("robot.min_battery_voltage", 16.0)

    @property
    def motor_torque(self) -> float:
        return self._float("robot.motor_torque", 15.0)

    @property
    def payload_mass(self) -> float:
        return self._float("robot.payload_mass", 5.0)

    @property
    def link_masses(self) -> Tuple[float, float, float]:
        return self._triple("robot.link_masses", (2.0, 1.5, 1.0))

    @property
    def joint_velocities(self) -> Tuple[float, float, float]:
        """Joint velocities in deg/s."""
        return self._triple("robot.joint_velocities", (2.0, 2.0, 2.0))

    # Physics settings
    @property
    def gravity(self) -> float:
        """Gravity acceleration magnitude in m/s^2."""
        return abs(self._float("physics.gravity", 9.81))

    @property
    def motor_efficiency(self) -> float:
        return self._float("physics.motor_efficiency", 0.85)

    # Motion settings
    @property
    def motion_amplitudes(self) -> Tuple[float, float, float]:
        return self._triple("motion.amplitudes", (30.0, 45.0, 30.0))

    @property
    def motion_frequencies(self) -> Tuple[float, float, float]:
        return self._triple("motion.frequencies", (0.10, 0.15, 0.20))

    @property
    def motion_phases(self) -> Tuple[float, float, float]:
        return self._triple("motion.phases", (0.0, 0.0, 0.0))

    @property
    def motion_offsets(self) -> Tuple[float, float, float]:
        return self._triple("motion.offsets", (0.0, 0.0, 0.0))

    @property
    def joint_angle_limits(self) -> Tuple[float, float]:
        """(min, max) joint angle in degrees."""
        low = self._float("motion.min_angle", -90.0)
        high = self._float("motion.max_angle", 90.0)
        if low > high:
            raise InvalidConfigValueError("motion.min_angle", low, f"<= motion.max_angle ({high})")
        return (low, high)

    # Design limits
    @property
    def joint_max_torques(self) -> Tuple[float, float, float]:
        return self._triple("limits.joint_max_torques", (15.0, 15.0, 15.0))

    @property
    def motor_rated_torques(self) -> Tuple[float, float, float]:
        return self._triple("limits.motor_rated_torques", (15.0, 15.0, 15.0))

    @property
    def load_mass(self) -> float:
        return self._float("limits.load_mass", 5.0)

    # Convenience methods
    def get_sample_rate_hz(self) -> float:
        """Get physics re-evaluation frequency in Hz."""
        return 1.0 / self.sample_interval

    def _float(self, key: str, default: float) -> float:
        value = self._config.get(key, default)
        if isinstance(value, bool):
            raise InvalidConfigValueError(key, value, "a number")
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise InvalidConfigValueError(key, value, "a number", cause=e)

    def _triple(self, key: str, default: Tuple[float, float, float]) -> Tuple[float, float, float]:
        values = self._config.get(key, list(default))
        if not isinstance(values, (list, tuple)) or len(values) != 3:
            raise InvalidConfigValueError(key, values, "a list of 3 numbers")
        try:
            return (float(values[0]), float(values[1]), float(values[2]))
        except (TypeError, ValueError) as e:
            raise InvalidConfigValueError(key, values, "a list of 3 numbers", cause=e)


# Global settings instance
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


def reset_settings() -> None:
    """Reset the global settings instance."""
    global _settings_instance
    _settings_instance = None
