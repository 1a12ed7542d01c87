"""
Configuration management system for PyArmSim.

This module provides centralized configuration management with support for
JSON files, environment variables, and runtime overrides.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.logging import get_logger


class Config:
    """
    Central configuration manager for PyArmSim.

    Handles loading configuration from multiple sources, later sources
    overriding earlier ones:
    1. Default values (hardcoded)
    2. User config file (~/.pyarmsim/config.json)
    3. Project config file (./config.json) or an explicit file
    4. Environment variables (PYARMSIM_*)
    5. Runtime overrides
    """

    ENV_PREFIX = "PYARMSIM_"

    _defaults = {
        "app": {
            "name": "PyArmSim",
            "version": "0.1.0",
            "debug": False,
            "log_level": "INFO",
            "log_to_file": False,
        },
        "robot": {
            "link1_length": 0.6,
            "link2_length": 0.6,
            "link3_length": 0.6,
            "base_height": 0.3,
            "battery_voltage": 20.0,
            "battery_capacity": 3000,  # mAh
            "motor_torque": 15.0,  # Nm per motor
            "payload_mass": 5.0,  # kg
            "link_masses": [2.0, 1.5, 1.0],
            "joint_velocities": [2.0, 2.0, 2.0],  # deg/s
            "min_battery_voltage": 16.0,
        },
        "physics": {
            "gravity": 9.81,
            "motor_efficiency": 0.85,
        },
        "motion": {
            "amplitudes": [30.0, 45.0, 30.0],  # deg
            "frequencies": [0.10, 0.15, 0.20],  # Hz
            "phases": [0.0, 0.0, 0.0],  # rad
            "offsets": [0.0, 0.0, 0.0],  # deg
            "min_angle": -90.0,
            "max_angle": 90.0,
        },
        "limits": {
            "joint_max_torques": [15.0, 15.0, 15.0],
            "motor_rated_torques": [15.0, 15.0, 15.0],
            "load_mass": 5.0,
        },
        "simulation": {
            "sample_interval": 0.1,  # s
            "speed": 1.0,
            "trajectory_length": 200,
            "performance_log_interval": 5.0,
        }
    }

    def __init__(self, config_file: Optional[Union[str, Path]] = None,
                 load_user_config: bool = True):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to specific config file
            load_user_config: Read ~/.pyarmsim/config.json when present
        """
        self.logger = get_logger("config")
        self._config: Dict[str, Any] = {}
        self._config_file = config_file
        self._load_user_config = load_user_config
        self._load_configuration()

    def _load_configuration(self) -> None:
        """Load configuration from all sources in priority order."""
        self._config = self._deep_copy(self._defaults)

        if self._load_user_config:
            user_config_path = self._get_user_config_path()
            if user_config_path.exists():
                self._load_from_file(user_config_path)

        if self._config_file:
            config_path = Path(self._config_file)
            if config_path.exists():
                self._load_from_file(config_path)
            else:
                self.logger.warning("Config file not found", extra={"path": str(config_path)})
        else:
            project_config = Path("config.json")
            if project_config.exists():
                self._load_from_file(project_config)

        self._load_from_env()

    def _get_user_config_path(self) -> Path:
        """Get the user-specific config file path."""
        return Path.home() / ".pyarmsim" / "config.json"

    def _load_from_file(self, file_path: Path) -> None:
        """Load configuration from JSON file."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # Keep the configuration loaded so far
            self.logger.warning("Could not load config file", extra={
                "path": str(file_path),
                "error": str(e)
            })
            return

        if not isinstance(file_config, dict):
            self.logger.warning("Ignoring config file without a JSON object", extra={
                "path": str(file_path)
            })
            return

        self._deep_merge(self._config, file_config)
        self.logger.debug("Loaded config file", extra={"path": str(file_path)})

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.ENV_PREFIX):
                # PYARMSIM_ROBOT_PAYLOAD_MASS -> ["robot", "payload_mass"]
                parts = key[len(self.ENV_PREFIX):].lower().split('_')
                config_key = self._resolve_env_key(parts)
                self._set_nested_value(self._config, config_key, self._parse_env_value(value))

    def _resolve_env_key(self, parts: List[str]) -> List[str]:
        """Map underscore separated parts onto existing nested keys."""
        keys = []
        node: Any = self._config
        index = 0
        while index < len(parts):
            match = None
            if isinstance(node, dict):
                for end in range(len(parts), index, -1):
                    candidate = "_".join(parts[index:end])
                    if candidate in node:
                        match = (candidate, end)
                        break
            if match is None:
                keys.extend(parts[index:])
                break
            keys.append(match[0])
            node = node[match[0]]
            index = match[1]
        return keys

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        # JSON first, for numbers and lists
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False

        return value

    def _set_nested_value(self, config: Dict[str, Any], keys: list, value: Any) -> None:
        """Set a nested configuration value."""
        for key in keys[:-1]:
            if not isinstance(config.get(key), dict):
                config[key] = {}
            config = config[key]
        config[keys[-1]] = value

    def _deep_copy(self, obj: Any) -> Any:
        """Deep copy configuration object."""
        if isinstance(obj, dict):
            return {k: self._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._deep_copy(v) for v in obj]
        else:
            return obj

    def _deep_merge(self, target: Dict[str, Any], source: Dict[str, Any]) -> None:
        """Deep merge source dict into target dict."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._deep_merge(target[key], value)
            else:
                target[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "robot.payload_mass")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        self._set_nested_value(self._config, key.split('.'), value)

    def save(self, file_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Save current configuration to file.

        Args:
            file_path: Optional path to save to, defaults to user config

        Returns:
            Path the configuration was written to
        """
        if file_path is None:
            file_path = self._get_user_config_path()
        else:
            file_path = Path(file_path)

        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)

        self.logger.info("Configuration saved", extra={"path": str(file_path)})
        return file_path

    def get_all(self) -> Dict[str, Any]:
        """Get the complete configuration dictionary."""
        return self._deep_copy(self._config)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = self._deep_copy(self._defaults)

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        return self.get("app.debug", False)

    @property
    def log_level(self) -> str:
        """Logging level."""
        return self.get("app.log_level", "INFO")


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config_instance
    _config_instance = None
