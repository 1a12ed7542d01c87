"""
Configuration management system
"""

from .config import Config, get_config, set_config, reset_config
from .settings import Settings, get_settings, set_settings, reset_settings

__all__ = [
    "Config",
    "Settings",
    "get_config",
    "set_config",
    "reset_config",
    "get_settings",
    "set_settings",
    "reset_settings",
]
