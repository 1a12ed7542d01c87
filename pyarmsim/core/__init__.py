"""
Core system components: logging and error handling.
"""

from .exceptions import (
    ErrorSeverity,
    PyArmSimError,
    ConfigurationError,
    InvalidConfigValueError,
    PhysicsError,
    KinematicsError,
    SimulationError,
    SimulationStateError,
    ErrorHandler,
    get_error_handler,
    handle_error,
    handle_crash,
    safe_execute,
    setup_exception_handling,
)
from .logging import (
    get_logger,
    configure_logging,
    shutdown_logging,
)

__all__ = [
    "ErrorSeverity",
    "PyArmSimError",
    "ConfigurationError",
    "InvalidConfigValueError",
    "PhysicsError",
    "KinematicsError",
    "SimulationError",
    "SimulationStateError",
    "ErrorHandler",
    "get_error_handler",
    "handle_error",
    "handle_crash",
    "safe_execute",
    "setup_exception_handling",
    "get_logger",
    "configure_logging",
    "shutdown_logging",
]
