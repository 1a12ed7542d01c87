"""
Structured logging system for PyArmSim.

Provides centralized logging configuration with console and rotating file
outputs, in human-readable or JSON form.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union


_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'getMessage', 'taskName', 'message',
}


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs structured log messages.

    Supports both JSON and human-readable formats. Fields passed through
    ``extra=`` are appended to the message.
    """

    def __init__(self, fmt_type: str = "human", include_extra: bool = True):
        """
        Initialize structured formatter.

        Args:
            fmt_type: Format type ("human" or "json")
            include_extra: Include extra fields in output
        """
        self.fmt_type = fmt_type
        self.include_extra = include_extra
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process_id": record.process,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_fields = {}
            for key, value in record.__dict__.items():
                if key in _RESERVED_ATTRS:
                    continue
                try:
                    json.dumps(value)
                    extra_fields[key] = value
                except (TypeError, ValueError):
                    extra_fields[key] = str(value)

            if extra_fields:
                log_data["extra"] = extra_fields

        if self.fmt_type == "json":
            return json.dumps(log_data, ensure_ascii=False)
        return self._format_human_readable(log_data)

    def _format_human_readable(self, log_data: Dict[str, Any]) -> str:
        """Format log data as human-readable string."""
        timestamp = log_data["timestamp"][:19]
        level = log_data["level"]
        logger = log_data["logger"]
        message = log_data["message"]
        location = f"{log_data['module']}:{log_data['function']}:{log_data['line']}"

        level_colors = {
            "DEBUG": "\033[36m",
            "INFO": "\033[32m",
            "WARNING": "\033[33m",
            "ERROR": "\033[31m",
            "CRITICAL": "\033[35m",
        }
        reset_color = "\033[0m"

        use_colors = hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

        if use_colors and level in level_colors:
            level_str = f"{level_colors[level]}{level:<8}{reset_color}"
        else:
            level_str = f"{level:<8}"

        formatted = f"{timestamp} {level_str} {logger:<28} {message}"

        if level == "DEBUG":
            formatted += f" [{location}]"

        if "extra" in log_data and log_data["extra"]:
            extra_str = ", ".join(f"{k}={v}" for k, v in log_data["extra"].items())
            formatted += f" | {extra_str}"

        if "exception" in log_data:
            formatted += f"\n{log_data['exception']}"

        return formatted


class PerformanceFilter(logging.Filter):
    """Filter that stamps records with the time elapsed since configuration."""

    def __init__(self):
        super().__init__()
        self.start_time = time.time()

    def filter(self, record: logging.LogRecord) -> bool:
        record.elapsed_time = round(time.time() - self.start_time, 3)
        return True


class LoggerManager:
    """
    Centralized logger management for PyArmSim.

    Configures the root handlers once and hands out ``pyarmsim.*`` loggers.
    """

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._configured = False
        self._log_dir: Optional[Path] = None

    def configure(self,
                  log_level: str = "INFO",
                  log_dir: Optional[Union[str, Path]] = None,
                  console_output: bool = True,
                  file_output: bool = True,
                  json_format: bool = False,
                  max_file_size: int = 10 * 1024 * 1024,  # 10MB
                  backup_count: int = 5) -> None:
        """
        Configure the logging system.

        Args:
            log_level: Minimum log level to output
            log_dir: Directory for log files (created if missing)
            console_output: Enable console output
            file_output: Enable file output
            json_format: Use JSON format for file output
            max_file_size: Maximum size of each log file
            backup_count: Number of backup files to keep
        """
        if self._configured:
            return

        level = getattr(logging, log_level.upper())

        root_logger = logging.getLogger("pyarmsim")
        root_logger.setLevel(level)
        root_logger.handlers.clear()
        root_logger.propagate = False

        perf_filter = PerformanceFilter()

        if console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(StructuredFormatter("human"))
            console_handler.addFilter(perf_filter)
            root_logger.addHandler(console_handler)

        if file_output:
            self._log_dir = Path(log_dir) if log_dir else Path.home() / ".pyarmsim" / "logs"
            self._log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                self._log_dir / "pyarmsim.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)

            if json_format:
                file_handler.setFormatter(StructuredFormatter("json"))
            else:
                file_handler.setFormatter(StructuredFormatter("human", include_extra=False))

            file_handler.addFilter(perf_filter)
            root_logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                self._log_dir / "pyarmsim_errors.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(StructuredFormatter("human"))
            error_handler.addFilter(perf_filter)
            root_logger.addHandler(error_handler)

        self._configured = True

        self.get_logger("logging").info("Logging system configured", extra={
            "log_level": log_level,
            "log_dir": str(self._log_dir) if self._log_dir else None,
            "console_output": console_output,
            "file_output": file_output,
            "json_format": json_format
        })

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get or create a logger with the given name.

        Args:
            name: Logger name (typically module name)

        Returns:
            Logger named ``pyarmsim.<name>``
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(f"pyarmsim.{name}")
        return self._loggers[name]

    def shutdown(self) -> None:
        """Shutdown the logging system gracefully."""
        if self._configured:
            self.get_logger("logging").info("Shutting down logging system")
        logging.shutdown()


# Global logger manager instance
_logger_manager: Optional[LoggerManager] = None


def get_logger_manager() -> LoggerManager:
    """Get the global logger manager instance."""
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    return _logger_manager


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module/component.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    return get_logger_manager().get_logger(name)


def configure_logging(log_level: Optional[str] = None, **kwargs) -> None:
    """
    Configure the logging system with the given parameters.

    Args:
        log_level: Minimum log level, defaults to the configured one
        **kwargs: Additional LoggerManager.configure options
    """
    # Import here to avoid circular imports
    from ..config import get_settings

    settings = get_settings()

    kwargs.setdefault('file_output', settings.log_to_file)

    get_logger_manager().configure(
        log_level=log_level or settings.log_level,
        **kwargs
    )


def shutdown_logging() -> None:
    """Shutdown the logging system."""
    get_logger_manager().shutdown()
