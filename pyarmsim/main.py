"""
Main entry point for PyArmSim application.

Evaluates single poses, runs the sine-wave driven physics simulation and
reports workspace extents from the command line.
"""

import sys
import json
import math
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .config import Config, get_config, set_config, get_settings, reset_settings
from .core.logging import configure_logging, get_logger, shutdown_logging
from .core.exceptions import PyArmSimError, setup_exception_handling, handle_error, handle_crash
from .physics import (
    RobotConfig, RobotPhysics, DesignLimits,
    check_design, compute_performance_metrics, sample_workspace, workspace_bounds
)
from .simulation import ArmPhysicsSimulation


def setup_argument_parser() -> argparse.ArgumentParser:
    """
    Set up command line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="pyarmsim",
        description="PyArmSim - 3-DOF robotic arm physics estimator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pyarmsim                           # Run the sine-wave simulation for 10 s
  pyarmsim --ticks 500 --json        # Run 500 ticks as fast as possible
  pyarmsim --pose 30 -45 15          # Evaluate a single pose (degrees)
  pyarmsim --workspace 25            # Sample the reachable workspace
  pyarmsim --config myconfig.json    # Use custom configuration
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"PyArmSim {__version__}"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with verbose logging"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="FILE",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--log-dir",
        type=str,
        metavar="DIR",
        help="Also write rotating log files into DIR"
    )

    # Modes
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--pose",
        type=float,
        nargs=3,
        metavar=("THETA1", "THETA2", "THETA3"),
        help="Evaluate one pose given in degrees and exit"
    )

    mode.add_argument(
        "--workspace",
        type=int,
        metavar="N",
        help="Sample the workspace with N angles per joint and exit"
    )

    # Simulation options
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        metavar="SECONDS",
        help="Wall-clock run time of the simulation (default: 10)"
    )

    parser.add_argument(
        "--ticks",
        type=int,
        metavar="N",
        help="Run N ticks without sleeping instead of a timed run"
    )

    parser.add_argument(
        "--interval",
        type=float,
        metavar="SECONDS",
        help="Seconds between physics updates (overrides config)"
    )

    parser.add_argument(
        "--speed",
        type=float,
        help="Motion playback speed multiplier (overrides config)"
    )

    parser.add_argument(
        "--payload",
        type=float,
        metavar="KG",
        help="Payload mass in kg (overrides config)"
    )

    # Output
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine readable JSON"
    )

    parser.add_argument(
        "--reset-config",
        action="store_true",
        help="Reset user configuration to defaults and exit"
    )

    return parser


def apply_command_line_overrides(args: argparse.Namespace) -> None:
    """
    Apply command line argument overrides to configuration.

    Args:
        args: Parsed command line arguments
    """
    config = get_config()

    if args.debug:
        config.set("app.debug", True)
        config.set("app.log_level", "DEBUG")

    if args.log_level:
        config.set("app.log_level", args.log_level)

    if args.log_dir:
        config.set("app.log_to_file", True)

    if args.interval is not None:
        config.set("simulation.sample_interval", args.interval)

    if args.speed is not None:
        config.set("simulation.speed", args.speed)

    if args.payload is not None:
        config.set("robot.payload_mass", args.payload)


def initialize_application(args: argparse.Namespace) -> bool:
    """
    Load configuration and set up logging and exception handling.

    Args:
        args: Parsed command line arguments

    Returns:
        True if initialization successful, False otherwise
    """
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Configuration file '{args.config}' not found", file=sys.stderr)
            return False
        set_config(Config(config_path))
        reset_settings()

    apply_command_line_overrides(args)

    settings = get_settings()
    log_kwargs = {}
    if args.log_dir:
        log_kwargs['log_dir'] = Path(args.log_dir)

    configure_logging(log_level=settings.log_level, **log_kwargs)
    setup_exception_handling()

    get_logger("main").info("PyArmSim application starting", extra={
        "version": __version__,
        "debug_mode": settings.debug_mode,
        "sample_interval": settings.sample_interval,
    })
    return True


def evaluate_pose(angles: List[float]) -> Dict[str, Any]:
    """Evaluate the physics for a single pose using the active settings."""
    settings = get_settings()
    robot_config = RobotConfig.from_settings(settings)
    limits = DesignLimits.from_settings(settings)

    physics = RobotPhysics(robot_config)
    state = physics.update_physics(angles)
    metrics = compute_performance_metrics(state, robot_config, limits.motor_rated_torques)

    return {
        "physics": state.to_dict(),
        "metrics": metrics.__dict__,
        "joint_positions": [p.to_tuple() for p in physics.joint_positions(angles)],
        "warnings": [
            {"kind": w.kind.value, "joint": w.joint_index, "message": w.message}
            for w in check_design(state, limits)
        ],
    }


def run_simulation(args: argparse.Namespace) -> Dict[str, Any]:
    """Run the motion-driven simulation and return its summary."""
    settings = get_settings()

    if args.ticks is not None:
        simulation = ArmPhysicsSimulation.from_settings(
            settings, max_ticks=args.ticks, realtime=False)
    else:
        simulation = ArmPhysicsSimulation.from_settings(
            settings, max_duration=args.duration, realtime=True)

    simulation.run()
    return simulation.summary()


def report_workspace(resolution: int) -> Dict[str, Any]:
    """Sample the workspace for the active configuration."""
    settings = get_settings()
    robot_config = RobotConfig.from_settings(settings)
    points = sample_workspace(robot_config, resolution, settings.joint_angle_limits)
    bounds = workspace_bounds(points)

    return {
        "resolution": resolution,
        "max_reach": robot_config.max_reach,
        "bounds": bounds.__dict__,
    }


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return "inf" if math.isinf(value) else f"{value:.3f}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


def _json_safe(value: Any) -> Any:
    """Replace inf/nan floats with None so the output stays strict JSON."""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def print_report(report: Dict[str, Any], as_json: bool = False) -> None:
    """Print a report as JSON or as indented key/value lines."""
    if as_json:
        print(json.dumps(_json_safe(report), indent=2, allow_nan=False))
        return

    def emit(data: Dict[str, Any], indent: int = 0) -> None:
        pad = "  " * indent
        for key, value in data.items():
            if isinstance(value, dict):
                print(f"{pad}{key}:")
                emit(value, indent + 1)
            elif isinstance(value, list) and value and isinstance(value[0], dict):
                print(f"{pad}{key}:")
                for item in value:
                    print(f"{pad}  -")
                    emit(item, indent + 2)
            else:
                print(f"{pad}{key}: {_format_value(value)}")

    emit(report)


def run_application(args: argparse.Namespace) -> int:
    """
    Run the requested command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger = get_logger("main")

    try:
        if args.pose is not None:
            report = evaluate_pose(list(args.pose))
        elif args.workspace is not None:
            report = report_workspace(args.workspace)
        else:
            report = run_simulation(args)

        print_report(report, as_json=args.json)
        return 0

    except PyArmSimError as e:
        handle_error(e)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error("Invalid argument", extra={"error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.critical("Critical error in main application", extra={
            "error": str(e),
            "error_type": type(e).__name__
        })
        handle_crash(e)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for PyArmSim application.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    try:
        if args.reset_config:
            config = get_config()
            config.reset_to_defaults()
            path = config.save()
            print(f"Configuration reset: {path}")
            return 0

        if not initialize_application(args):
            return 1

        return run_application(args)

    except PyArmSimError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")
        return 0
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
