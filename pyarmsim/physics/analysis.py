"""
Derived performance metrics and design checks.

Turns a PhysicsState into the figures an operator needs to size motors and
batteries: torque margins, current draw, battery runtime and warnings when
a joint, motor or payload exceeds its rating.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .robot_physics import PhysicsState, RobotConfig, NUM_JOINTS
from ..core.exceptions import InvalidConfigValueError


class WarningKind(Enum):
    """Design warning categories."""
    JOINT_OVERLOAD = "joint_overload"
    MOTOR_OVERLOAD = "motor_overload"
    PAYLOAD_EXCEEDED = "payload_exceeded"


@dataclass(frozen=True)
class DesignWarning:
    """A single rating violation."""
    kind: WarningKind
    message: str
    joint_index: Optional[int] = None
    value: float = 0.0
    limit: float = 0.0


@dataclass
class DesignLimits:
    """Ratings of the installed hardware."""
    joint_max_torques: Sequence[float] = (15.0, 15.0, 15.0)  # Nm
    motor_rated_torques: Sequence[float] = (15.0, 15.0, 15.0)  # Nm
    load_mass: float = 5.0  # kg

    def __post_init__(self):
        for key in ("joint_max_torques", "motor_rated_torques"):
            values = getattr(self, key)
            if len(values) != NUM_JOINTS or any(v <= 0 for v in values):
                raise InvalidConfigValueError(f"limits.{key}", list(values), "3 positive torques")
        if self.load_mass < 0:
            raise InvalidConfigValueError("limits.load_mass", self.load_mass, "a non-negative mass")

    @classmethod
    def from_settings(cls, settings) -> 'DesignLimits':
        return cls(
            joint_max_torques=settings.joint_max_torques,
            motor_rated_torques=settings.motor_rated_torques,
            load_mass=settings.load_mass,
        )


@dataclass
class PerformanceMetrics:
    """Summary figures for the current pose."""
    max_payload: float
    reach: float
    max_speed: float  # deg/s
    joint_torque_margins: List[float] = field(default_factory=list)  # %
    battery_life: float = math.inf  # h
    power_consumption: float = 0.0  # W
    current_draw: float = 0.0  # A
    stability_margin: float = 100.0  # %


def torque_margin(torque: float, rated: float) -> float:
    """Remaining torque capacity as a percentage of the rating."""
    if rated <= 0:
        raise ValueError("rated torque must be positive")
    return (rated - torque) / rated * 100


def current_draw(state: PhysicsState) -> float:
    """Battery current in amperes at the state's loaded voltage."""
    if state.total_power <= 0 or state.battery_voltage <= 0:
        return 0.0
    return state.total_power / state.battery_voltage


def battery_runtime_hours(total_power: float, nominal_voltage: float, capacity_mah: float) -> float:
    """Hours of operation left from a full battery at constant power."""
    if total_power <= 0:
        return math.inf
    energy_wh = nominal_voltage * capacity_mah / 1000
    return energy_wh / total_power


def compute_performance_metrics(state: PhysicsState, config: RobotConfig,
                                rated_torques: Optional[Sequence[float]] = None) -> PerformanceMetrics:
    """
    Collect derived metrics for a physics state.

    Args:
        state: Result of RobotPhysics.update_physics
        config: Configuration the state was computed with
        rated_torques: Per-joint ratings for the margins, defaults to the motor torque
    """
    ratings = list(rated_torques) if rated_torques is not None else [config.motor_torque] * NUM_JOINTS

    return PerformanceMetrics(
        max_payload=state.payload_capacity,
        reach=state.reach,
        max_speed=max(abs(joint.velocity) for joint in state.joints),
        joint_torque_margins=[
            torque_margin(joint.torque, rated) for joint, rated in zip(state.joints, ratings)
        ],
        battery_life=battery_runtime_hours(state.total_power, config.battery_voltage,
                                           config.battery_capacity),
        power_consumption=state.total_power,
        current_draw=current_draw(state),
        stability_margin=state.stability,
    )


def check_design(state: PhysicsState, limits: DesignLimits) -> List[DesignWarning]:
    """
    Compare required torques and payload against hardware ratings.

    Returns:
        One warning per violated rating, in joint order
    """
    warnings = []

    for index, (joint, max_torque) in enumerate(zip(state.joints, limits.joint_max_torques)):
        if joint.torque > max_torque:
            warnings.append(DesignWarning(
                kind=WarningKind.JOINT_OVERLOAD,
                message=(f"Torque requirement ({joint.torque:.2f} Nm) exceeds joint {index + 1} "
                         f"max torque ({max_torque} Nm). Reduce payload or adjust configuration."),
                joint_index=index,
                value=joint.torque,
                limit=max_torque,
            ))

    for index, (joint, rated) in enumerate(zip(state.joints, limits.motor_rated_torques)):
        if joint.torque > rated:
            warnings.append(DesignWarning(
                kind=WarningKind.MOTOR_OVERLOAD,
                message=(f"Required torque ({joint.torque:.2f} Nm) exceeds motor {index + 1} "
                         f"rated torque ({rated} Nm). Consider upgrading motor or reducing load."),
                joint_index=index,
                value=joint.torque,
                limit=rated,
            ))

    if limits.load_mass > state.payload_capacity:
        warnings.append(DesignWarning(
            kind=WarningKind.PAYLOAD_EXCEEDED,
            message=(f"Payload mass ({limits.load_mass} kg) exceeds current capacity "
                     f"({state.payload_capacity:.1f} kg). Reduce payload or improve arm configuration."),
            value=limits.load_mass,
            limit=state.payload_capacity,
        ))

    return warnings
