"""
Physics estimation for the 3-DOF arm.

This module provides:
- Forward kinematics, static torque, power and battery estimation
- Derived performance metrics and design checks
- Workspace sampling
"""

from .vectors import Vector3D
from .robot_physics import (
    RobotConfig,
    JointState,
    PhysicsState,
    RobotPhysics,
    NUM_JOINTS,
)
from .analysis import (
    WarningKind,
    DesignWarning,
    DesignLimits,
    PerformanceMetrics,
    torque_margin,
    current_draw,
    battery_runtime_hours,
    compute_performance_metrics,
    check_design,
)
from .workspace import (
    WorkspaceBounds,
    max_reach,
    sample_workspace,
    workspace_bounds,
)

__all__ = [
    "Vector3D",
    "RobotConfig",
    "JointState",
    "PhysicsState",
    "RobotPhysics",
    "NUM_JOINTS",
    "WarningKind",
    "DesignWarning",
    "DesignLimits",
    "PerformanceMetrics",
    "torque_margin",
    "current_draw",
    "battery_runtime_hours",
    "compute_performance_metrics",
    "check_design",
    "WorkspaceBounds",
    "max_reach",
    "sample_workspace",
    "workspace_bounds",
]
