"""
Workspace sampling for the planar arm.

Evaluates forward kinematics over a regular joint-angle grid with numpy to
estimate the region the end effector can reach.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .robot_physics import RobotConfig


@dataclass(frozen=True)
class WorkspaceBounds:
    """Extents of a sampled workspace, in meters."""
    min_reach: float
    max_reach: float
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    sample_count: int


def max_reach(config: RobotConfig) -> float:
    """Length of the fully extended arm."""
    return config.max_reach


def sample_workspace(config: RobotConfig, resolution: int = 19,
                     angle_limits: Tuple[float, float] = (-90.0, 90.0)) -> np.ndarray:
    """
    Sample end effector positions over the joint-angle grid.

    Args:
        config: Arm geometry
        resolution: Samples per joint, the grid holds resolution**3 poses
        angle_limits: (min, max) joint angle in degrees, shared by all joints

    Returns:
        Array of shape (resolution**3, 3) with x, y, z positions
    """
    if resolution < 2:
        raise ValueError("resolution must be at least 2")
    low, high = angle_limits
    if low > high:
        raise ValueError("angle_limits must be ordered (min, max)")

    angles = np.radians(np.linspace(low, high, resolution))
    t1, t2, t3 = np.meshgrid(angles, angles, angles, indexing="ij")
    theta1 = t1.ravel()
    theta12 = theta1 + t2.ravel()
    theta123 = theta12 + t3.ravel()

    l1, l2, l3 = config.link_lengths
    x = l1 * np.cos(theta1) + l2 * np.cos(theta12) + l3 * np.cos(theta123)
    y = config.base_height + l1 * np.sin(theta1) + l2 * np.sin(theta12) + l3 * np.sin(theta123)

    return np.column_stack([x, y, np.zeros_like(x)])


def workspace_bounds(points: np.ndarray) -> WorkspaceBounds:
    """Summarize sampled points; reach is measured from the base origin."""
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[0] == 0 or points.shape[1] < 2:
        raise ValueError("points must be a non-empty (N, 2) or (N, 3) array")

    reach = np.hypot(points[:, 0], points[:, 1])
    return WorkspaceBounds(
        min_reach=float(reach.min()),
        max_reach=float(reach.max()),
        x_min=float(points[:, 0].min()),
        x_max=float(points[:, 0].max()),
        y_min=float(points[:, 1].min()),
        y_max=float(points[:, 1].max()),
        sample_count=int(points.shape[0]),
    )
