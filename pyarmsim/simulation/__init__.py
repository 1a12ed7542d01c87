"""
Simulation framework for PyArmSim.

This module provides the fixed-interval simulation lifecycle and the arm
physics simulation built on it.
"""

from .base import (
    BaseSimulation,
    SimulationConfig,
    SimulationState,
    SimulationStats
)
from .motion import SineMotionProfile
from .arm_simulation import ArmPhysicsSimulation

__all__ = [
    "BaseSimulation",
    "SimulationConfig",
    "SimulationState",
    "SimulationStats",
    "SineMotionProfile",
    "ArmPhysicsSimulation",
]
