"""
PyArmSim - physics estimator for a 3-DOF robotic arm

Forward kinematics, static torque, power and battery estimation driven on a
fixed-interval tick.
"""

__version__ = "0.1.0"

from .physics import RobotConfig, RobotPhysics, PhysicsState
from .simulation import ArmPhysicsSimulation
from .config import Config, Settings

__all__ = [
    "RobotConfig",
    "RobotPhysics",
    "PhysicsState",
    "ArmPhysicsSimulation",
    "Config",
    "Settings",
]
