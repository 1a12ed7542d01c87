"""
Robot Arm Physics Estimator

This module evaluates the physics state of a planar 3-DOF robot arm:
- Closed-form forward kinematics
- Static joint torque under gravity and payload
- Motor power draw
- Battery voltage / charge bookkeeping and derived metrics

All joint angles and velocities are in degrees and degrees per second.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .vectors import Vector3D
from ..core.logging import get_logger
from ..core.exceptions import InvalidConfigValueError, KinematicsError, PhysicsError

NUM_JOINTS = 3


@dataclass
class RobotConfig:
    """Robot arm configuration and parameters."""

    # Geometry
    link1_length: float = 0.6  # m
    link2_length: float = 0.6  # m
    link3_length: float = 0.6  # m
    base_height: float = 0.3  # m

    # Power system
    battery_voltage: float = 20.0  # V, nominal
    battery_capacity: float = 3000  # mAh
    min_battery_voltage: float = 16.0  # V

    # Actuation and load
    motor_torque: float = 15.0  # Nm per motor
    payload_mass: float = 5.0  # kg
    link_masses: Tuple[float, float, float] = (2.0, 1.5, 1.0)  # kg
    joint_velocities: Tuple[float, float, float] = (2.0, 2.0, 2.0)  # deg/s

    gravity: float = 9.81  # m/s^2
    motor_efficiency: float = 0.85

    @property
    def link_lengths(self) -> Tuple[float, float, float]:
        return (self.link1_length, self.link2_length, self.link3_length)

    @property
    def max_reach(self) -> float:
        """Length of the fully extended arm."""
        return sum(self.link_lengths)

    def validate(self) -> 'RobotConfig':
        """
        Check physical plausibility of the configuration.

        Returns:
            self, for chaining

        Raises:
            InvalidConfigValueError: If any value is out of range
        """
        for i, length in enumerate(self.link_lengths, 1):
            if not length > 0:
                raise InvalidConfigValueError(f"robot.link{i}_length", length, "a positive length")

        positive = {
            "robot.battery_voltage": self.battery_voltage,
            "robot.battery_capacity": self.battery_capacity,
            "robot.motor_torque": self.motor_torque,
            "physics.gravity": self.gravity,
        }
        for key, value in positive.items():
            if not value > 0:
                raise InvalidConfigValueError(key, value, "a positive number")

        if self.base_height < 0:
            raise InvalidConfigValueError("robot.base_height", self.base_height, "a non-negative height")
        if self.payload_mass < 0:
            raise InvalidConfigValueError("robot.payload_mass", self.payload_mass, "a non-negative mass")
        if not 0 <= self.min_battery_voltage <= self.battery_voltage:
            raise InvalidConfigValueError(
                "robot.min_battery_voltage", self.min_battery_voltage,
                f"between 0 and the nominal voltage ({self.battery_voltage})")
        if not 0 < self.motor_efficiency <= 1:
            raise InvalidConfigValueError("physics.motor_efficiency", self.motor_efficiency, "a fraction in (0, 1]")

        if len(self.link_masses) != NUM_JOINTS or any(m < 0 for m in self.link_masses):
            raise InvalidConfigValueError("robot.link_masses", list(self.link_masses),
                                          "3 non-negative masses")
        if len(self.joint_velocities) != NUM_JOINTS:
            raise InvalidConfigValueError("robot.joint_velocities", list(self.joint_velocities),
                                          "3 joint velocities")
        return self

    @classmethod
    def from_settings(cls, settings) -> 'RobotConfig':
        """Create a validated configuration from a Settings instance."""
        link1, link2, link3 = settings.link_lengths
        return cls(
            link1_length=link1,
            link2_length=link2,
            link3_length=link3,
            base_height=settings.base_height,
            battery_voltage=settings.battery_voltage,
            battery_capacity=settings.battery_capacity,
            min_battery_voltage=settings.min_battery_voltage,
            motor_torque=settings.motor_torque,
            payload_mass=settings.payload_mass,
            link_masses=settings.link_masses,
            joint_velocities=settings.joint_velocities,
            gravity=settings.gravity,
            motor_efficiency=settings.motor_efficiency,
        ).validate()


@dataclass
class JointState:
    """Per-joint values of the last physics evaluation."""
    angle: float = 0.0  # deg
    velocity: float = 0.0  # deg/s
    torque: float = 0.0  # Nm
    power: float = 0.0  # W


def _idle_joints() -> List[JointState]:
    return [JointState() for _ in range(NUM_JOINTS)]


@dataclass
class PhysicsState:
    """Snapshot of the arm's estimated physics."""
    joints: List[JointState] = field(default_factory=_idle_joints)
    end_effector_position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    total_power: float = 0.0  # W
    battery_voltage: float = 20.0  # V
    battery_charge: float = 100.0  # %
    payload_capacity: float = 5.0  # kg
    reach: float = 1.8  # m
    stability: float = 85.0  # %

    @classmethod
    def initial(cls, config: RobotConfig) -> 'PhysicsState':
        """State before the first update."""
        return cls(
            battery_voltage=config.battery_voltage,
            payload_capacity=config.payload_mass,
            reach=config.max_reach,
        )

    @property
    def joint_angles(self) -> List[float]:
        return [joint.angle for joint in self.joints]

    @property
    def joint_torques(self) -> List[float]:
        return [joint.torque for joint in self.joints]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["end_effector_position"] = list(self.end_effector_position)
        return data


class RobotPhysics:
    """
    Physics estimator for the 3-DOF arm.

    The estimator is stateless apart from ``state``: each call to
    ``update_physics`` overwrites it, carrying only the battery charge over
    from the previous state.
    """

    def __init__(self, config: Optional[RobotConfig] = None):
        self.config = (config or RobotConfig()).validate()
        self.logger = get_logger("physics.robot")
        self.state = PhysicsState.initial(self.config)
        self.update_count = 0

    def _normalize_angles(self, angles: Optional[Sequence[Optional[float]]]) -> List[float]:
        """Return three finite angles; missing entries count as zero."""
        if angles is None:
            return [0.0] * NUM_JOINTS

        values = list(angles)
        if len(values) > NUM_JOINTS:
            raise KinematicsError(f"Expected at most {NUM_JOINTS} joint angles, got {len(values)}",
                                  angles=values)

        normalized = []
        for value in values:
            if value is None:
                normalized.append(0.0)
                continue
            try:
                angle = float(value)
            except (TypeError, ValueError) as e:
                raise KinematicsError(f"Joint angle {value!r} is not a number", angles=values, cause=e)
            if not math.isfinite(angle):
                raise KinematicsError(f"Joint angle {angle} is not finite", angles=values)
            normalized.append(angle)

        normalized.extend([0.0] * (NUM_JOINTS - len(normalized)))
        return normalized

    def _cumulative_radians(self, angles) -> List[float]:
        """Absolute link orientations θ1, θ1+θ2, θ1+θ2+θ3 in radians."""
        result = []
        total = 0.0
        for angle in self._normalize_angles(angles):
            total += math.radians(angle)
            result.append(total)
        return result

    def forward_kinematics(self, angles) -> Tuple[float, float, float]:
        """
        Calculate the end effector position for the given joint angles.

        Args:
            angles: Three joint angles in degrees

        Returns:
            (x, y, z) in meters; z is always 0 for the planar arm
        """
        positions = self.joint_positions(angles)
        return positions[-1].to_tuple()

    def joint_positions(self, angles) -> List[Vector3D]:
        """
        Calculate the positions of every joint along the arm.

        Returns:
            Base origin, shoulder, elbow, wrist and end effector positions
        """
        shoulder = Vector3D(0.0, self.config.base_height, 0.0)
        positions = [Vector3D(0.0, 0.0, 0.0), shoulder]

        current = shoulder
        for length, theta in zip(self.config.link_lengths, self._cumulative_radians(angles)):
            current = current + Vector3D(length * math.cos(theta), length * math.sin(theta), 0.0)
            positions.append(current)

        return positions

    def torque_requirements(self, angles) -> List[float]:
        """
        Static holding torque for each joint under gravity and payload.

        Each joint carries half of its own link plus the full mass of every
        link and the payload further out, all at its link's lever arm.

        Returns:
            Absolute torques in Nm
        """
        theta1, theta12, theta123 = self._cumulative_radians(angles)
        m1, m2, m3 = self.config.link_masses
        l1, l2, l3 = self.config.link_lengths
        mp = self.config.payload_mass
        g = self.config.gravity

        tau1 = (m1 * l1 / 2 + m2 * l1 + m3 * l1 + mp * l1) * g * math.cos(theta1)
        tau2 = (m2 * l2 / 2 + m3 * l2 + mp * l2) * g * math.cos(theta12)
        tau3 = (m3 * l3 / 2 + mp * l3) * g * math.cos(theta123)

        return [abs(tau1), abs(tau2), abs(tau3)]

    def power_consumption(self, torques: Sequence[float], velocities: Sequence[float]) -> List[float]:
        """
        Electrical power per joint: torque x angular velocity / efficiency.

        Args:
            torques: Joint torques in Nm
            velocities: Joint velocities in deg/s

        Returns:
            Power draw per joint in W
        """
        if len(torques) != len(velocities):
            raise PhysicsError("Torque and velocity lists differ in length", context={
                "torques": len(torques),
                "velocities": len(velocities),
            })

        efficiency = self.config.motor_efficiency
        return [
            abs(torque * math.radians(velocity)) / efficiency
            for torque, velocity in zip(torques, velocities)
        ]

    def payload_capacity(self, torques: Sequence[float]) -> float:
        """Payload the weakest joint can carry, scaled from the nominal payload."""
        ratios = [self.config.motor_torque / torque for torque in torques if torque > 0]
        if not ratios:
            return math.inf
        return min(ratios) * self.config.payload_mass

    def update_physics(self, target_angles) -> PhysicsState:
        """
        Re-evaluate the physics state for a new pose.

        Args:
            target_angles: Three joint angles in degrees

        Returns:
            The new state, also stored on ``self.state``
        """
        angles = self._normalize_angles(target_angles)
        torques = self.torque_requirements(angles)
        end_effector = self.forward_kinematics(angles)

        velocities = list(self.config.joint_velocities)
        powers = self.power_consumption(torques, velocities)
        total_power = sum(powers)

        # Battery discharge
        current = total_power / self.config.battery_voltage  # A
        discharge_rate = current / (self.config.battery_capacity / 1000)  # per hour

        previous = self.state
        self.state = PhysicsState(
            joints=[
                JointState(angle=angle, velocity=velocity, torque=torque, power=power)
                for angle, velocity, torque, power in zip(angles, velocities, torques, powers)
            ],
            end_effector_position=end_effector,
            total_power=total_power,
            battery_voltage=max(self.config.min_battery_voltage,
                                self.config.battery_voltage - discharge_rate * 0.1),
            battery_charge=max(0.0, previous.battery_charge - discharge_rate * 0.01),
            payload_capacity=self.payload_capacity(torques),
            reach=math.hypot(end_effector[0], end_effector[1]),
            stability=max(0.0, 100 - (total_power / 100) * 10),
        )
        self.update_count += 1

        self.logger.debug("Physics updated", extra={
            "angles": angles,
            "total_power": round(total_power, 4),
            "battery_charge": round(self.state.battery_charge, 4),
        })
        return self.state

    def reset_physics(self) -> PhysicsState:
        """Return the arm to the fully extended, idle state with a full battery."""
        self.state = PhysicsState(
            joints=_idle_joints(),
            end_effector_position=(self.config.max_reach, self.config.base_height, 0.0),
            total_power=0.0,
            battery_voltage=self.config.battery_voltage,
            battery_charge=100.0,
            payload_capacity=self.config.payload_mass,
            reach=self.config.max_reach,
            stability=100.0,
        )
        self.update_count = 0
        self.logger.info("Physics state reset")
        return self.state
