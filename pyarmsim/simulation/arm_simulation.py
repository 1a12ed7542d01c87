"""
Arm Physics Simulation

Drives the 3-DOF physics estimator from a sine-wave joint trajectory:
- Fixed-interval re-evaluation of kinematics, torque, power and battery
- End effector trajectory recording
- Design warnings when ratings are exceeded
- Play / pause / reset / speed control
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Set, Tuple

from .base import BaseSimulation, SimulationConfig
from .motion import SineMotionProfile
from ..physics import (
    RobotConfig, RobotPhysics, PhysicsState, Vector3D,
    DesignLimits, DesignWarning, check_design, compute_performance_metrics
)
from ..core.exceptions import SimulationError


class ArmPhysicsSimulation(BaseSimulation):
    """
    3-DOF arm physics simulation.

    Every tick advances the motion clock by ``dt * speed``, samples the
    joint angles and overwrites the physics state.
    """

    def __init__(self,
                 name: str = "arm_physics",
                 config: Optional[SimulationConfig] = None,
                 robot_config: Optional[RobotConfig] = None,
                 motion: Optional[SineMotionProfile] = None,
                 limits: Optional[DesignLimits] = None,
                 trajectory_length: int = 200):
        super().__init__(name, config)

        self.physics = RobotPhysics(robot_config)
        self.motion = motion or SineMotionProfile()
        self.limits = limits or DesignLimits()

        self.sim_time = 0.0
        self.trajectory_length = trajectory_length
        self.trajectory_points: List[Vector3D] = []
        self.min_trajectory_step = 0.001  # m

        self.warnings: List[DesignWarning] = []
        self._active_warnings: Set[Tuple[str, Optional[int]]] = set()

    @classmethod
    def from_settings(cls, settings, **config_overrides) -> 'ArmPhysicsSimulation':
        """Build a simulation from a Settings instance."""
        config_values = {
            "sample_interval": settings.sample_interval,
            "speed": settings.speed,
            "performance_log_interval": settings.performance_log_interval,
        }
        config_values.update(config_overrides)

        return cls(
            config=SimulationConfig(**config_values),
            robot_config=RobotConfig.from_settings(settings),
            motion=SineMotionProfile.from_settings(settings),
            limits=DesignLimits.from_settings(settings),
            trajectory_length=settings.trajectory_length,
        )

    @property
    def physics_state(self) -> PhysicsState:
        return self.physics.state

    def on_initialize(self) -> bool:
        self.logger.debug("Arm physics simulation initialized", extra={
            "links": list(self.physics.config.link_lengths),
            "payload_mass": self.physics.config.payload_mass,
            "sample_interval": self.config.sample_interval,
        })
        return True

    def on_start(self) -> None:
        self.logger.info("Arm motion started", extra={
            "speed": self.config.speed,
            "slowest_joint_period": self.motion.period(),
        })

    def on_update(self, dt: float) -> None:
        """Sample the motion profile and re-evaluate the physics."""
        self.sim_time += dt * self.config.speed
        angles = self.motion.angles_at(self.sim_time)
        state = self.physics.update_physics(angles)

        self._record_trajectory(Vector3D(*state.end_effector_position))
        self._update_warnings(check_design(state, self.limits))

    def on_shutdown(self) -> None:
        state = self.physics.state
        self.logger.info("Arm physics final state", extra={
            "sim_time": round(self.sim_time, 3),
            "battery_charge": round(state.battery_charge, 4),
            "battery_voltage": round(state.battery_voltage, 3),
        })

    def _record_trajectory(self, position: Vector3D) -> None:
        if not self.trajectory_points or \
           position.distance_to(self.trajectory_points[-1]) > self.min_trajectory_step:
            self.trajectory_points.append(position)

        if len(self.trajectory_points) > self.trajectory_length:
            self.trajectory_points.pop(0)

    def _update_warnings(self, warnings: List[DesignWarning]) -> None:
        """Keep the current warnings and log the ones that just appeared."""
        keys = set()
        for warning in warnings:
            key = (warning.kind.value, warning.joint_index)
            keys.add(key)
            if key not in self._active_warnings:
                self.logger.warning(warning.message, extra={
                    "kind": warning.kind.value,
                    "joint": warning.joint_index,
                    "value": round(warning.value, 3),
                    "limit": warning.limit,
                })

        self._active_warnings = keys
        self.warnings = warnings

    def reset(self) -> PhysicsState:
        """Return to t=0 with a fully extended, idle arm and a full battery."""
        self.sim_time = 0.0
        self.trajectory_points = []
        self.warnings = []
        self._active_warnings = set()
        return self.physics.reset_physics()

    def set_speed(self, speed: float) -> None:
        """Change the playback speed of the motion profile."""
        if speed <= 0:
            raise SimulationError("speed must be positive", context={"speed": speed})
        self.config.speed = speed
        self.logger.info("Playback speed changed", extra={"speed": speed})

    def summary(self) -> Dict[str, Any]:
        """Plain data snapshot of the current simulation state."""
        state = self.physics.state
        metrics = compute_performance_metrics(state, self.physics.config,
                                              self.limits.motor_rated_torques)
        return {
            "name": self.name,
            "state": self.state.value,
            "ticks": self.stats.tick_count,
            "sim_time": self.sim_time,
            "physics": state.to_dict(),
            "metrics": asdict(metrics),
            "warnings": [
                {"kind": w.kind.value, "joint": w.joint_index, "message": w.message}
                for w in self.warnings
            ],
            "trajectory_points": len(self.trajectory_points),
        }
