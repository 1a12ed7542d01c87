"""
Joint trajectories for driving the physics estimator.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..core.exceptions import InvalidConfigValueError
from ..physics import NUM_JOINTS


@dataclass
class SineMotionProfile:
    """
    Periodic joint motion: offset + amplitude * sin(2*pi*f*t + phase).

    Angles are in degrees and clamped to ``limits``.
    """
    amplitudes: Sequence[float] = (30.0, 45.0, 30.0)  # deg
    frequencies: Sequence[float] = (0.10, 0.15, 0.20)  # Hz
    phases: Sequence[float] = (0.0, 0.0, 0.0)  # rad
    offsets: Sequence[float] = (0.0, 0.0, 0.0)  # deg
    limits: Tuple[float, float] = (-90.0, 90.0)  # deg

    def __post_init__(self):
        for name in ("amplitudes", "frequencies", "phases", "offsets"):
            values = getattr(self, name)
            if len(values) != NUM_JOINTS:
                raise InvalidConfigValueError(f"motion.{name}", list(values), "a list of 3 numbers")
        if any(f < 0 for f in self.frequencies):
            raise InvalidConfigValueError("motion.frequencies", list(self.frequencies),
                                          "non-negative frequencies")
        if self.limits[0] > self.limits[1]:
            raise InvalidConfigValueError("motion.min_angle", self.limits[0], "<= motion.max_angle")

    @classmethod
    def from_settings(cls, settings) -> 'SineMotionProfile':
        return cls(
            amplitudes=settings.motion_amplitudes,
            frequencies=settings.motion_frequencies,
            phases=settings.motion_phases,
            offsets=settings.motion_offsets,
            limits=settings.joint_angle_limits,
        )

    def angles_at(self, t: float) -> List[float]:
        """Joint angles in degrees at time ``t`` seconds."""
        low, high = self.limits
        angles = []
        for amplitude, frequency, phase, offset in zip(
                self.amplitudes, self.frequencies, self.phases, self.offsets):
            angle = offset + amplitude * math.sin(2 * math.pi * frequency * t + phase)
            angles.append(max(low, min(high, angle)))
        return angles

    def period(self) -> float:
        """Slowest joint period in seconds; inf when every joint is still."""
        moving = [f for f, a in zip(self.frequencies, self.amplitudes) if f > 0 and a != 0]
        if not moving:
            return math.inf
        return 1.0 / min(moving)
