"""
Base simulation framework for PyArmSim.

This module provides headless, fixed-interval simulation lifecycle
management: initialization, a ticking main loop, pause/resume and
statistics.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..core.logging import get_logger
from ..core.exceptions import SimulationError, SimulationStateError


class SimulationState(Enum):
    """Simulation execution states."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class SimulationConfig:
    """Configuration for simulation execution."""
    sample_interval: float = 0.1  # seconds between ticks
    speed: float = 1.0
    max_duration: Optional[float] = None  # seconds of wall-clock run time
    max_ticks: Optional[int] = None
    realtime: bool = True  # sleep between ticks
    enable_performance_monitoring: bool = True
    performance_log_interval: float = 5.0

    def __post_init__(self):
        if self.sample_interval <= 0:
            raise SimulationError("sample_interval must be positive",
                                  context={"sample_interval": self.sample_interval})
        if self.speed <= 0:
            raise SimulationError("speed must be positive", context={"speed": self.speed})
        if self.max_ticks is not None and self.max_ticks < 0:
            raise SimulationError("max_ticks must not be negative", context={"max_ticks": self.max_ticks})


@dataclass
class SimulationStats:
    """Runtime statistics for simulation."""
    total_runtime: float = 0.0
    tick_count: int = 0
    average_tick_rate: float = 0.0
    tick_time_ms: float = 0.0
    max_tick_time_ms: float = 0.0
    overruns: int = 0

    def update_tick_stats(self, dt: float, compute_time: float, interval: float):
        """Update tick timing statistics."""
        self.tick_count += 1
        self.total_runtime += dt

        self.tick_time_ms = compute_time * 1000
        self.max_tick_time_ms = max(self.max_tick_time_ms, self.tick_time_ms)

        if compute_time > interval:
            self.overruns += 1

        if self.total_runtime > 0:
            self.average_tick_rate = self.tick_count / self.total_runtime


class BaseSimulation(ABC):
    """
    Abstract base class for fixed-interval simulations.

    Subclasses implement the ``on_*`` hooks; the base class owns the state
    machine, timing and callbacks.
    """

    def __init__(self,
                 name: str = "Simulation",
                 config: Optional[SimulationConfig] = None):
        """
        Initialize the base simulation.

        Args:
            name: Simulation name
            config: Simulation configuration
        """
        self.name = name
        self.config = config or SimulationConfig()
        self.logger = get_logger(f"simulation.{name.lower()}")

        self.state = SimulationState.UNINITIALIZED
        self.start_time = 0.0
        self.last_tick_time = 0.0

        self.stats = SimulationStats()

        self.pre_update_callbacks: List[Callable[[float], None]] = []
        self.post_update_callbacks: List[Callable[[float], None]] = []

        self._last_performance_log = 0.0

        self.logger.debug("BaseSimulation created", extra={
            "simulation": name,
            "config": self.config.__dict__
        })

    def initialize(self) -> bool:
        """
        Initialize the simulation.

        Returns:
            True if initialization successful, False otherwise
        """
        if self.state != SimulationState.UNINITIALIZED:
            self.logger.warning("Simulation already initialized")
            return True

        self.state = SimulationState.INITIALIZING

        try:
            if not self.on_initialize():
                raise SimulationError("Simulation-specific initialization failed")
        except Exception as e:
            self.state = SimulationState.ERROR
            self.logger.error("Failed to initialize simulation", extra={
                "simulation": self.name,
                "error": str(e),
                "error_type": type(e).__name__
            })
            return False

        self.state = SimulationState.READY
        self.logger.info("Simulation initialized successfully", extra={"simulation": self.name})
        return True

    def run(self) -> None:
        """Run the simulation main loop until stopped or a limit is reached."""
        self._start()

        try:
            while self.state in (SimulationState.RUNNING, SimulationState.PAUSED):
                tick_start = time.time()

                if self._tick_limit_reached():
                    break

                if self.state == SimulationState.RUNNING:
                    self._update(self.config.sample_interval)
                    if self.config.enable_performance_monitoring:
                        self._log_performance_if_needed()

                if self._limits_reached():
                    break

                if self.config.realtime:
                    elapsed = time.time() - tick_start
                    time.sleep(max(0.0, self.config.sample_interval - elapsed))

        except KeyboardInterrupt:
            self.logger.info("Simulation interrupted by user")
        except Exception as e:
            self.state = SimulationState.ERROR
            self.logger.error("Simulation error", extra={
                "simulation": self.name,
                "error": str(e),
                "error_type": type(e).__name__
            })
            raise
        finally:
            self._shutdown()

    def step(self, dt: Optional[float] = None) -> bool:
        """
        Advance the simulation by a single tick without sleeping.

        Args:
            dt: Tick length in seconds, defaults to the sample interval

        Returns:
            True if a tick was executed, False while paused
        """
        if self.state in (SimulationState.UNINITIALIZED, SimulationState.READY):
            self._start()

        if self.state == SimulationState.PAUSED:
            return False
        if self.state != SimulationState.RUNNING:
            raise SimulationStateError("Cannot step simulation", state=self.state.value)

        self._update(self.config.sample_interval if dt is None else dt)
        return True

    def stop(self) -> None:
        """Stop the simulation."""
        if self.state in (SimulationState.RUNNING, SimulationState.PAUSED):
            self.state = SimulationState.STOPPING
            self.logger.info("Simulation stop requested", extra={"simulation": self.name})

    def pause(self) -> None:
        """Pause the simulation."""
        if self.state == SimulationState.RUNNING:
            self.state = SimulationState.PAUSED
            self.logger.info("Simulation paused", extra={"simulation": self.name})

    def resume(self) -> None:
        """Resume the simulation."""
        if self.state == SimulationState.PAUSED:
            self.state = SimulationState.RUNNING
            self.logger.info("Simulation resumed", extra={"simulation": self.name})

    def toggle_pause(self) -> None:
        """Play/pause toggle."""
        if self.state == SimulationState.PAUSED:
            self.resume()
        else:
            self.pause()

    @property
    def is_running(self) -> bool:
        return self.state == SimulationState.RUNNING

    def _start(self) -> None:
        if self.state == SimulationState.UNINITIALIZED:
            if not self.initialize():
                raise SimulationError("Cannot run simulation: initialization failed")
        if self.state != SimulationState.READY:
            raise SimulationStateError("Simulation is not ready to start", state=self.state.value)

        self.logger.info("Starting simulation", extra={"simulation": self.name})

        self.state = SimulationState.RUNNING
        self.start_time = time.time()
        self.last_tick_time = self.start_time
        self._last_performance_log = self.start_time

        self.on_start()

    def _tick_limit_reached(self) -> bool:
        return self.config.max_ticks is not None and self.stats.tick_count >= self.config.max_ticks

    def _limits_reached(self) -> bool:
        if self._tick_limit_reached():
            return True
        if self.config.max_duration is not None:
            return (time.time() - self.start_time) >= self.config.max_duration
        return False

    def _update(self, dt: float) -> None:
        """Run one tick through the callbacks and the simulation hook."""
        update_start = time.time()

        for callback in self.pre_update_callbacks:
            try:
                callback(dt)
            except Exception as e:
                self.logger.error("Error in pre-update callback", extra={"error": str(e)})

        self.on_update(dt)

        for callback in self.post_update_callbacks:
            try:
                callback(dt)
            except Exception as e:
                self.logger.error("Error in post-update callback", extra={"error": str(e)})

        self.last_tick_time = time.time()
        self.stats.update_tick_stats(dt, self.last_tick_time - update_start,
                                     self.config.sample_interval)

    def _log_performance_if_needed(self) -> None:
        """Log performance statistics periodically."""
        current_time = time.time()
        if (current_time - self._last_performance_log) >= self.config.performance_log_interval:
            self.logger.debug("Simulation performance", extra={
                "simulation": self.name,
                "ticks": self.stats.tick_count,
                "tick_rate": self.stats.average_tick_rate,
                "tick_time_ms": self.stats.tick_time_ms,
                "max_tick_time_ms": self.stats.max_tick_time_ms,
                "overruns": self.stats.overruns,
            })
            self._last_performance_log = current_time

    def _shutdown(self) -> None:
        """Shutdown simulation systems."""
        if self.state != SimulationState.ERROR:
            self.state = SimulationState.STOPPING

        self.logger.info("Shutting down simulation", extra={"simulation": self.name})
        self.on_shutdown()

        if self.state != SimulationState.ERROR:
            self.state = SimulationState.STOPPED

        self.logger.info("Simulation completed", extra={
            "simulation": self.name,
            "total_runtime": time.time() - self.start_time,
            "total_ticks": self.stats.tick_count,
            "overruns": self.stats.overruns,
        })

    def shutdown(self) -> None:
        """Stop a simulation that was driven with ``step``."""
        if self.state in (SimulationState.RUNNING, SimulationState.PAUSED, SimulationState.STOPPING):
            self._shutdown()

    # Abstract methods for simulation-specific implementation

    @abstractmethod
    def on_initialize(self) -> bool:
        """
        Simulation-specific initialization.

        Returns:
            True if successful, False otherwise
        """

    @abstractmethod
    def on_start(self) -> None:
        """Called when simulation starts running."""

    @abstractmethod
    def on_update(self, dt: float) -> None:
        """
        Simulation-specific update logic.

        Args:
            dt: Tick length in seconds
        """

    @abstractmethod
    def on_shutdown(self) -> None:
        """Simulation-specific cleanup."""

    def add_pre_update_callback(self, callback: Callable[[float], None]) -> None:
        """Add a pre-update callback."""
        self.pre_update_callbacks.append(callback)

    def add_post_update_callback(self, callback: Callable[[float], None]) -> None:
        """Add a post-update callback."""
        self.post_update_callbacks.append(callback)
