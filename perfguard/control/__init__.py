"""Closed-loop pause/resume control.

This module decides, with hysteresis, when a background workload should be
paused to protect responsiveness and when it is safe to resume it.

Key Features:
- Pause on sustained low FPS or on a burst of long tasks
- Dwell time before resuming to prevent flapping
- Recovery checks on a coarse fixed interval, only while paused
- Graceful degradation to "no monitoring" when the host lacks a signal

Usage:
    from perfguard.control import create_performance_controller

    controller = create_performance_controller(
        {"minFPS": 25, "recoveryDuration": 5000, "actuatorSelector": "ffmpeg"},
        locator=locate_process_actuator,
        tick_source=frame_clock,
        stall_source=stall_probe,
    )
    controller.setup()
    ...
    controller.shutdown()
"""

from typing import Any, Callable, Mapping, Optional

from perfguard.core.config import PerformanceConfig
from perfguard.core.events import EventBus
from perfguard.core.interfaces import ITickSource, IStallSource
from perfguard.control.engine import (
    DecisionEngine,
    EngineState,
    ControllerState,
    PerformanceStats,
    MIN_FPS_SAMPLES,
    RECOVERY_SAMPLE_COUNT,
    monotonic_ms,
)
from perfguard.control.recovery import RecoveryScheduler
from perfguard.control.controller import PerformanceController, ActuatorLocator

__all__ = [
    "DecisionEngine",
    "EngineState",
    "ControllerState",
    "PerformanceStats",
    "MIN_FPS_SAMPLES",
    "RECOVERY_SAMPLE_COUNT",
    "RecoveryScheduler",
    "PerformanceController",
    "ActuatorLocator",
    "create_performance_controller",
]


def create_performance_controller(
    options: Optional[Mapping[str, Any]],
    locator: ActuatorLocator,
    tick_source: Optional[ITickSource],
    stall_source: Optional[IStallSource] = None,
    event_bus: Optional[EventBus] = None,
    clock: Callable[[], float] = monotonic_ms,
) -> PerformanceController:
    """Factory function to create a controller from flat options.

    Args:
        options: Flat key -> value mapping (``minFPS``, ``recoveryDuration``...)
        locator: Finds the actuator for ``actuatorSelector``
        tick_source: Frame-cadence clock
        stall_source: Long-task notifications (optional)
        event_bus: Receives pause/resume notifications (optional)
        clock: Millisecond clock shared with the tick source

    Returns:
        Configured PerformanceController (not set up)
    """
    config = PerformanceConfig.from_mapping(options)
    return PerformanceController(
        config,
        locator,
        tick_source,
        stall_source,
        event_bus=event_bus,
        clock=clock,
    )
