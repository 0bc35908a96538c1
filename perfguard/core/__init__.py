"""Core system components.

This module contains the foundations the controller is built on:
- Configuration loading and validation
- Event bus for pause/resume notifications
- Interfaces for tick sources, stall sources and actuators
- Event logging and metrics

Usage:
    from perfguard.core import SystemConfig, EventBus, load_config
    from perfguard.control import PerformanceController
"""

from perfguard.core.config import (
    SystemConfig,
    PerformanceConfig,
    HostConfig,
    load_config,
    validate_config,
    validate_performance_config,
)
from perfguard.core.events import (
    EventBus,
    Event,
    EventPriority,
    PlaybackPaused,
    PlaybackResumed,
    ResumeFailed,
    StallDetected,
    PerformanceStatsReported,
)
from perfguard.core.interfaces import (
    CommandStatus,
    CommandResult,
    Subscription,
    ITickSource,
    IStallSource,
    IActuator,
)
from perfguard.core.events_listener import (
    SystemEventLogger,
    register_event_listeners
)

__all__ = [
    # Configuration
    "SystemConfig",
    "PerformanceConfig",
    "HostConfig",
    "load_config",
    "validate_config",
    "validate_performance_config",

    # Event System
    "EventBus",
    "Event",
    "EventPriority",
    "PlaybackPaused",
    "PlaybackResumed",
    "ResumeFailed",
    "StallDetected",
    "PerformanceStatsReported",

    # Interfaces
    "CommandStatus",
    "CommandResult",
    "Subscription",
    "ITickSource",
    "IStallSource",
    "IActuator",

    # Logging & Listeners
    "SystemEventLogger",
    "register_event_listeners",
]
