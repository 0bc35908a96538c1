"""
PerfGuard - performance-aware pause/resume for background workloads.

Watches frame-rate and long-task signals from the running application and
pauses a continuously-active background workload when responsiveness
suffers, resuming it only after performance has stayed good for a while.

Usage:
    from perfguard import load_config, create_performance_controller

    config = load_config()
    # See main.py for full initialization
"""

__version__ = "1.0.0"

# Core exports
from perfguard.core import (
    SystemConfig,
    PerformanceConfig,
    load_config,
    validate_config,
    EventBus,
)

# Controller exports
from perfguard.control import (
    PerformanceController,
    DecisionEngine,
    create_performance_controller,
)
from perfguard.monitoring import AsyncioFrameClock, EventLoopStallProbe
from perfguard.actuators import ProcessActuator, locate_process_actuator

# Utility exports
from perfguard.utils import setup_logging

__all__ = [
    "__version__",

    # Core
    "SystemConfig",
    "PerformanceConfig",
    "load_config",
    "validate_config",
    "EventBus",

    # Controller
    "PerformanceController",
    "DecisionEngine",
    "create_performance_controller",

    # Host adapters
    "AsyncioFrameClock",
    "EventLoopStallProbe",
    "ProcessActuator",
    "locate_process_actuator",

    # Utilities
    "setup_logging",
]


def get_version() -> str:
    """Get the current version of PerfGuard."""
    return __version__
