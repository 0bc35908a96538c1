"""Performance signal collection.

This module turns raw host signals into the aggregates the controller reads:
- Frame ticks -> FPS samples over a sliding window
- Stall notifications -> a counter with a quiet-period reset
- asyncio-backed tick and stall sources for running outside a browser

Usage:
    from perfguard.monitoring import AsyncioFrameClock, EventLoopStallProbe

    clock = AsyncioFrameClock(refresh_hz=60)
    probe = EventLoopStallProbe()
    await clock.start()
    await probe.start()
"""

from perfguard.monitoring.frame_sampler import FpsSample, FrameRateSampler
from perfguard.monitoring.stall_accumulator import (
    StallAccumulator,
    STALL_RECOVERY_MS,
    STALL_RESET_MS,
)
from perfguard.monitoring.sources import (
    SignalSource,
    AsyncioFrameClock,
    EventLoopStallProbe,
)

__all__ = [
    "FpsSample",
    "FrameRateSampler",
    "StallAccumulator",
    "STALL_RECOVERY_MS",
    "STALL_RESET_MS",
    "SignalSource",
    "AsyncioFrameClock",
    "EventLoopStallProbe",
]
