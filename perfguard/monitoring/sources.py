"""Host signal sources built on the asyncio event loop.

AsyncioFrameClock stands in for a display refresh callback: it wakes once per
frame interval and reports the loop time. When other work hogs the loop the
wakeups arrive late, so the measured FPS drops.

EventLoopStallProbe reports long tasks: it sleeps for a short, known interval
and treats any extra delay before it runs again as a stall of that length.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from perfguard.core.interfaces import (
    ITickSource,
    IStallSource,
    Subscription,
    TickCallback,
    StallCallback,
)

logger = logging.getLogger(__name__)


class SignalSource(ABC):
    """Shared subscriber bookkeeping and run loop for host sources."""

    def __init__(self):
        self._subscribers: List[Subscription] = []
        self._task: Optional[asyncio.Task] = None
        self._running = False

    def subscribe(self, callback: Callable) -> Subscription:
        subscription = Subscription(self._subscribers, callback)
        self._subscribers.append(subscription)
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Start the sampling loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"{self.get_name()} started")

    async def stop(self):
        """Stop the sampling loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"{self.get_name()} stopped")

    def _emit(self, value: float) -> None:
        """Deliver a value to every subscriber with error isolation."""
        for subscription in list(self._subscribers):
            try:
                subscription.callback(value)
            except Exception as e:
                logger.error(f"{self.get_name()} subscriber failed: {e}", exc_info=True)

    @abstractmethod
    async def _run(self):
        """Sampling loop; runs until stop() cancels it."""
        pass

    def get_name(self) -> str:
        return type(self).__name__


class AsyncioFrameClock(SignalSource, ITickSource):
    """Per-frame ticks at the host's refresh cadence, timestamps in ms."""

    def __init__(self, refresh_hz: float = 60.0):
        super().__init__()
        self.refresh_hz = refresh_hz
        self._frame_interval = 1.0 / refresh_hz

    def subscribe(self, callback: TickCallback) -> Subscription:
        return super().subscribe(callback)

    async def _run(self):
        loop = asyncio.get_running_loop()
        while self._running:
            try:
                await asyncio.sleep(self._frame_interval)
                self._emit(loop.time() * 1000.0)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Frame clock error: {e}", exc_info=True)


class EventLoopStallProbe(SignalSource, IStallSource):
    """Reports event-loop stalls (lag beyond the requested sleep) in ms."""

    def __init__(self, probe_interval_seconds: float = 0.05, min_report_ms: float = 50.0):
        super().__init__()
        self.probe_interval_seconds = probe_interval_seconds
        self.min_report_ms = min_report_ms

    def subscribe(self, callback: StallCallback) -> Subscription:
        return super().subscribe(callback)

    async def _run(self):
        loop = asyncio.get_running_loop()
        while self._running:
            try:
                started = loop.time()
                await asyncio.sleep(self.probe_interval_seconds)
                lag_ms = (loop.time() - started - self.probe_interval_seconds) * 1000.0

                if lag_ms >= self.min_report_ms:
                    self._emit(lag_ms)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Stall probe error: {e}", exc_info=True)
