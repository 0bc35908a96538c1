"""Periodic recovery re-evaluation while the workload is paused."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RecoveryScheduler:
    """Runs a callback every ``interval_ms`` until stopped.

    At most one driver task exists at a time. ``start`` while running and
    ``stop`` while stopped are no-ops. Both are synchronous so the decision
    engine can call them mid-transition; ``start`` needs a running loop.
    """

    def __init__(self, interval_ms: float, callback: Callable[[], None]):
        self.interval_ms = interval_ms
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self.is_running():
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._recovery_loop())
        logger.info(f"Recovery monitoring started (every {self.interval_ms:.0f}ms)")

    def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        logger.info("Recovery monitoring stopped")

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _recovery_loop(self):
        """Continuous recovery loop."""
        while True:
            try:
                await asyncio.sleep(self.interval_ms / 1000.0)
                self._callback()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Recovery check error: {e}", exc_info=True)
