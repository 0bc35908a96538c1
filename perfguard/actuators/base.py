"""Base actuator implementation."""

import logging
from typing import Callable, List

from perfguard.core.interfaces import IActuator

logger = logging.getLogger(__name__)


class BaseActuator(IActuator):
    """Readiness bookkeeping shared by concrete actuators."""

    def __init__(self, ready: bool = False):
        self._ready = ready
        self._ready_callbacks: List[Callable[[], None]] = []

    def is_ready(self) -> bool:
        return self._ready

    def on_ready(self, callback: Callable[[], None]) -> None:
        if self._ready:
            callback()
        else:
            self._ready_callbacks.append(callback)

    def mark_ready(self) -> None:
        """Flag the actuator ready and fire pending one-shot callbacks."""
        if self._ready:
            return
        self._ready = True

        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Ready callback failed for {self.describe()}: {e}", exc_info=True)
