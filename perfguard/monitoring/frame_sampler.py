"""Frame-rate sampling over a trailing time window."""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FpsSample:
    """Instantaneous FPS derived from one tick delta."""
    value: float
    timestamp: float


class FrameRateSampler:
    """Turns successive tick timestamps (ms) into FPS samples.

    The history only ever holds samples newer than ``window_ms`` relative to
    the latest recorded tick, in timestamp order.
    """

    def __init__(self, window_ms: float):
        self.window_ms = window_ms
        self._history: deque = deque()
        self._last_tick: Optional[float] = None
        self._current_fps = 0.0

    def record(self, timestamp: float) -> Optional[FpsSample]:
        """Record a tick. Returns the new sample, or None if none was produced.

        The first tick only establishes the baseline. Zero or negative deltas
        would give a non-finite FPS and are discarded.
        """
        if self._last_tick is None:
            self._last_tick = timestamp
            return None

        delta = timestamp - self._last_tick
        if delta <= 0:
            logger.debug(f"Discarding tick with non-positive delta ({delta:.3f}ms)")
            return None

        fps = 1000.0 / delta
        if not math.isfinite(fps):
            logger.debug(f"Discarding non-finite FPS sample (delta={delta!r}ms)")
            return None

        self._last_tick = timestamp
        self._current_fps = fps

        sample = FpsSample(value=fps, timestamp=timestamp)
        self._history.append(sample)
        self._evict(timestamp)
        return sample

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_ms
        while self._history and self._history[0].timestamp <= cutoff:
            self._history.popleft()

    @property
    def current_fps(self) -> float:
        return self._current_fps

    @property
    def sample_count(self) -> int:
        return len(self._history)

    @property
    def history(self) -> Tuple[FpsSample, ...]:
        return tuple(self._history)

    def average(self) -> float:
        """Mean FPS over the whole window (0.0 when empty)."""
        if not self._history:
            return 0.0
        return sum(s.value for s in self._history) / len(self._history)

    def recent_average(self, count: int) -> float:
        """Mean FPS over the most recent ``count`` samples (all if fewer)."""
        if not self._history:
            return 0.0
        recent = list(self._history)[-count:]
        return sum(s.value for s in recent) / len(recent)

    def reset(self) -> None:
        """Forget the history and the baseline tick."""
        self._history.clear()
        self._last_tick = None
        self._current_fps = 0.0
