"""Counting of long tasks (stalls) within a tolerance window."""

import logging
import math
from typing import Optional

logger = logging.getLogger(__name__)

# No stall for this long means stalls no longer block recovery
STALL_RECOVERY_MS = 5000.0

# No stall for this long clears the counter
STALL_RESET_MS = 10000.0


class StallAccumulator:
    """Tracks qualifying stalls and how long ago the last one happened."""

    def __init__(self, threshold_ms: float):
        self.threshold_ms = threshold_ms
        self.count = 0
        self.last_stall_time: Optional[float] = None

    def record(self, duration_ms: float, now: float) -> bool:
        """Count a stall if it is strictly longer than the threshold."""
        if duration_ms <= self.threshold_ms:
            return False

        self.count += 1
        self.last_stall_time = now
        logger.info(
            f"Long task detected: {duration_ms:.2f}ms "
            f"(threshold: {self.threshold_ms:.0f}ms, count={self.count})"
        )
        return True

    def time_since_last_stall(self, now: float) -> float:
        if self.last_stall_time is None:
            return math.inf
        return now - self.last_stall_time

    def recovered(self, now: float) -> bool:
        return self.time_since_last_stall(now) > STALL_RECOVERY_MS

    def expire(self, now: float) -> bool:
        """Clear the counter after a quiet period. Returns True if it was cleared."""
        if self.count and self.time_since_last_stall(now) > STALL_RESET_MS:
            logger.debug(f"No stalls for {STALL_RESET_MS:.0f}ms, clearing count of {self.count}")
            self.count = 0
            return True
        return False

    def reset_count(self) -> None:
        self.count = 0
