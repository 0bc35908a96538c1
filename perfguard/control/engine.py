"""Pause/resume decision state machine with recovery hysteresis."""

import logging
import math
import time
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from perfguard.core.config import PerformanceConfig
from perfguard.core.events import (
    EventBus,
    Event,
    PlaybackPaused,
    PlaybackResumed,
    ResumeFailed,
    StallDetected,
)
from perfguard.core.interfaces import IActuator, CommandResult
from perfguard.monitoring.frame_sampler import FpsSample, FrameRateSampler
from perfguard.monitoring.stall_accumulator import StallAccumulator
from perfguard.control.recovery import RecoveryScheduler

logger = logging.getLogger(__name__)

# Samples needed before the window average is trusted (~0.5s at 60fps)
MIN_FPS_SAMPLES = 30

# Samples averaged by the recovery check (~1s at 60fps)
RECOVERY_SAMPLE_COUNT = 60


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class EngineState(Enum):
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class ControllerState:
    """Read-only copy of everything the engine tracks."""
    paused: bool
    fps_history: Tuple[FpsSample, ...]
    long_task_count: int
    last_long_task_time: Optional[float]
    performance_good_since: Optional[float]
    monitoring_active: bool


@dataclass(frozen=True)
class PerformanceStats:
    """Diagnostics snapshot for external inspection."""
    paused: bool
    current_fps: float
    average_fps: float
    long_task_count: int
    time_since_last_stall: Optional[float]
    performance_good_since: Optional[float]

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["current_fps"] = round(self.current_fps, 2)
        data["average_fps"] = round(self.average_fps, 2)
        return data


class DecisionEngine:
    """Decides when to pause the workload and when it is safe to resume.

    RUNNING -> PAUSED as soon as the trusted window average drops below
    ``min_fps`` or the stall count reaches ``long_task_tolerance``.

    PAUSED -> RUNNING only after the recovery check has seen good FPS and no
    recent stalls continuously for ``recovery_duration_ms``. Any bad check
    resets the dwell clock.

    All methods are synchronous and take the current time in ms explicitly.
    Nothing happens while monitoring is inactive.
    """

    def __init__(
        self,
        config: PerformanceConfig,
        actuator: Optional[IActuator] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = monotonic_ms,
        scheduler: Optional[RecoveryScheduler] = None,
    ):
        self.config = config
        self.actuator = actuator
        self.event_bus = event_bus
        self._clock = clock

        self.frames = FrameRateSampler(config.fps_window_ms)
        self.stalls = StallAccumulator(config.long_task_threshold_ms)
        self.scheduler = scheduler or RecoveryScheduler(
            config.recovery_check_interval_ms,
            self._on_recovery_tick,
        )

        self._paused = False
        self._paused_at: Optional[float] = None
        self._performance_good_since: Optional[float] = None
        self._monitoring_active = False

    # ------------------------------------------------------------------
    # Lifecycle

    def bind_actuator(self, actuator: IActuator) -> None:
        self.actuator = actuator

    def activate(self) -> bool:
        if self._monitoring_active:
            logger.warning("Monitoring already active")
            return False
        self._monitoring_active = True
        return True

    def deactivate(self) -> None:
        self._monitoring_active = False
        self.scheduler.stop()

    @property
    def monitoring_active(self) -> bool:
        return self._monitoring_active

    @property
    def state(self) -> EngineState:
        return EngineState.PAUSED if self._paused else EngineState.RUNNING

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def performance_good_since(self) -> Optional[float]:
        return self._performance_good_since

    # ------------------------------------------------------------------
    # Signal inputs

    def on_tick(self, timestamp: float) -> None:
        """Feed one frame tick."""
        if not self._monitoring_active:
            return

        sample = self.frames.record(timestamp)
        self.stalls.expire(timestamp)

        if sample is not None:
            self._evaluate(timestamp)

    def on_stall(self, duration_ms: float, now: float) -> None:
        """Feed one long-task notification."""
        if not self._monitoring_active:
            return

        self.stalls.expire(now)
        if not self.stalls.record(duration_ms, now):
            return

        self._publish(StallDetected(
            duration_ms=duration_ms,
            long_task_count=self.stalls.count,
        ))
        self._evaluate(now)

    def _evaluate(self, now: float) -> None:
        if self._paused:
            return

        if self.frames.sample_count >= MIN_FPS_SAMPLES:
            avg_fps = self.frames.average()
            if avg_fps < self.config.min_fps:
                logger.warning(
                    f"Low FPS detected: {avg_fps:.2f} (threshold: {self.config.min_fps})"
                )
                self.pause("low-fps", now)
                return

        if self.stalls.count >= self.config.long_task_tolerance:
            self.pause("long-tasks", now)

    # ------------------------------------------------------------------
    # Recovery

    def _on_recovery_tick(self) -> None:
        self.check_recovery(self._clock())

    def check_recovery(self, now: float) -> None:
        """One recovery evaluation; called by the scheduler while paused."""
        if not self._monitoring_active:
            return

        if not self._paused:
            self.scheduler.stop()
            return

        self.stalls.expire(now)

        avg_recent_fps = self.frames.recent_average(RECOVERY_SAMPLE_COUNT)
        long_tasks_recovered = self.stalls.recovered(now)

        if avg_recent_fps >= self.config.min_fps and long_tasks_recovered:
            if self._performance_good_since is None:
                self._performance_good_since = now
                logger.info(
                    f"Performance recovered. Monitoring for "
                    f"{self.config.recovery_duration_ms:.0f}ms before resume..."
                )
            else:
                stable_for = now - self._performance_good_since
                if stable_for >= self.config.recovery_duration_ms:
                    self.resume(now)
                else:
                    logger.debug(
                        f"Performance stable for {stable_for:.0f}ms / "
                        f"{self.config.recovery_duration_ms:.0f}ms"
                    )
        elif self._performance_good_since is not None:
            logger.warning(
                f"Performance degraded again (FPS: {avg_recent_fps:.2f}, "
                f"long tasks OK: {long_tasks_recovered})"
            )
            self._performance_good_since = None

    # ------------------------------------------------------------------
    # Commands

    def pause(self, reason: str, now: float) -> bool:
        """Pause the workload. No-op (returns False) if already paused."""
        if not self._monitoring_active or self._paused:
            return False

        logger.warning(f"Pausing workload due to: {reason}")
        self._paused = True
        self._paused_at = now
        self._performance_good_since = None

        result = self._send("pause")
        if not result.ok:
            logger.error(f"Actuator failed to pause: {result.reason}")

        self.scheduler.start()

        self._publish(PlaybackPaused(
            reason=reason,
            average_fps=self.frames.average(),
            long_task_count=self.stalls.count,
            command_ok=result.ok,
        ))
        return True

    def resume(self, now: float) -> bool:
        """Resume the workload. No-op (returns False) if already running.

        A rejected resume leaves the engine PAUSED with the recovery driver
        still running; the next qualifying recovery check tries again.
        """
        if not self._monitoring_active or not self._paused:
            return False

        logger.info("Resuming workload")
        result = self._send("resume")
        if not result.ok:
            logger.warning(f"Could not resume workload: {result.reason}")
            self._publish(ResumeFailed(reason=result.reason))
            return False

        paused_for = now - self._paused_at if self._paused_at is not None else 0.0

        self._paused = False
        self._paused_at = None
        self.stalls.reset_count()
        self._performance_good_since = now
        self.scheduler.stop()

        self._publish(PlaybackResumed(paused_for_ms=paused_for))
        return True

    def _send(self, command: str) -> CommandResult:
        if self.actuator is None:
            return CommandResult.already("no actuator bound")

        try:
            result = getattr(self.actuator, command)()
        except Exception as e:
            logger.error(f"Actuator {command} raised: {e}", exc_info=True)
            return CommandResult.failed(str(e))

        logger.debug(f"Actuator {command}: {result.status.value} {result.reason}".rstrip())
        return result

    def _publish(self, event: Event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish_nowait(event)

    # ------------------------------------------------------------------
    # Diagnostics

    def snapshot(self) -> ControllerState:
        return ControllerState(
            paused=self._paused,
            fps_history=self.frames.history,
            long_task_count=self.stalls.count,
            last_long_task_time=self.stalls.last_stall_time,
            performance_good_since=self._performance_good_since,
            monitoring_active=self._monitoring_active,
        )

    def get_stats(self, now: float) -> PerformanceStats:
        since_stall = self.stalls.time_since_last_stall(now)
        return PerformanceStats(
            paused=self._paused,
            current_fps=self.frames.current_fps,
            average_fps=self.frames.recent_average(RECOVERY_SAMPLE_COUNT),
            long_task_count=self.stalls.count,
            time_since_last_stall=since_stall if math.isfinite(since_stall) else None,
            performance_good_since=self._performance_good_since,
        )
