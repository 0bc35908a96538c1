import logging
from pathlib import Path
import json

from perfguard.core.events import (
    EventBus,
    PlaybackPaused,
    PlaybackResumed,
    ResumeFailed,
    StallDetected,
    PerformanceStatsReported,
)

logger = logging.getLogger(__name__)


class SystemEventLogger:
    def __init__(self, log_dir: str = "data/logs"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.metrics_file = self.log_dir / "metrics.jsonl"

    async def on_playback_paused(self, event: PlaybackPaused):
        logger.warning(
            f"Workload paused: {event.reason} "
            f"(avg FPS {event.average_fps:.2f}, {event.long_task_count} long tasks)"
        )

        await self._write_metric({
            "event": "playback_paused",
            "timestamp": event.timestamp.isoformat(),
            "reason": event.reason,
            "average_fps": event.average_fps,
            "long_task_count": event.long_task_count,
            "command_ok": event.command_ok,
        })

    async def on_playback_resumed(self, event: PlaybackResumed):
        logger.info(f"Workload resumed after {event.paused_for_ms:.0f}ms paused")

        await self._write_metric({
            "event": "playback_resumed",
            "timestamp": event.timestamp.isoformat(),
            "paused_for_ms": event.paused_for_ms,
        })

    async def on_resume_failed(self, event: ResumeFailed):
        logger.warning(f"Resume rejected by actuator: {event.reason}")

        await self._write_metric({
            "event": "resume_failed",
            "timestamp": event.timestamp.isoformat(),
            "reason": event.reason,
        })

    async def on_stall_detected(self, event: StallDetected):
        logger.debug(
            f"Stall: {event.duration_ms:.1f}ms "
            f"(count={event.long_task_count})"
        )

    async def on_stats_reported(self, event: PerformanceStatsReported):
        logger.info(f"Performance stats: {event.stats}")

        await self._write_metric({
            "event": "performance_stats",
            "timestamp": event.timestamp.isoformat(),
            **event.stats,
        })

    async def _write_metric(self, data: dict):
        try:
            with open(self.metrics_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(data) + '\n')
        except Exception as e:
            logger.error(f"Failed to write metric: {e}")


def register_event_listeners(event_bus: EventBus, log_dir: str = "data/logs"):
    event_logger = SystemEventLogger(log_dir)

    event_bus.subscribe(PlaybackPaused, event_logger.on_playback_paused)
    event_bus.subscribe(PlaybackResumed, event_logger.on_playback_resumed)
    event_bus.subscribe(ResumeFailed, event_logger.on_resume_failed)
    event_bus.subscribe(StallDetected, event_logger.on_stall_detected)
    event_bus.subscribe(PerformanceStatsReported, event_logger.on_stats_reported)

    logger.info("Event listeners registered")
    return event_logger
