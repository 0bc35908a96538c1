"""Unit tests for event logging and metrics output."""

import asyncio
import json
import pytest

from perfguard.core.events import (
    EventBus,
    PlaybackPaused,
    PlaybackResumed,
    ResumeFailed,
    StallDetected,
    PerformanceStatsReported,
)
from perfguard.core.events_listener import register_event_listeners


def read_metrics(path):
    if not path.exists():
        return []
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


async def wait_for_metrics(path, count, timeout=1.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while len(read_metrics(path)) < count:
        if asyncio.get_running_loop().time() > deadline:
            break
        await asyncio.sleep(0.01)
    return read_metrics(path)


@pytest.mark.asyncio
class TestSystemEventLogger:

    async def test_transitions_written_as_json_lines(self, temp_data_dir):
        bus = EventBus()
        event_logger = register_event_listeners(bus, str(temp_data_dir))
        await bus.start()

        bus.publish_nowait(PlaybackPaused(
            reason="low-fps", average_fps=12.5, long_task_count=1, command_ok=True,
        ))
        bus.publish_nowait(ResumeFailed(reason="NotAllowedError"))
        bus.publish_nowait(PlaybackResumed(paused_for_ms=8000))

        records = await wait_for_metrics(event_logger.metrics_file, 3)
        await bus.stop()

        assert [r["event"] for r in records] == [
            "playback_paused", "resume_failed", "playback_resumed",
        ]
        assert records[0]["reason"] == "low-fps"
        assert records[0]["average_fps"] == 12.5
        assert records[0]["long_task_count"] == 1
        assert records[0]["command_ok"] is True
        assert records[1]["reason"] == "NotAllowedError"
        assert records[2]["paused_for_ms"] == 8000
        assert all("timestamp" in r for r in records)

    async def test_stats_are_flattened(self, temp_data_dir):
        bus = EventBus()
        event_logger = register_event_listeners(bus, str(temp_data_dir))
        await bus.start()

        bus.publish_nowait(PerformanceStatsReported(stats={
            "paused": False,
            "average_fps": 58.9,
            "long_task_count": 0,
        }))

        records = await wait_for_metrics(event_logger.metrics_file, 1)
        await bus.stop()

        assert len(records) == 1
        assert records[0]["event"] == "performance_stats"
        assert records[0]["average_fps"] == 58.9
        assert records[0]["paused"] is False

    async def test_stalls_are_not_written(self, temp_data_dir):
        bus = EventBus()
        event_logger = register_event_listeners(bus, str(temp_data_dir))
        await bus.start()

        bus.publish_nowait(StallDetected(duration_ms=140, long_task_count=1))
        bus.publish_nowait(ResumeFailed(reason="blocked"))

        records = await wait_for_metrics(event_logger.metrics_file, 1)
        await asyncio.sleep(0.05)
        await bus.stop()

        assert [r["event"] for r in read_metrics(event_logger.metrics_file)] == ["resume_failed"]
        assert records

    async def test_creates_log_dir(self, temp_data_dir):
        log_dir = temp_data_dir / "nested" / "logs"

        event_logger = register_event_listeners(EventBus(), str(log_dir))

        assert log_dir.is_dir()
        assert event_logger.metrics_file == log_dir / "metrics.jsonl"


@pytest.mark.asyncio
class TestEventBusBackpressure:

    async def test_full_queue_drops_event(self):
        bus = EventBus(max_queue_size=1)

        assert bus.publish_nowait(ResumeFailed(reason="first")) is True
        assert bus.publish_nowait(ResumeFailed(reason="second")) is False
        assert bus.pending == 1
