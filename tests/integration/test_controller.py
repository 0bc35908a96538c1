"""Integration tests for the performance controller."""

import asyncio
import pytest

from perfguard.control import create_performance_controller
from perfguard.control.controller import PerformanceController
from perfguard.core.config import PerformanceConfig
from perfguard.core.events import (
    PlaybackPaused,
    PlaybackResumed,
    PerformanceStatsReported,
    StallDetected,
)
from perfguard.utils.validation import ValidationError
from tests.fixtures.mock_services import (
    FakeClock,
    FakeStallSource,
    FakeTickSource,
    MockActuator,
    feed_ticks,
)


FAST_RECOVERY = PerformanceConfig(
    recovery_check_interval_ms=10,
    recovery_duration_ms=100,
)


async def wait_for(predicate, timeout=1.0):
    """Yield to the loop until predicate() holds or timeout expires."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


def build(config=None, actuator=None, ticks=None, stalls=None, clock=None, event_bus=None):
    actuator = actuator if actuator is not None else MockActuator()
    ticks = ticks if ticks is not None else FakeTickSource()
    stalls = stalls if stalls is not None else FakeStallSource()
    clock = clock or FakeClock(start=1000.0)
    controller = PerformanceController(
        config or PerformanceConfig(),
        lambda selector: actuator,
        ticks,
        stalls,
        event_bus=event_bus,
        clock=clock,
    )
    return controller, actuator, ticks, stalls, clock


@pytest.mark.asyncio
class TestControllerSetup:

    async def test_missing_actuator_stays_inactive(self):
        ticks = FakeTickSource()
        controller = PerformanceController(PerformanceConfig(), lambda s: None, ticks)

        assert controller.setup() is False
        assert not controller.is_active
        assert ticks.subscriber_count == 0

    async def test_locator_receives_selector(self):
        seen = []

        def locator(selector):
            seen.append(selector)
            return MockActuator()

        config = PerformanceConfig(actuator_selector="mpv")
        controller = PerformanceController(config, locator, FakeTickSource())
        controller.setup()

        assert seen == ["mpv"]
        controller.shutdown()

    async def test_waits_for_actuator_ready(self):
        actuator = MockActuator(ready=False)
        controller, _, ticks, stalls, _ = build(actuator=actuator)

        assert controller.setup() is True
        assert not controller.is_active
        assert ticks.subscriber_count == 0

        actuator.mark_ready()
        assert controller.is_active
        assert ticks.subscriber_count == 1
        assert stalls.subscriber_count == 1
        controller.shutdown()

    async def test_unsupported_tick_source_disables_monitoring(self):
        controller, actuator, ticks, _, clock = build(ticks=FakeTickSource(supported=False))

        controller.setup()
        assert not controller.is_active

        feed_ticks(ticks, clock, 40, 100)
        assert actuator.commands == []

    async def test_unsupported_stall_source_monitors_fps_only(self):
        stalls = FakeStallSource(supported=False)
        controller, actuator, ticks, _, clock = build(stalls=stalls)

        controller.setup()
        assert controller.is_active
        assert stalls.subscriber_count == 0

        feed_ticks(ticks, clock, 31, 50)
        assert controller.is_paused
        assert actuator.pause_count == 1
        controller.shutdown()

    async def test_invalid_config_rejected(self):
        with pytest.raises(ValidationError):
            PerformanceController(
                PerformanceConfig(min_fps=-1),
                lambda s: MockActuator(),
                FakeTickSource(),
            )


@pytest.mark.asyncio
class TestControlLoop:

    async def test_pause_then_resume_after_dwell(self):
        controller, actuator, ticks, _, clock = build(config=FAST_RECOVERY)
        controller.setup()

        feed_ticks(ticks, clock, 31, 50)
        assert controller.is_paused
        assert controller.engine.scheduler.is_running()

        # Recovery window fills with good frames
        feed_ticks(ticks, clock, 61, 16)
        assert await wait_for(lambda: controller.engine.performance_good_since is not None)
        assert controller.is_paused

        clock.advance(100)
        assert await wait_for(lambda: not controller.is_paused)
        assert actuator.commands == ["pause", "resume"]
        assert not controller.engine.scheduler.is_running()
        controller.shutdown()

    async def test_stalls_are_stamped_with_controller_clock(self):
        controller, actuator, _, stalls, clock = build()
        controller.setup()

        stalls.stall(150)
        clock.advance(40)
        stalls.stall(150)
        clock.advance(40)
        assert not controller.is_paused

        stalls.stall(150)
        assert controller.is_paused
        assert controller.engine.stalls.last_stall_time == clock.now
        assert actuator.pause_count == 1
        controller.shutdown()

    async def test_shutdown_while_paused(self):
        controller, actuator, ticks, stalls, clock = build(config=FAST_RECOVERY)
        controller.setup()

        feed_ticks(ticks, clock, 31, 50)
        assert controller.is_paused

        controller.shutdown()
        assert not controller.engine.scheduler.is_running()
        assert ticks.subscriber_count == 0
        assert stalls.subscriber_count == 0

        feed_ticks(ticks, clock, 100, 16)
        stalls.stall(500)
        clock.advance(10000)
        await asyncio.sleep(0.05)

        assert actuator.commands == ["pause"]

    async def test_shutdown_is_idempotent(self):
        controller, _, ticks, _, _ = build()
        controller.setup()

        controller.shutdown()
        controller.shutdown()

        assert not controller.is_active
        assert ticks.subscriber_count == 0

    async def test_activation_after_shutdown_is_ignored(self):
        actuator = MockActuator(ready=False)
        controller, _, ticks, _, _ = build(actuator=actuator)
        controller.setup()

        controller.shutdown()
        actuator.mark_ready()

        assert not controller.is_active
        assert ticks.subscriber_count == 0

    async def test_get_stats_is_read_only(self):
        controller, _, ticks, _, clock = build()
        controller.setup()
        feed_ticks(ticks, clock, 40, 16)
        before = controller.get_state()

        clock.advance(30000)
        stats = controller.get_stats()

        assert stats.paused is False
        assert controller.get_state() == before
        controller.shutdown()


@pytest.mark.asyncio
class TestControllerEvents:

    async def test_events_reach_subscribers(self, event_bus):
        received = []
        for event_type in (PlaybackPaused, PlaybackResumed, StallDetected):
            event_bus.subscribe(event_type, received.append)

        controller, _, ticks, stalls, clock = build(config=FAST_RECOVERY, event_bus=event_bus)
        controller.setup()

        stalls.stall(150)
        clock.advance(5000)
        feed_ticks(ticks, clock, 31, 50)
        feed_ticks(ticks, clock, 61, 16)
        assert await wait_for(lambda: controller.engine.performance_good_since is not None)
        clock.advance(6000)
        assert await wait_for(lambda: any(isinstance(e, PlaybackResumed) for e in received))
        controller.shutdown()

        kinds = [type(e) for e in received]
        assert kinds == [StallDetected, PlaybackPaused, PlaybackResumed]
        assert received[1].reason == "low-fps"

    async def test_debug_stats_reporting(self, event_bus):
        reports = []
        event_bus.subscribe(PerformanceStatsReported, reports.append)

        config = PerformanceConfig(debug=True, stats_interval_ms=10)
        controller, _, ticks, _, clock = build(config=config, event_bus=event_bus)
        controller.setup()
        feed_ticks(ticks, clock, 5, 16)

        assert await wait_for(lambda: len(reports) >= 2)
        controller.shutdown()

        assert "average_fps" in reports[0].stats

    async def test_no_stats_reporting_without_debug(self, event_bus):
        reports = []
        event_bus.subscribe(PerformanceStatsReported, reports.append)

        config = PerformanceConfig(stats_interval_ms=10)
        controller, _, _, _, _ = build(config=config, event_bus=event_bus)
        controller.setup()
        await asyncio.sleep(0.05)
        controller.shutdown()

        assert reports == []


@pytest.mark.asyncio
class TestFactory:

    async def test_create_from_flat_options(self):
        actuator = MockActuator()
        ticks = FakeTickSource()
        clock = FakeClock()

        controller = create_performance_controller(
            {"minFPS": 40, "longTaskTolerance": 2, "videoSelector": "mpv"},
            locator=lambda s: actuator,
            tick_source=ticks,
            stall_source=FakeStallSource(),
            clock=clock,
        )

        assert controller.config.min_fps == 40
        assert controller.config.long_task_tolerance == 2
        assert controller.setup() is True
        assert controller.is_active
        controller.shutdown()

    async def test_factory_rejects_invalid_options(self):
        with pytest.raises(ValidationError):
            create_performance_controller(
                {"recoveryDuration": -1},
                locator=lambda s: None,
                tick_source=FakeTickSource(),
            )
