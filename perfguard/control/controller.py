"""Performance controller: wires signal sources and an actuator to the engine."""

import asyncio
import logging
from typing import Callable, Optional

from perfguard.core.config import PerformanceConfig, validate_performance_config
from perfguard.core.events import EventBus, PerformanceStatsReported
from perfguard.core.interfaces import (
    IActuator,
    ITickSource,
    IStallSource,
    Subscription,
)
from perfguard.control.engine import (
    DecisionEngine,
    ControllerState,
    PerformanceStats,
    monotonic_ms,
)
from perfguard.control.recovery import RecoveryScheduler
from perfguard.utils.validation import ValidationError

logger = logging.getLogger(__name__)

ActuatorLocator = Callable[[object], Optional[IActuator]]


class PerformanceController:
    """Owns one DecisionEngine bound to exactly one actuator.

    Lifecycle:
        controller = PerformanceController(config, locator, ticks, stalls)
        controller.setup()      # find actuator, activate when it is ready
        ...
        controller.shutdown()   # safe to call repeatedly

    Construction binds nothing. If no actuator is found, or the host has no
    tick source, the controller stays inactive and issues no commands.
    """

    def __init__(
        self,
        config: PerformanceConfig,
        locator: ActuatorLocator,
        tick_source: Optional[ITickSource],
        stall_source: Optional[IStallSource] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = monotonic_ms,
        scheduler: Optional[RecoveryScheduler] = None,
    ):
        errors = validate_performance_config(config)
        if errors:
            raise ValidationError("; ".join(errors))

        self.config = config
        self.locator = locator
        self.tick_source = tick_source
        self.stall_source = stall_source
        self.event_bus = event_bus
        self._clock = clock

        self.engine = DecisionEngine(
            config,
            event_bus=event_bus,
            clock=clock,
            scheduler=scheduler,
        )
        self.actuator: Optional[IActuator] = None

        self._tick_subscription: Optional[Subscription] = None
        self._stall_subscription: Optional[Subscription] = None
        self._stats_task: Optional[asyncio.Task] = None
        self._shut_down = False

        logger.info("Performance controller initialized")

    def setup(self) -> bool:
        """Locate the actuator and activate once it is ready.

        Returns False when no actuator matches the selector.
        """
        selector = self.config.actuator_selector
        actuator = self.locator(selector)

        if actuator is None:
            logger.warning(f"No actuator found with selector: {selector!r}")
            return False

        logger.info(f"Actuator found: {actuator.describe()}")
        self.actuator = actuator
        self.engine.bind_actuator(actuator)

        if actuator.is_ready():
            self.activate()
        else:
            logger.info("Waiting for actuator to become ready")
            actuator.on_ready(self.activate)
        return True

    def activate(self) -> bool:
        """Start monitoring. Called once the actuator can take commands."""
        if self._shut_down:
            logger.debug("Controller shut down, ignoring activation")
            return False

        if self.actuator is None:
            logger.warning("Cannot activate without an actuator")
            return False

        if self.tick_source is None or not self.tick_source.is_supported():
            logger.warning("Frame tick source unavailable, performance monitoring disabled")
            return False

        if not self.engine.activate():
            return False

        logger.info("Starting performance monitoring")
        self._tick_subscription = self.tick_source.subscribe(self.engine.on_tick)

        if self.stall_source is not None and self.stall_source.is_supported():
            self._stall_subscription = self.stall_source.subscribe(self._on_stall)
            logger.info("Long task monitoring active")
        else:
            logger.warning("Stall source not supported, monitoring FPS only")

        self._start_stats_reporting()
        logger.info("Performance monitoring active")
        return True

    def _on_stall(self, duration_ms: float) -> None:
        self.engine.on_stall(duration_ms, self._clock())

    def _start_stats_reporting(self) -> None:
        if not self.config.debug or self.config.stats_interval_ms <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, periodic stats disabled")
            return
        self._stats_task = loop.create_task(self._stats_loop())

    async def _stats_loop(self):
        """Periodic stats logging while debug is on."""
        while True:
            try:
                await asyncio.sleep(self.config.stats_interval_ms / 1000.0)
                stats = self.get_stats().as_dict()
                logger.info(f"Performance stats: {stats}")
                if self.event_bus is not None:
                    self.event_bus.publish_nowait(PerformanceStatsReported(stats=stats))
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Stats reporting error: {e}", exc_info=True)

    @property
    def is_active(self) -> bool:
        return self.engine.monitoring_active

    @property
    def is_paused(self) -> bool:
        return self.engine.paused

    def get_stats(self) -> PerformanceStats:
        """Read-only diagnostics snapshot."""
        return self.engine.get_stats(self._clock())

    def get_state(self) -> ControllerState:
        return self.engine.snapshot()

    def shutdown(self) -> None:
        """Stop ticks, stalls, recovery and stats. Idempotent."""
        if not self._shut_down:
            logger.info("Shutting down performance controller")
        self._shut_down = True

        self.engine.deactivate()

        if self._tick_subscription is not None:
            self._tick_subscription.cancel()
            self._tick_subscription = None

        if self._stall_subscription is not None:
            self._stall_subscription.cancel()
            self._stall_subscription = None

        if self._stats_task is not None:
            self._stats_task.cancel()
            self._stats_task = None
