"""Event system for decoupled communication between components."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Type
from enum import Enum
import asyncio
import inspect
import logging

logger = logging.getLogger(__name__)


class EventPriority(Enum):
    """Event priority levels."""
    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


@dataclass
class Event:
    """Base event class.

    Note: All fields have defaults to allow subclasses to add required fields.
    """
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    priority: EventPriority = EventPriority.NORMAL
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PlaybackPaused(Event):
    """Controller paused the workload."""
    reason: str = ""  # 'low-fps', 'long-tasks', 'manual'
    average_fps: float = 0.0
    long_task_count: int = 0
    command_ok: bool = True


@dataclass
class PlaybackResumed(Event):
    """Controller resumed the workload after a full dwell period."""
    paused_for_ms: float = 0.0


@dataclass
class ResumeFailed(Event):
    """Actuator rejected a resume command."""
    reason: str = ""


@dataclass
class StallDetected(Event):
    """A stall longer than the threshold was counted."""
    duration_ms: float = 0.0
    long_task_count: int = 0


@dataclass
class PerformanceStatsReported(Event):
    """Periodic diagnostics snapshot."""
    stats: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Central event bus for system-wide communication with backpressure."""

    def __init__(self, max_queue_size: int = 1000):
        self._handlers: Dict[Type[Event], List[Callable]] = {}
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._running = False
        self._task = None
        logger.info(f"Event bus initialized (max_queue_size={max_queue_size})")

    def subscribe(self, event_type: Type[Event], handler: Callable):
        """Register an event handler."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {handler.__name__} to {event_type.__name__}")

    def publish_nowait(self, event: Event) -> bool:
        """Queue an event from synchronous code without blocking.

        Returns False (and drops the event) when the queue is full.
        """
        try:
            self._queue.put_nowait(event)
            return True
        except asyncio.QueueFull:
            logger.error(f"Event queue full, dropping {type(event).__name__}")
            return False

    @property
    def pending(self) -> int:
        """Number of queued, undispatched events."""
        return self._queue.qsize()

    async def start(self):
        """Start processing events."""
        self._running = True
        self._task = asyncio.create_task(self._process_events())
        logger.info("Event bus started")

    async def stop(self):
        """Stop processing events."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Event bus stopped")

    async def _process_events(self):
        """Process events from queue."""
        while self._running:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.1)
                await self._dispatch(event)
            except asyncio.TimeoutError:
                continue
            except Exception as e:
                logger.error(f"Error processing event: {e}", exc_info=True)

    async def _dispatch(self, event: Event):
        """Dispatch event to handlers with error isolation."""
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        if not handlers:
            logger.debug(f"No handlers for {event_type.__name__}")
            return

        logger.debug(f"Dispatching {event_type.__name__} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {handler.__name__} failed for {event_type.__name__}: {e}",
                    exc_info=True
                )
