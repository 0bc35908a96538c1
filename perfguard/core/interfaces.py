"""Interface definitions for the controller's external collaborators."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List


TickCallback = Callable[[float], None]
StallCallback = Callable[[float], None]


class CommandStatus(Enum):
    """Outcome of an actuator command."""
    OK = "ok"
    ALREADY = "already"
    FAILED = "failed"


@dataclass(frozen=True)
class CommandResult:
    """Result of a pause/resume command."""
    status: CommandStatus
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not CommandStatus.FAILED

    @classmethod
    def success(cls) -> "CommandResult":
        return cls(CommandStatus.OK)

    @classmethod
    def already(cls, reason: str = "") -> "CommandResult":
        return cls(CommandStatus.ALREADY, reason)

    @classmethod
    def failed(cls, reason: str) -> "CommandResult":
        return cls(CommandStatus.FAILED, reason)


class Subscription:
    """Handle returned by a signal source. Cancelling twice is a no-op."""

    def __init__(self, subscribers: List, callback: Callable):
        self._subscribers = subscribers
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self in self._subscribers:
            self._subscribers.remove(self)


class ITickSource(ABC):
    """Frame-cadence clock. Callbacks receive a timestamp in milliseconds."""

    @abstractmethod
    def subscribe(self, callback: TickCallback) -> Subscription:
        """Register a per-frame callback."""
        pass

    def is_supported(self) -> bool:
        """Whether the host can provide this signal."""
        return True


class IStallSource(ABC):
    """Long-task notifications. Callbacks receive the stall duration in ms."""

    @abstractmethod
    def subscribe(self, callback: StallCallback) -> Subscription:
        """Register a stall callback."""
        pass

    def is_supported(self) -> bool:
        """Whether the host can provide this signal."""
        return True


class IActuator(ABC):
    """The resource being paused and resumed."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Check if the actuator may receive commands."""
        pass

    @abstractmethod
    def on_ready(self, callback: Callable[[], None]) -> None:
        """Run callback once when ready (immediately if already ready)."""
        pass

    @abstractmethod
    def pause(self) -> CommandResult:
        """Pause the workload."""
        pass

    @abstractmethod
    def resume(self) -> CommandResult:
        """Resume the workload."""
        pass

    def describe(self) -> str:
        """Human-readable name for logs."""
        return type(self).__name__
