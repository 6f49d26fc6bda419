"""Playback status events and sinks that receive them."""
from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .utility import _logger

NO_ACTUATOR_REASON = "no actuator"


class StatusEvent:
    """Base class for events reported by the player."""

    @property
    def message(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Started(StatusEvent):
    description: str

    @property
    def message(self) -> str:
        return f"Flashing: {self.description}"


@dataclass(frozen=True)
class Stopped(StatusEvent):
    @property
    def message(self) -> str:
        return "Stopped"


@dataclass(frozen=True)
class Completed(StatusEvent):
    @property
    def message(self) -> str:
        return "Done"


@dataclass(frozen=True)
class Failed(StatusEvent):
    reason: str

    @property
    def message(self) -> str:
        if self.reason == NO_ACTUATOR_REASON:
            return "No flashlight available"
        return f"Error: {self.reason}"


TERMINAL_EVENTS = (Stopped, Completed, Failed)


class StatusSink(Protocol):
    def notify(self, event: StatusEvent) -> None:
        """Deliver ``event``; must not block."""


class CallbackStatusSink:
    """Forward every event to a plain callable."""

    def __init__(self, callback: Callable[[StatusEvent], None]) -> None:
        self._callback = callback

    def notify(self, event: StatusEvent) -> None:
        self._callback(event)


class QueueStatusSink:
    """Push events onto a queue without blocking; drops events when full."""

    def __init__(self, q: Optional["queue.Queue[StatusEvent]"] = None) -> None:
        self.queue: "queue.Queue[StatusEvent]" = q if q is not None else queue.Queue()

    def notify(self, event: StatusEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except queue.Full:
            _logger.warning("Status queue full; dropping %s", event)


class LoggingStatusSink:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or _logger

    def notify(self, event: StatusEvent) -> None:
        level = logging.ERROR if isinstance(event, Failed) else logging.INFO
        self._logger.log(level, event.message)
