"""
Game Events - Structured notifications emitted by the engine.

The engine never writes to a display sink directly. It emits GameEvents
through an EventBus; collaborators subscribe and render them wherever
they like (logging, an API log pane, a test recorder).
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import time


class EventType(str, Enum):
    """Kinds of engine events."""
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"
    STALEMATE = "stalemate"
    STATE_REPORT = "state_report"


# Stalemates stand out at WARNING
_EVENT_LEVELS = {
    EventType.ROUND_STARTED: logging.INFO,
    EventType.ROUND_ENDED: logging.INFO,
    EventType.STALEMATE: logging.WARNING,
    EventType.STATE_REPORT: logging.INFO,
}


@dataclass(frozen=True)
class GameEvent:
    """A single engine event."""
    event_type: EventType
    round_number: int
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type.value,
            "round_number": self.round_number,
            "message": self.message,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }


EventListener = Callable[[GameEvent], None]


class EventBus:
    """Fan-out of events to subscribed listeners, in subscription order."""

    def __init__(self):
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: GameEvent):
        for listener in list(self._listeners):
            listener(event)


class LoggingListener:
    """Forwards events to the standard logging system."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logging.getLogger("blitz.events")

    def __call__(self, event: GameEvent):
        level = _EVENT_LEVELS.get(event.event_type, logging.INFO)
        self.log.log(level, "[round %d] %s", event.round_number, event.message)


class EventLog:
    """
    Bounded in-memory record of recent events.

    Keeps the newest `max_entries`; older entries fall off.
    """

    def __init__(self, max_entries: int = 50):
        self._entries: deque[GameEvent] = deque(maxlen=max_entries)

    def __call__(self, event: GameEvent):
        self._entries.append(event)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[GameEvent]:
        return list(self._entries)

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        return [e for e in self._entries if e.event_type == event_type]

    def clear(self):
        self._entries.clear()
