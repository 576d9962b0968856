"""In-process observer bus used to notify collaborators of state changes."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

EventCallback = Callable[[str, dict[str, Any]], None]

ALL_EVENTS = "*"

CACHES_RECONCILED = "caches_reconciled"
PLAYER_MOVED = "player_moved"
DRAMATIC_MOVEMENT = "dramatic_movement"
INVENTORY_CHANGED = "inventory_changed"
CACHE_CHANGED = "cache_changed"
SESSION_RESET = "session_reset"


class EventBus:
    """Synchronous publish/subscribe hub.

    Subscribers run in registration order inside ``emit``; an exception raised
    by a subscriber propagates to the emitter.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._subscribers: dict[str, list[EventCallback]] = defaultdict(list)
        self._logger = logger or logging.getLogger("geocoin.events")

    def subscribe(self, event_name: str, callback: EventCallback) -> None:
        """Register ``callback`` for ``event_name``, or for everything with ``ALL_EVENTS``."""
        self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: EventCallback) -> None:
        callbacks = self._subscribers.get(event_name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        self._logger.debug("event_emitted", extra={"event_name": event_name, "payload": payload})
        callbacks = [*self._subscribers.get(event_name, []), *self._subscribers.get(ALL_EVENTS, [])]
        for callback in callbacks:
            callback(event_name, payload)


class RecordingEventSink:
    """Event sink that keeps every emitted event, newest last."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        self.events.append((event_name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]
