"""Publish/subscribe channel for wallet lifecycle notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EVENT_CONNECTED = "connected"
EVENT_DISCONNECTED = "disconnected"
EVENT_SESSION_UPDATED = "session_updated"

Listener = Callable[..., Any]


class EventChannel:
    """Synchronous fan-out of named events to registered listeners."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def publish(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %s event failed", event)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))
