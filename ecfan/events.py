#!/usr/bin/env python3
"""
Process-local event bus.

The register writer announces every completed write here so that logging
and callers interested in the exact write order do not have to wrap it.
"""

from typing import Any, Callable, Dict, List

# Payload: the RegisterWrite that just completed
REGISTER_WRITTEN = "register_written"


class EventBus:
    """
    Publish/subscribe hub keyed by event name.

    Callbacks run synchronously in subscription order; an exception raised
    by a callback propagates to the publisher.
    """
    _instance = None

    def __new__(cls):
        """Singleton pattern to ensure only one event bus exists."""
        if cls._instance is None:
            cls._instance = super(EventBus, cls).__new__(cls)
            cls._instance._subscribers = {}
        return cls._instance

    def __init__(self):
        if not hasattr(self, '_subscribers'):
            self._subscribers: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event_name: str, callback: Callable[[Any], None]) -> None:
        """
        Subscribe to an event.

        Args:
            event_name: Name of the event to subscribe to
            callback: Function called with the event payload
        """
        self._subscribers.setdefault(event_name, []).append(callback)

    def unsubscribe(self, event_name: str, callback: Callable[[Any], None]) -> None:
        """Remove a callback; unknown callbacks are ignored."""
        callbacks = self._subscribers.get(event_name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, event_name: str, payload: Any = None) -> None:
        """Deliver payload to every subscriber of event_name."""
        for callback in list(self._subscribers.get(event_name, [])):
            callback(payload)


# Global event bus instance
event_bus = EventBus()
