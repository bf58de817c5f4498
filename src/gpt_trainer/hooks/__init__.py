"""Observer hooks for client events.

Event names:
    api_error: (operation, message, context) after a live call fails
    analysis_complete: (content_type, result) after a successful analysis
    analysis_failed: (content_type, message) when an analysis is abandoned
"""

from __future__ import annotations

import threading
from typing import Any, Callable

API_ERROR = "api_error"
ANALYSIS_COMPLETE = "analysis_complete"
ANALYSIS_FAILED = "analysis_failed"


class EventHooks:
    """Registry of callbacks keyed by event name.

    Listeners run synchronously in registration order; their exceptions
    propagate to whoever emitted the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[..., Any]]] = {}
        self._lock = threading.Lock()

    def add_listener(self, event: str, callback: Callable[..., Any]) -> None:
        with self._lock:
            self._listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable[..., Any]) -> bool:
        with self._lock:
            callbacks = self._listeners.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)
                return True
            return False

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        with self._lock:
            return list(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> int:
        """Call every listener for event. Returns the number called."""
        callbacks = self.listeners(event)
        for callback in callbacks:
            callback(*args)
        return len(callbacks)


__all__ = [
    "API_ERROR",
    "ANALYSIS_COMPLETE",
    "ANALYSIS_FAILED",
    "EventHooks",
]
