"""
Observer list for decision and lifecycle notifications.

Emission is fire-and-forget: callbacks run in subscription order, their
return values are ignored, and a failing callback is logged without
affecting the emitter or the remaining callbacks.
"""
from collections import defaultdict
from typing import Any, Callable

from helpdesk.agent.logging import DiagnosticLogger

Listener = Callable[[Any], None]


class EventEmitter:
    """Per-event lists of callbacks."""

    def __init__(self, logger: DiagnosticLogger):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._logger = logger

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe a callback to an event."""
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Remove a previously subscribed callback, if present."""
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, payload: Any = None) -> None:
        """Notify every subscriber of an event."""
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(payload)
            except Exception as e:
                self._logger.log("error", f"Listener for '{event}' failed", {"error": str(e)})
