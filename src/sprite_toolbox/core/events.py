"""EventBus — decoupled Observer for progress and completion events."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)

# Type alias for event handler callbacks.
EventHandler = Any  # Callable[..., None] — relaxed for mypy compatibility


class EventBus:
    """Simple publish/subscribe event bus for decoupled communication.

    Sprites emit ``progress`` while decoding and ``completed`` after an
    export.  The CLI subscribes to echo them.  Handlers may be registered
    from any thread; they run on the emitting thread.
    """

    def __init__(self) -> None:
        """Initialise an empty event bus."""
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: EventHandler) -> None:
        """Register a handler for a given event type.

        Args:
            event: The event name to subscribe to (e.g. ``"progress"``).
            handler: A callable that will be invoked when the event fires.
        """
        with self._lock:
            self._handlers[event].append(handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler.

        Args:
            event: The event name.
            handler: The handler to remove.
        """
        with self._lock:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                logger.warning("Handler %r was not subscribed to event %r", handler, event)

    def emit(self, event: str, **kwargs: Any) -> None:
        """Fire an event, calling all subscribed handlers.

        A failing handler is logged and does not stop the others.

        Args:
            event: The event name to fire.
            **kwargs: Arbitrary data passed to each handler.
        """
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            try:
                handler(**kwargs)
            except Exception:
                logger.exception("Error in handler %r for event %r", handler, event)
