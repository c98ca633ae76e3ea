"""
Event system for dungeon sessions.

This module provides an event bus that the dungeon session publishes room and
door events on. Lighting, camera and minimap code subscribe handlers to react.
Delivery is synchronous: every handler has seen an event before emit() returns.
"""

import logging
from enum import Enum, auto
from typing import Callable, Any, Dict, List, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class Event(Enum):
    """Event types that can occur in a dungeon session."""

    # Level lifecycle
    LEVEL_START = auto()  # kwargs: dungeon
    LEVEL_END = auto()  # kwargs: dungeon

    # Player movement
    ROOM_CHANGED = auto()  # kwargs: room, previous_room

    # Door state
    DOOR_LOCKED = auto()  # kwargs: door, room
    DOOR_UNLOCKED = auto()  # kwargs: door, room


@dataclass
class EventData:
    """Container for event data passed to handlers."""

    event: Event
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        if self.kwargs:
            kwargs_str = ", ".join(f"{k}={v}" for k, v in self.kwargs.items())
            return f"EventData({self.event.name}, {kwargs_str})"
        return f"EventData({self.event.name})"


# Event handler signature: takes event data, returns nothing
EventHandler = Callable[[EventData], None]


class EventBus:
    """
    Event bus for publishing and subscribing to dungeon events.

    Handlers for an event run in the order they subscribed.
    """

    def __init__(self) -> None:
        """Initialize an empty event bus."""
        self._handlers: Dict[Event, List[EventHandler]] = {}
        self._debug: bool = False

    def set_debug(self, debug: bool) -> None:
        """In debug mode events are logged and handler errors propagate."""
        self._debug = debug

    def subscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Subscribe a handler to an event type.

        Args:
            event: The event type to listen for
            handler: Callable that takes EventData and returns None
        """
        if event not in self._handlers:
            self._handlers[event] = []
        self._handlers[event].append(handler)

    def unsubscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from an event type.

        Raises:
            ValueError: If handler was not subscribed to this event
        """
        if event not in self._handlers:
            raise ValueError(f"No handlers registered for event {event}")
        if handler not in self._handlers[event]:
            raise ValueError(f"Handler not subscribed to event {event}")
        self._handlers[event].remove(handler)

    def emit(self, event: Event, **kwargs: Any) -> None:
        """
        Emit an event, triggering all subscribed handlers.

        Args:
            event: The event type to emit
            **kwargs: Event-specific data passed to handlers
        """
        event_data = EventData(event=event, kwargs=kwargs)

        if self._debug:
            logger.debug("Emitting: %s", event_data)

        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(event_data)
            except Exception:
                # One handler failing shouldn't stop the others
                logger.exception("Handler error for %s", event.name)
                if self._debug:
                    raise

    def clear(self) -> None:
        """Remove all event handlers."""
        self._handlers.clear()

    def handler_count(self, event: Optional[Event] = None) -> int:
        """
        Get the number of handlers registered.

        Args:
            event: If provided, count handlers for this event only.
                   If None, count total handlers across all events.
        """
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())
