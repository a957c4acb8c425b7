"""
Typed event bus for runner notifications.

Uses Enums for event types to prevent magic strings. Handlers are called
in registration order and may be plain functions or coroutine functions;
publishing awaits each one before moving to the next.

Usage:
    class RunnerEvent(Enum):
        LINE = auto()

    subscription = event_bus.subscribe(RunnerEvent.LINE, on_line)
    await event_bus.publish(RunnerEvent.LINE, text="Hello")
    subscription.cancel()

Handler exceptions are not caught: they propagate to whoever published
the event.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], "None | Awaitable[None]"]


class _Entry:
    """A single registration. Identity matters, not the handler."""

    __slots__ = ("handler", "one_shot")

    def __init__(self, handler: EventHandler, one_shot: bool):
        self.handler = handler
        self.one_shot = one_shot


class Subscription:
    """
    Handle returned by EventBus.subscribe.

    Calling cancel() (or the handle itself) removes exactly the
    registrations it was created for. Cancelling twice is harmless.
    """

    def __init__(self, bus: EventBus, entries: list[tuple[Enum, _Entry]]):
        self._bus = bus
        self._entries = entries

    @property
    def active(self) -> bool:
        return bool(self._entries)

    def cancel(self) -> None:
        for event_type, entry in self._entries:
            self._bus._remove(event_type, entry)
        self._entries = []

    def __call__(self) -> None:
        self.cancel()


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Registration-order delivery
    - Independently removable subscriptions
    - One-shot handlers
    - Event consumption (stops propagation)
    """

    def __init__(self):
        # Map of event type -> ordered list of registrations
        self._handlers: dict[Enum, list[_Entry]] = {}

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        one_shot: bool = False,
    ) -> Subscription:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event), sync or async
            one_shot: If True, handler is removed after first call

        Returns:
            Subscription handle that removes this registration
        """
        entry = _Entry(handler, one_shot)
        self._handlers.setdefault(event_type, []).append(entry)
        return Subscription(self, [(event_type, entry)])

    def subscribe_many(
        self,
        event_types: Iterable[Enum],
        handler: EventHandler,
    ) -> Subscription:
        """Subscribe one handler to several event types under one handle."""
        entries = []
        for event_type in event_types:
            entry = _Entry(handler, False)
            self._handlers.setdefault(event_type, []).append(entry)
            entries.append((event_type, entry))
        return Subscription(self, entries)

    async def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)

        # Snapshot so handlers may (un)subscribe while we iterate
        for entry in list(self._handlers.get(event.type, ())):
            if entry.one_shot:
                self._remove(event.type, entry)

            result = entry.handler(event)
            if inspect.isawaitable(result):
                await result

            if event.consumed:
                break

        return event

    def _remove(self, event_type: Enum, entry: _Entry) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        for i, candidate in enumerate(handlers):
            if candidate is entry:
                handlers.pop(i)
                return
