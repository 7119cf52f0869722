"""Event bus for retention observability.

A synchronous bus that carries domain events from the retention
coordinator to whoever wants to explain its decisions (CLI formatters,
tests, embedding applications). Emission is fire-and-forget from the
coordinator's point of view.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Allows both EventBus and NullEventBus to satisfy the interface
    without inheritance.
    """

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Subscribe a handler to an event type."""
        ...

    def emit(self, event: T) -> None:
        """Emit an event to all subscribers."""
        ...


class EventBus:
    """Simple synchronous event bus.

    Events are dispatched synchronously to all subscribers of the event's
    exact type. Handler exceptions propagate to the caller.

    Example:
        bus = EventBus()
        bus.subscribe(ReleaseKept, lambda e: print(f"keep {e.release_id}"))
        coordinator = RetentionCoordinator(3, event_bus=bus)
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Subscribe a handler to an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that receives the event instance
        """
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def emit(self, event: T) -> None:
        """Emit an event to all subscribers.

        Handlers are called in subscription order. Events with no
        subscribers are silently ignored.
        """
        handlers = self._subscribers.get(type(event), [])
        for handler in handlers:
            handler(event)


class NullEventBus:
    """No-op event bus for library use where nobody listens.

    Does NOT inherit from EventBus: subscribing to it is a no-op, and an
    inheritance relationship would hide a caller that expects callbacks.
    """

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """No-op subscription - handler will never be called."""
        pass

    def emit(self, event: T) -> None:
        """No-op emission - no handlers to call."""
        pass
