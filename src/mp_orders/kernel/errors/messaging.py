"""Event bus errors – everything a publisher or subscriber can observe."""

from __future__ import annotations

from typing import Any

from mp_orders.kernel.errors.base import BaseError


class EventBusError(BaseError):
    """Base class for failures surfaced by an event bus."""

    default_code = "event_bus_error"


class QueueFullError(EventBusError):
    """The bounded event queue has no free slot; the event was not accepted."""

    default_code = "queue_full"

    def __init__(self, capacity: int, **kwargs: Any) -> None:
        super().__init__(f"Event queue is full (capacity {capacity})", **kwargs)
        self.capacity = capacity


class BusClosedError(EventBusError):
    """The bus is draining or closed and accepts no more events."""

    default_code = "bus_closed"

    def __init__(self, message: str = "Event bus is closed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class CallerCancelledError(EventBusError):
    """The publisher's own cancellation signal fired before the event was accepted."""

    default_code = "caller_cancelled"

    def __init__(self, message: str = "Publish cancelled by caller", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SubscriptionError(EventBusError):
    """A handler could not be registered.

    Never raised by :class:`~mp_orders.application.events.InMemoryEventBus`;
    part of the ``subscribe`` contract so that a bus may start rejecting
    registrations without an API break.
    """

    default_code = "subscription_error"


class HandlerError(EventBusError):
    """A single handler failed to process a single event."""

    default_code = "handler_error"

    def __init__(
        self,
        message: str,
        *,
        event_type: str | None = None,
        event_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.event_type = event_type
        self.event_id = event_id


class BrokerNotImplementedError(EventBusError):
    """A broker-backed bus was selected but has no working implementation."""

    default_code = "broker_not_implemented"

    def __init__(self, broker: str, **kwargs: Any) -> None:
        super().__init__(
            f"{broker} event bus is not implemented yet - use the in-memory bus",
            **kwargs,
        )
        self.broker = broker


__all__ = [
    "BrokerNotImplementedError",
    "BusClosedError",
    "CallerCancelledError",
    "EventBusError",
    "HandlerError",
    "QueueFullError",
    "SubscriptionError",
]
