"""HandlerRegistry – per-event-type, additive handler lists."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from mp_orders.kernel.events.event import Event, EventType

#: An event handler: an async callable that fails by raising.
Handler = Callable[[Event], Awaitable[Any]]


class HandlerRegistry:
    """Ordered handler lists keyed by :class:`EventType`.

    Every write swaps in a fresh tuple, so :meth:`handlers_for` hands out an
    immutable snapshot.  Dispatch therefore never holds a lock while it
    iterates, readers never wait on each other, and a registration that
    lands mid-dispatch only affects later events.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, tuple[Handler, ...]] = {}

    def add(self, event_type: EventType, handler: Handler) -> None:
        self._handlers[event_type] = (*self._handlers.get(event_type, ()), handler)

    def handlers_for(self, event_type: EventType) -> tuple[Handler, ...]:
        return self._handlers.get(event_type, ())

    def event_types(self) -> list[EventType]:
        return [t for t, hs in self._handlers.items() if hs]

    def __len__(self) -> int:
        return sum(len(hs) for hs in self._handlers.values())


__all__ = ["Handler", "HandlerRegistry"]
