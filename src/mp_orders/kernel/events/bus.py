"""EventBus port – asynchronous, fire-and-forget event fan-out."""

from __future__ import annotations

import abc
import asyncio
import dataclasses

from mp_orders.kernel.events.event import Event, EventType
from mp_orders.kernel.events.registry import Handler


@dataclasses.dataclass
class EventStats:
    """Running totals shared by a bus and the services that feed it.

    Built once at startup and injected; there is no module-level instance.
    Counters are only touched from the event loop thread and every update is
    a single statement with no ``await`` inside, so no task can observe a
    half-applied increment.
    """

    orders_created: int = 0
    status_updates: int = 0
    orders_cancelled: int = 0
    events_published: int = 0
    event_processing_errors: int = 0

    def increment(self, counter: str, by: int = 1) -> None:
        setattr(self, counter, getattr(self, counter) + by)

    def snapshot(self) -> dict[str, int]:
        return dataclasses.asdict(self)


class EventBus(abc.ABC):
    """Port: publish events to every handler subscribed to their type.

    ``publish`` only enqueues; handlers run later and independently.  Every
    rejection is raised as an :class:`~mp_orders.kernel.errors.EventBusError`
    subclass, never swallowed.

    Example::

        bus = InMemoryEventBus()
        bus.subscribe(EventType.ORDER_CREATED, send_confirmation)
        await bus.publish(Event.order_created(order, metadata))
        ...
        await bus.close()
    """

    def __init__(self, stats: EventStats | None = None) -> None:
        self.stats = stats if stats is not None else EventStats()

    @abc.abstractmethod
    async def start(self) -> None:
        """Begin dispatching.  Idempotent."""

    @abc.abstractmethod
    async def publish(self, event: Event, *, cancel: asyncio.Event | None = None) -> None:
        """Enqueue *event* without waiting for room.

        Raises
        ------
        QueueFullError
            No free slot in the bounded queue.
        BusClosedError
            Shutdown has begun or finished.
        CallerCancelledError
            *cancel* was set before the event was accepted.
        """

    @abc.abstractmethod
    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        """Register *handler* for *event_type*; may raise ``SubscriptionError``."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Stop accepting events, dispatch what is buffered and wait for handlers."""

    async def __aenter__(self) -> "EventBus":
        await self.start()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()


__all__ = ["EventBus", "EventStats"]
