"""InMemoryEventBus – bounded queue, single dispatch worker, per-handler tasks."""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging

from mp_orders.kernel.errors import BusClosedError, CallerCancelledError, QueueFullError
from mp_orders.kernel.events import (
    Event,
    EventBus,
    EventStats,
    EventType,
    Handler,
    HandlerRegistry,
)

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class BusState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    CLOSED = "closed"


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__name__", type(handler).__name__)


class InMemoryEventBus(EventBus):
    """Asyncio event bus with back-pressure by rejection.

    ``publish`` puts the event on a bounded :class:`asyncio.Queue` with
    ``put_nowait`` and returns; a full queue is reported as
    :class:`QueueFullError` rather than waited out.  One worker task pulls
    events in FIFO order and starts one task per subscribed handler, so a
    slow or failing handler never holds up its siblings, the worker, or the
    publisher.  Handler tasks are tracked so :meth:`close` can wait for them.

    Lifecycle: ``IDLE -> RUNNING -> DRAINING -> CLOSED``.  The worker starts
    on :meth:`start`, on ``async with``, or on the first publish.

    Parameters
    ----------
    capacity:
        Maximum number of accepted but not yet dispatched events.
    stats:
        Shared counters; ``events_published`` and ``event_processing_errors``
        are maintained here.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        stats: EventStats | None = None,
        registry: HandlerRegistry | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        super().__init__(stats)
        self._capacity = capacity
        self._registry = registry or HandlerRegistry()
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=capacity)
        self._shutdown = asyncio.Event()
        self._worker: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._state = BusState.IDLE

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> BusState:
        return self._state

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def pending(self) -> int:
        """Events accepted but not yet taken by the worker."""
        return self._queue.qsize()

    @property
    def in_flight(self) -> int:
        """Handler invocations started but not finished."""
        return len(self._in_flight)

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # EventBus interface
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self._state is not BusState.IDLE:
            return
        self._state = BusState.RUNNING
        self._worker = asyncio.create_task(self._process_events(), name="event-bus-dispatch")
        logger.debug("event_bus.started capacity=%d", self._capacity)

    async def publish(self, event: Event, *, cancel: asyncio.Event | None = None) -> None:
        if self._state in (BusState.DRAINING, BusState.CLOSED):
            raise BusClosedError()
        if cancel is not None and cancel.is_set():
            raise CallerCancelledError()
        if self._state is BusState.IDLE:
            await self.start()

        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            raise QueueFullError(self._capacity) from None

        self.stats.increment("events_published")
        logger.info(
            "event.published type=%s id=%s aggregate_id=%s",
            event.type.value, event.id, event.aggregate_id,
        )

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        self._registry.add(event_type, handler)
        logger.info(
            "event.subscribed type=%s handler=%s",
            event_type.value, _handler_name(handler),
        )

    async def close(self) -> None:
        if self._state is BusState.CLOSED:
            return
        if self._state is not BusState.DRAINING:
            self._state = BusState.DRAINING
            self._shutdown.set()
            if self._worker is None:
                self._drain()

        # a cancelled close leaves the worker and handlers running; the next
        # close (or a concurrent one) picks up the join where it stopped
        await self._join()
        if self._state is not BusState.CLOSED:
            self._state = BusState.CLOSED
            logger.info("event_bus.closed published=%d", self.stats.events_published)

    async def _join(self) -> None:
        if self._worker is not None:
            await asyncio.wait({self._worker})
        while self._in_flight:
            await asyncio.wait(set(self._in_flight))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _process_events(self) -> None:
        stop = asyncio.ensure_future(self._shutdown.wait())
        try:
            while not self._shutdown.is_set():
                get = asyncio.ensure_future(self._queue.get())
                await asyncio.wait({get, stop}, return_when=asyncio.FIRST_COMPLETED)
                if not get.done():
                    get.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await get
                if get.done() and not get.cancelled():
                    self._dispatch(get.result())
            self._drain()
        finally:
            stop.cancel()

    def _drain(self) -> None:
        """Dispatch everything still buffered; called once shutdown begins."""
        drained = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._dispatch(event)
            drained += 1
        if drained:
            logger.info("event_bus.drained count=%d", drained)

    def _dispatch(self, event: Event) -> None:
        handlers = self._registry.handlers_for(event.type)
        if not handlers:
            logger.info("event.no_subscribers type=%s id=%s", event.type.value, event.id)
            return
        for handler in handlers:
            task = asyncio.create_task(self._run_handler(handler, event))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

    async def _run_handler(self, handler: Handler, event: Event) -> None:
        try:
            await handler(event)
        except Exception as exc:  # noqa: BLE001
            # isolated: counted and logged, never retried or re-raised
            self.stats.increment("event_processing_errors")
            logger.error(
                "event.handler_failed type=%s id=%s handler=%s error=%s",
                event.type.value,
                event.id,
                _handler_name(handler),
                exc,
            )


__all__ = ["BusState", "DEFAULT_CAPACITY", "InMemoryEventBus"]
