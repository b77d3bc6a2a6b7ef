"""Unit tests for InMemoryEventBus – ordering, fan-out, isolation, back-pressure, drain."""
from __future__ import annotations

import asyncio

import pytest

from mp_orders.application.events import DEFAULT_CAPACITY, BusState, InMemoryEventBus
from mp_orders.kernel.errors import BusClosedError, CallerCancelledError, QueueFullError
from mp_orders.kernel.events import Event, EventMetadata, EventStats, EventType
from mp_orders.kernel.orders import Order, OrderItem, OrderStatus


def _created(user_id: str = "u-1") -> Event:
    order = Order.new(user_id, [OrderItem("Book", 1, 10.0)])
    return Event.order_created(order, EventMetadata())


def _status_update(new: OrderStatus = OrderStatus.IN_PROGRESS) -> Event:
    return Event.order_status_updated("o-1", "u-1", "u-1", OrderStatus.CREATED, new, EventMetadata())


class Recorder:
    """Handler that records the events it receives."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def __call__(self, event: Event) -> None:
        self.events.append(event)

    @property
    def ids(self) -> list[str]:
        return [e.id for e in self.events]


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_starts_idle(self) -> None:
        bus = InMemoryEventBus()
        assert bus.state is BusState.IDLE
        assert bus.capacity == DEFAULT_CAPACITY == 100

    def test_rejects_non_positive_capacity(self) -> None:
        with pytest.raises(ValueError):
            InMemoryEventBus(capacity=0)

    def test_start_close_transitions(self) -> None:
        async def _run() -> list[BusState]:
            bus = InMemoryEventBus()
            seen = [bus.state]
            await bus.start()
            seen.append(bus.state)
            await bus.close()
            seen.append(bus.state)
            return seen

        assert asyncio.run(_run()) == [BusState.IDLE, BusState.RUNNING, BusState.CLOSED]

    def test_first_publish_starts_worker(self) -> None:
        async def _run() -> BusState:
            bus = InMemoryEventBus()
            await bus.publish(_created())
            state = bus.state
            await bus.close()
            return state

        assert asyncio.run(_run()) is BusState.RUNNING

    def test_close_is_idempotent(self) -> None:
        async def _run() -> BusState:
            bus = InMemoryEventBus()
            await bus.start()
            await bus.close()
            await bus.close()
            return bus.state

        assert asyncio.run(_run()) is BusState.CLOSED

    def test_concurrent_close_calls_both_wait(self) -> None:
        async def _run() -> tuple[BusState, int]:
            bus = InMemoryEventBus()
            recorder = Recorder()
            bus.subscribe(EventType.ORDER_CREATED, recorder)
            await bus.publish(_created())
            await asyncio.gather(bus.close(), bus.close())
            return bus.state, len(recorder.events)

        assert asyncio.run(_run()) == (BusState.CLOSED, 1)

    def test_close_without_start(self) -> None:
        async def _run() -> BusState:
            bus = InMemoryEventBus()
            await bus.close()
            return bus.state

        assert asyncio.run(_run()) is BusState.CLOSED

    def test_async_context_manager(self) -> None:
        async def _run() -> tuple[BusState, BusState]:
            async with InMemoryEventBus() as bus:
                inside = bus.state
            return inside, bus.state

        assert asyncio.run(_run()) == (BusState.RUNNING, BusState.CLOSED)


# ---------------------------------------------------------------------------
# Publish rejections
# ---------------------------------------------------------------------------


class TestPublishRejections:
    def test_publish_after_close_raises_bus_closed(self) -> None:
        async def _run() -> None:
            bus = InMemoryEventBus()
            await bus.close()
            await bus.publish(_created())

        with pytest.raises(BusClosedError):
            asyncio.run(_run())

    def test_publish_with_cancelled_signal(self) -> None:
        async def _run() -> int:
            bus = InMemoryEventBus()
            cancel = asyncio.Event()
            cancel.set()
            with pytest.raises(CallerCancelledError):
                await bus.publish(_created(), cancel=cancel)
            published = bus.stats.events_published
            await bus.close()
            return published

        assert asyncio.run(_run()) == 0

    def test_unset_cancel_signal_is_ignored(self) -> None:
        async def _run() -> int:
            bus = InMemoryEventBus()
            await bus.publish(_created(), cancel=asyncio.Event())
            await bus.close()
            return bus.stats.events_published

        assert asyncio.run(_run()) == 1

    def test_closed_wins_over_cancelled(self) -> None:
        async def _run() -> None:
            bus = InMemoryEventBus()
            await bus.close()
            cancel = asyncio.Event()
            cancel.set()
            await bus.publish(_created(), cancel=cancel)

        with pytest.raises(BusClosedError):
            asyncio.run(_run())

    def test_overflow_raises_queue_full(self) -> None:
        async def _run() -> tuple[int, int, int]:
            bus = InMemoryEventBus()
            recorder = Recorder()
            bus.subscribe(EventType.ORDER_CREATED, recorder)
            rejected = 0
            # no await yields to the worker inside this loop
            for _ in range(DEFAULT_CAPACITY + 5):
                try:
                    await bus.publish(_created())
                except QueueFullError as exc:
                    assert exc.capacity == DEFAULT_CAPACITY
                    rejected += 1
            pending = bus.pending
            await bus.close()
            return rejected, pending, len(recorder.events)

        rejected, pending, delivered = asyncio.run(_run())
        assert rejected == 5
        assert pending == DEFAULT_CAPACITY
        assert delivered == DEFAULT_CAPACITY

    def test_rejected_publish_is_not_counted(self) -> None:
        async def _run() -> int:
            bus = InMemoryEventBus(capacity=2)
            await bus.publish(_created())
            await bus.publish(_created())
            with pytest.raises(QueueFullError):
                await bus.publish(_created())
            await bus.close()
            return bus.stats.events_published

        assert asyncio.run(_run()) == 2


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_fifo_order_for_single_producer(self) -> None:
        async def _run() -> tuple[list[str], list[str]]:
            bus = InMemoryEventBus()
            recorder = Recorder()
            bus.subscribe(EventType.ORDER_CREATED, recorder)
            published = []
            for _ in range(20):
                event = _created()
                published.append(event.id)
                await bus.publish(event)
            await bus.close()
            return published, recorder.ids

        published, received = asyncio.run(_run())
        assert received == published

    def test_fan_out_reaches_every_handler_once(self) -> None:
        async def _run() -> tuple[Event, list[Recorder]]:
            bus = InMemoryEventBus()
            recorders = [Recorder() for _ in range(4)]
            for recorder in recorders:
                bus.subscribe(EventType.ORDER_CREATED, recorder)
            event = _created()
            await bus.publish(event)
            await bus.close()
            return event, recorders

        event, recorders = asyncio.run(_run())
        for recorder in recorders:
            assert recorder.events == [event]

    def test_handlers_only_see_their_event_type(self) -> None:
        async def _run() -> tuple[Recorder, Recorder]:
            bus = InMemoryEventBus()
            created, updated = Recorder(), Recorder()
            bus.subscribe(EventType.ORDER_CREATED, created)
            bus.subscribe(EventType.ORDER_STATUS_UPDATED, updated)
            await bus.publish(_created())
            await bus.publish(_status_update())
            await bus.publish(_status_update())
            await bus.close()
            return created, updated

        created, updated = asyncio.run(_run())
        assert len(created.events) == 1
        assert len(updated.events) == 2

    def test_event_without_subscribers_is_consumed(self) -> None:
        async def _run() -> tuple[int, int]:
            bus = InMemoryEventBus()
            await bus.publish(_status_update())
            await bus.close()
            return bus.pending, bus.stats.event_processing_errors

        assert asyncio.run(_run()) == (0, 0)

    def test_failing_handler_is_isolated(self) -> None:
        async def _run() -> tuple[Recorder, Recorder, EventStats]:
            bus = InMemoryEventBus()
            before, after = Recorder(), Recorder()

            async def broken(event: Event) -> None:
                raise RuntimeError("boom")

            bus.subscribe(EventType.ORDER_CREATED, before)
            bus.subscribe(EventType.ORDER_CREATED, broken)
            bus.subscribe(EventType.ORDER_CREATED, after)
            await bus.publish(_created())
            await bus.publish(_created())
            await bus.close()
            return before, after, bus.stats

        before, after, stats = asyncio.run(_run())
        assert len(before.events) == 2
        assert len(after.events) == 2
        assert stats.event_processing_errors == 2

    def test_slow_handler_does_not_hold_back_siblings(self) -> None:
        async def _run() -> list[str]:
            bus = InMemoryEventBus()
            order: list[str] = []
            release = asyncio.Event()

            async def slow(event: Event) -> None:
                await release.wait()
                order.append("slow")

            async def fast(event: Event) -> None:
                order.append("fast")
                release.set()

            bus.subscribe(EventType.ORDER_CREATED, slow)
            bus.subscribe(EventType.ORDER_CREATED, fast)
            await bus.publish(_created())
            await bus.close()
            return order

        assert asyncio.run(_run()) == ["fast", "slow"]

    def test_subscription_after_start_applies_to_later_events(self) -> None:
        async def _run() -> int:
            bus = InMemoryEventBus()
            await bus.start()
            recorder = Recorder()
            bus.subscribe(EventType.ORDER_CREATED, recorder)
            await bus.publish(_created())
            await bus.close()
            return len(recorder.events)

        assert asyncio.run(_run()) == 1


# ---------------------------------------------------------------------------
# Drain on close
# ---------------------------------------------------------------------------


class TestDrainOnClose:
    def test_close_dispatches_buffered_events(self) -> None:
        async def _run() -> tuple[list[str], list[str], int]:
            bus = InMemoryEventBus()
            recorder = Recorder()
            bus.subscribe(EventType.ORDER_CREATED, recorder)
            ids = []
            for _ in range(5):
                event = _created()
                ids.append(event.id)
                await bus.publish(event)
            buffered = bus.pending
            await bus.close()
            return ids, recorder.ids, buffered

        ids, received, buffered = asyncio.run(_run())
        assert buffered == 5
        assert sorted(received) == sorted(ids)

    def test_close_waits_for_in_flight_handlers(self) -> None:
        async def _run() -> tuple[list[str], int]:
            bus = InMemoryEventBus()
            finished: list[str] = []

            async def slow(event: Event) -> None:
                await asyncio.sleep(0.05)
                finished.append(event.id)

            bus.subscribe(EventType.ORDER_CREATED, slow)
            await bus.publish(_created())
            await asyncio.sleep(0)
            await bus.close()
            return finished, bus.in_flight

        finished, in_flight = asyncio.run(_run())
        assert len(finished) == 1
        assert in_flight == 0

    def test_publish_during_drain_is_rejected(self) -> None:
        async def _run() -> list[Exception]:
            bus = InMemoryEventBus()
            errors: list[Exception] = []

            async def republish(event: Event) -> None:
                try:
                    await bus.publish(_created())
                except BusClosedError as exc:
                    errors.append(exc)

            bus.subscribe(EventType.ORDER_CREATED, republish)
            await bus.publish(_created())
            await bus.close()
            return errors

        errors = asyncio.run(_run())
        assert len(errors) == 1

    def test_cancelled_close_can_be_retried(self) -> None:
        async def _run() -> tuple[BusState, list[str], BusState]:
            bus = InMemoryEventBus()
            release = asyncio.Event()
            finished: list[str] = []

            async def blocked(event: Event) -> None:
                await release.wait()
                finished.append(event.id)

            bus.subscribe(EventType.ORDER_CREATED, blocked)
            await bus.publish(_created())
            await asyncio.sleep(0)
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(bus.close(), 0.05)
            state_after_timeout = bus.state

            release.set()
            await asyncio.wait_for(bus.close(), 1.0)
            return state_after_timeout, finished, bus.state

        state_after_timeout, finished, final_state = asyncio.run(_run())
        assert state_after_timeout is BusState.DRAINING
        assert len(finished) == 1
        assert final_state is BusState.CLOSED

    def test_concurrent_closes_all_return(self) -> None:
        async def _run() -> tuple[int, BusState]:
            bus = InMemoryEventBus()
            recorder = Recorder()
            bus.subscribe(EventType.ORDER_CREATED, recorder)
            await bus.publish(_created())
            await asyncio.wait_for(asyncio.gather(bus.close(), bus.close(), bus.close()), 1.0)
            return len(recorder.events), bus.state

        delivered, state = asyncio.run(_run())
        assert delivered == 1
        assert state is BusState.CLOSED
