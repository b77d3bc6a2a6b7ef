"""Unit tests for the built-in event handlers."""
from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

import pytest

from mp_orders.application.events import (
    DEFAULT_HANDLERS,
    AnalyticsHandler,
    AuditHandler,
    InMemoryNotifier,
    NotificationHandler,
    expect_payload,
)
from mp_orders.application.events.handlers import log_order_created, log_order_status_updated
from mp_orders.kernel.errors import HandlerError
from mp_orders.kernel.events import (
    Event,
    EventMetadata,
    EventStats,
    EventType,
    OrderCreatedPayload,
    OrderStatusUpdatedPayload,
)
from mp_orders.kernel.orders import Order, OrderItem, OrderStatus
from mp_orders.kernel.time import FrozenClock
from mp_orders.observability.logging import InMemoryAuditSink

CLOCK = FrozenClock(datetime(2026, 10, 18, 12, 0, tzinfo=UTC))


def _created() -> Event:
    order = Order.new(
        "u-1",
        [OrderItem("Pen", 2, 9.99), OrderItem("Notebook", 1, 39.99)],
        clock=CLOCK,
    )
    return Event.order_created(order, EventMetadata(request_id="req-1", correlation_id="req-1-order.create"))


def _updated(new: OrderStatus, old: OrderStatus = OrderStatus.CREATED) -> Event:
    return Event.order_status_updated("o-2", "u-1", "admin-1", old, new, EventMetadata())


class TestExpectPayload:
    def test_returns_matching_payload(self) -> None:
        event = _created()
        assert expect_payload(event, OrderCreatedPayload) is event.payload

    def test_mismatch_raises_handler_error(self) -> None:
        event = _created()
        with pytest.raises(HandlerError) as info:
            expect_payload(event, OrderStatusUpdatedPayload)
        assert info.value.event_id == event.id
        assert info.value.event_type == "order.created"


class TestDefaultHandlers:
    def test_one_handler_per_event_type(self) -> None:
        assert set(DEFAULT_HANDLERS) == set(EventType)

    def test_logs_created(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mp_orders.application.events.handlers"):
            asyncio.run(log_order_created(_created()))
        assert "order.created" in caplog.text
        assert "items=2" in caplog.text

    def test_logs_status_update(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mp_orders.application.events.handlers"):
            asyncio.run(log_order_status_updated(_updated(OrderStatus.IN_PROGRESS)))
        assert "создан -> в работе" in caplog.text


class TestAnalyticsHandler:
    def test_counts_created_orders(self, caplog: pytest.LogCaptureFixture) -> None:
        stats = EventStats()
        with caplog.at_level(logging.INFO, logger="mp_orders.application.events.handlers"):
            asyncio.run(AnalyticsHandler(stats)(_created()))
        assert stats.orders_created == 1
        assert stats.status_updates == 0
        assert "(2 items)" in caplog.text
        assert "59.97" in caplog.text

    def test_cancellation_counts_as_update_and_cancel(self) -> None:
        stats = EventStats()
        asyncio.run(AnalyticsHandler(stats)(_updated(OrderStatus.CANCELLED)))
        assert stats.status_updates == 1
        assert stats.orders_cancelled == 1

    def test_non_cancel_update(self) -> None:
        stats = EventStats()
        asyncio.run(AnalyticsHandler(stats)(_updated(OrderStatus.IN_PROGRESS)))
        assert stats.status_updates == 1
        assert stats.orders_cancelled == 0


class TestNotificationHandler:
    def test_created_sends_nothing(self) -> None:
        notifier = InMemoryNotifier()
        asyncio.run(NotificationHandler(notifier)(_created()))
        assert notifier.count == 0

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_status_notifies_owner(self, status: OrderStatus) -> None:
        notifier = InMemoryNotifier()
        asyncio.run(NotificationHandler(notifier)(_updated(status)))
        assert notifier.count == 1
        sent = notifier.sent[0]
        assert sent.user_id == "u-1"
        assert sent.order_id == "o-2"
        assert status.value in sent.body

    def test_non_terminal_status_is_silent(self) -> None:
        notifier = InMemoryNotifier()
        asyncio.run(NotificationHandler(notifier)(_updated(OrderStatus.IN_PROGRESS)))
        assert notifier.count == 0

    def test_notifier_failure_propagates(self) -> None:
        class Broken:
            async def notify(self, notification: object) -> None:
                raise ConnectionError("smtp down")

        with pytest.raises(ConnectionError):
            asyncio.run(NotificationHandler(Broken())(_updated(OrderStatus.CANCELLED)))


class TestAuditHandler:
    def test_record_carries_full_event(self) -> None:
        sink = InMemoryAuditSink()
        event = _created()
        asyncio.run(AuditHandler(sink)(event))
        assert len(sink.records) == 1
        record = sink.records[0]
        assert record["event"] == "audit.order_event"
        assert record["event_id"] == event.id
        assert record["event_type"] == "order.created"
        assert record["aggregate_id"] == event.aggregate_id
        assert record["version"] == 1
        assert record["metadata"]["request_id"] == "req-1"
        assert record["data"]["total_sum"] == 59.97

    def test_status_update_record(self) -> None:
        sink = InMemoryAuditSink()
        asyncio.run(AuditHandler(sink)(_updated(OrderStatus.COMPLETED)))
        record = sink.for_aggregate("o-2")[0]
        assert record["data"]["new_status"] == "выполнен"
        assert record["data"]["updated_by"] == "admin-1"
        assert record["user_id"] == "u-1"
