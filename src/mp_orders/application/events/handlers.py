"""Built-in event handlers: default logging, analytics, notifications, audit.

Each handler is an async callable taking one :class:`Event`.  A handler
signals failure by raising; the bus counts and logs it without affecting
other handlers.  Handlers never mutate the event.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from mp_orders.application.events.notifications import Notification, Notifier
from mp_orders.kernel.errors import HandlerError
from mp_orders.kernel.events import (
    Event,
    EventStats,
    EventType,
    Handler,
    OrderCreatedPayload,
    OrderStatusUpdatedPayload,
)
from mp_orders.kernel.orders import OrderStatus
from mp_orders.observability.logging import AuditSink

logger = logging.getLogger(__name__)

P = TypeVar("P", OrderCreatedPayload, OrderStatusUpdatedPayload)

#: Statuses whose arrival is worth telling the customer about.
NOTIFY_ON_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)


def expect_payload(event: Event, payload_type: type[P]) -> P:
    """Return ``event.payload`` if it is a *payload_type*, else raise ``HandlerError``."""
    if not isinstance(event.payload, payload_type):
        raise HandlerError(
            f"Unexpected payload {type(event.payload).__name__} for {event.type.value}, "
            f"expected {payload_type.__name__}",
            event_type=event.type.value,
            event_id=event.id,
        )
    return event.payload


# ---------------------------------------------------------------------------
# Default logging handlers (one per event type)
# ---------------------------------------------------------------------------


async def log_order_created(event: Event) -> None:
    data = expect_payload(event, OrderCreatedPayload)
    logger.info(
        "order.created order_id=%s user_id=%s total=%.2f items=%d",
        data.order_id, data.user_id, data.total_sum, len(data.items),
    )


async def log_order_status_updated(event: Event) -> None:
    data = expect_payload(event, OrderStatusUpdatedPayload)
    logger.info(
        "order.status_updated order_id=%s %s -> %s user_id=%s",
        data.order_id, data.old_status.value, data.new_status.value, data.user_id,
    )


DEFAULT_HANDLERS: dict[EventType, Handler] = {
    EventType.ORDER_CREATED: log_order_created,
    EventType.ORDER_STATUS_UPDATED: log_order_status_updated,
}


# ---------------------------------------------------------------------------
# Role handlers (subscribed to every event type)
# ---------------------------------------------------------------------------


class AnalyticsHandler:
    """Keeps order counters in :class:`EventStats` up to date."""

    def __init__(self, stats: EventStats) -> None:
        self._stats = stats

    async def __call__(self, event: Event) -> None:
        if event.type is EventType.ORDER_CREATED:
            created = expect_payload(event, OrderCreatedPayload)
            self._stats.increment("orders_created")
            logger.info(
                "analytics: new order %s total %.2f (%d items)",
                created.order_id, created.total_sum, len(created.items),
            )
        elif event.type is EventType.ORDER_STATUS_UPDATED:
            updated = expect_payload(event, OrderStatusUpdatedPayload)
            self._stats.increment("status_updates")
            if updated.new_status is OrderStatus.CANCELLED:
                self._stats.increment("orders_cancelled")
            logger.info(
                "analytics: order %s status %s -> %s",
                updated.order_id, updated.old_status.value, updated.new_status.value,
            )
        else:
            logger.warning("analytics: unknown event type %s", event.type)


class NotificationHandler:
    """Tells the order owner when an order reaches a terminal status.

    New orders are acknowledged in the HTTP response itself, so
    ``order.created`` is only validated, not notified.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    async def __call__(self, event: Event) -> None:
        if event.type is EventType.ORDER_CREATED:
            created = expect_payload(event, OrderCreatedPayload)
            logger.debug("notifications: nothing to send for new order %s", created.order_id)
        elif event.type is EventType.ORDER_STATUS_UPDATED:
            updated = expect_payload(event, OrderStatusUpdatedPayload)
            if updated.new_status not in NOTIFY_ON_STATUSES:
                return
            await self._notifier.notify(
                Notification(
                    user_id=updated.user_id,
                    order_id=updated.order_id,
                    subject="Order status changed",
                    body=f"Order {updated.order_id} is now '{updated.new_status.value}'",
                )
            )
        else:
            logger.warning("notifications: unknown event type %s", event.type)


class AuditHandler:
    """Writes the full event to the audit sink."""

    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink

    @staticmethod
    def build_record(event: Event) -> dict[str, Any]:
        return {
            "event": "audit.order_event",
            "event_id": event.id,
            "event_type": event.type.value,
            "aggregate_id": event.aggregate_id,
            "user_id": event.actor_id,
            "timestamp": event.timestamp.isoformat(),
            "version": event.schema_version,
            "metadata": event.metadata.to_dict(),
            "data": event.payload.to_dict(),
        }

    async def __call__(self, event: Event) -> None:
        try:
            record = self.build_record(event)
        except (AttributeError, TypeError, ValueError) as exc:
            raise HandlerError(
                f"Cannot serialise event for audit: {exc}",
                event_type=event.type.value,
                event_id=event.id,
                cause=exc,
            ) from exc
        await self._sink.emit(record)


__all__ = [
    "AnalyticsHandler",
    "AuditHandler",
    "DEFAULT_HANDLERS",
    "NOTIFY_ON_STATUSES",
    "NotificationHandler",
    "expect_payload",
    "log_order_created",
    "log_order_status_updated",
]
