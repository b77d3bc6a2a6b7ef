"""EventService – turns order state changes into published events."""

from __future__ import annotations

import asyncio
import logging

from mp_orders.application.events.handlers import (
    DEFAULT_HANDLERS,
    AnalyticsHandler,
    AuditHandler,
    NotificationHandler,
)
from mp_orders.application.events.notifications import LoggingNotifier, Notifier
from mp_orders.kernel.errors import SubscriptionError
from mp_orders.kernel.events import (
    SERVICE_NAME,
    Event,
    EventBus,
    EventMetadata,
    EventType,
    Handler,
)
from mp_orders.kernel.orders import Order, OrderStatus
from mp_orders.observability.correlation import RequestContext
from mp_orders.observability.logging import AuditLogger, AuditSink

logger = logging.getLogger(__name__)

OP_CREATE = "order.create"
OP_STATUS_UPDATE = "order.status.update"


class EventService:
    """Façade between the order use cases and the event bus.

    On construction it subscribes the built-in handlers: the default
    logging handler for each event type, then the analytics, notification
    and audit handlers for every event type.  Call :meth:`start` (or let the
    first publish do it) before publishing and :meth:`close` on shutdown.

    ``publish_*`` methods raise whatever the bus raises
    (:class:`~mp_orders.kernel.errors.EventBusError` subclasses); callers
    that have already committed the change log the error and carry on.

    Parameters
    ----------
    bus:
        The event bus; its ``stats`` are the counters reported by
        :meth:`get_stats`.
    notifier:
        Destination for customer notifications (default: log only).
    audit_sink:
        Destination for audit records (default: structured audit log).
    """

    def __init__(
        self,
        bus: EventBus,
        *,
        notifier: Notifier | None = None,
        audit_sink: AuditSink | None = None,
    ) -> None:
        self._bus = bus
        self._notifier = notifier or LoggingNotifier()
        self._audit_sink = audit_sink or AuditLogger(service=SERVICE_NAME)
        self._register_default_handlers()

    @property
    def bus(self) -> EventBus:
        return self._bus

    async def start(self) -> None:
        await self._bus.start()

    def _register_default_handlers(self) -> None:
        subscriptions: list[tuple[str, EventType, Handler]] = [
            ("default", event_type, handler) for event_type, handler in DEFAULT_HANDLERS.items()
        ]
        roles: list[tuple[str, Handler]] = [
            ("analytics", AnalyticsHandler(self._bus.stats)),
            ("notifications", NotificationHandler(self._notifier)),
            ("audit", AuditHandler(self._audit_sink)),
        ]
        for name, handler in roles:
            subscriptions.extend((name, event_type, handler) for event_type in EventType)

        for name, event_type, handler in subscriptions:
            try:
                self._bus.subscribe(event_type, handler)
            except SubscriptionError as exc:
                logger.error(
                    "event_service.subscribe_failed role=%s type=%s error=%s",
                    name, event_type.value, exc,
                )
        logger.info("event_service.handlers_registered roles=default,analytics,notifications,audit")

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish_order_created(
        self,
        order: Order,
        request: RequestContext | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Event:
        event = Event.order_created(order, self._metadata(request, OP_CREATE))
        await self._publish(event, cancel)
        return event

    async def publish_order_status_updated(
        self,
        order_id: str,
        owner_id: str,
        actor_id: str,
        old_status: OrderStatus,
        new_status: OrderStatus,
        request: RequestContext | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Event:
        """Publish a status change; *actor_id* may differ from *owner_id* (admins)."""
        event = Event.order_status_updated(
            order_id,
            owner_id,
            actor_id,
            old_status,
            new_status,
            self._metadata(request, OP_STATUS_UPDATE),
        )
        await self._publish(event, cancel)
        return event

    async def publish_order_cancelled(
        self,
        order_id: str,
        owner_id: str,
        actor_id: str,
        old_status: OrderStatus,
        request: RequestContext | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Event:
        """A status update into :attr:`OrderStatus.CANCELLED`."""
        return await self.publish_order_status_updated(
            order_id,
            owner_id,
            actor_id,
            old_status,
            OrderStatus.CANCELLED,
            request,
            cancel=cancel,
        )

    async def _publish(self, event: Event, cancel: asyncio.Event | None) -> None:
        await self._bus.publish(event, cancel=cancel)

    @staticmethod
    def _metadata(request: RequestContext | None, operation: str) -> EventMetadata:
        if request is None:
            return EventMetadata(source=SERVICE_NAME)
        return EventMetadata(
            source=SERVICE_NAME,
            request_id=request.request_id,
            user_agent=request.user_agent,
            ip_address=request.remote_addr,
            correlation_id=request.correlation_id(operation),
        )

    # ------------------------------------------------------------------
    # Subscriptions, stats and lifecycle
    # ------------------------------------------------------------------

    def add_custom_handler(self, event_type: EventType, handler: Handler) -> None:
        """Subscribe an extra handler; same contract as :meth:`EventBus.subscribe`."""
        self._bus.subscribe(event_type, handler)

    def get_stats(self) -> dict[str, int]:
        return self._bus.stats.snapshot()

    async def close(self) -> None:
        await self._bus.close()


__all__ = ["EventService", "OP_CREATE", "OP_STATUS_UPDATE"]
