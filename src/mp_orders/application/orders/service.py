"""OrderService – order use cases with event publication after commit."""

from __future__ import annotations

import logging
from typing import Iterable

from mp_orders.application.events.service import EventService
from mp_orders.kernel.errors import EventBusError, ValidationError
from mp_orders.kernel.orders import (
    ListOrdersQuery,
    Order,
    OrderItem,
    OrderPage,
    OrderRepository,
    OrderStatus,
)
from mp_orders.kernel.security import UserContext
from mp_orders.kernel.time import Clock, SystemClock
from mp_orders.observability.correlation import RequestContext

logger = logging.getLogger(__name__)


class OrderService:
    """Create, read and move orders through their lifecycle.

    Every mutation is written to the repository first; the matching event
    is published afterwards.  The database is the source of truth, so a
    publication failure (full queue, closed bus) is logged with the order
    id and the use case still succeeds.

    Parameters
    ----------
    repository:
        Order persistence.
    events:
        Event façade used to announce committed changes.
    clock:
        Time source for new orders (default: system UTC clock).
    """

    def __init__(
        self,
        repository: OrderRepository,
        events: EventService,
        clock: Clock | None = None,
    ) -> None:
        self._repository = repository
        self._events = events
        self._clock = clock or SystemClock()

    async def create_order(
        self,
        user: UserContext,
        items: Iterable[OrderItem],
        request: RequestContext | None = None,
    ) -> Order:
        if not await self._repository.user_exists(user.user_id):
            raise ValidationError(
                "User does not exist",
                errors=[{"field": "user_id", "value": user.user_id}],
            )

        order = Order.new(user.user_id, items, clock=self._clock)
        await self._repository.create(order)
        logger.info(
            "order.create order_id=%s user_id=%s total=%.2f",
            order.id, order.user_id, order.total_sum,
        )

        try:
            await self._events.publish_order_created(order, request)
        except EventBusError as exc:
            self._log_publish_failure("order.created", order.id, exc)
        return order

    async def get_order(self, user: UserContext, order_id: str) -> Order:
        order = await self._repository.get_or_raise(order_id)
        user.ensure_can_access(order.user_id)
        return order

    async def list_orders(self, user: UserContext, query: ListOrdersQuery) -> OrderPage:
        page = await self._repository.list_for_user(user.user_id, query)
        logger.info(
            "order.list user_id=%s found=%d limit=%d offset=%d",
            user.user_id, len(page.orders), query.limit, query.offset,
        )
        return page

    async def update_status(
        self,
        user: UserContext,
        order_id: str,
        status: OrderStatus,
        request: RequestContext | None = None,
    ) -> Order:
        order = await self.get_order(user, order_id)
        if not order.can_be_updated():
            raise ValidationError(
                f"Cannot update order with status '{order.status.value}'"
            )

        old_status = order.status
        await self._repository.update_status(order_id, status)
        logger.info(
            "order.update_status order_id=%s %s -> %s by=%s",
            order_id, old_status.value, status.value, user.user_id,
        )

        try:
            await self._events.publish_order_status_updated(
                order_id, order.user_id, user.user_id, old_status, status, request
            )
        except EventBusError as exc:
            self._log_publish_failure("order.status.updated", order_id, exc)
        return await self._repository.get_or_raise(order_id)

    async def cancel_order(
        self,
        user: UserContext,
        order_id: str,
        request: RequestContext | None = None,
    ) -> Order:
        order = await self.get_order(user, order_id)
        if not order.can_be_cancelled():
            raise ValidationError(
                f"Cannot cancel order with status '{order.status.value}'"
            )

        old_status = order.status
        await self._repository.cancel(order_id)
        logger.info("order.cancel order_id=%s by=%s", order_id, user.user_id)

        try:
            await self._events.publish_order_cancelled(
                order_id, order.user_id, user.user_id, old_status, request
            )
        except EventBusError as exc:
            self._log_publish_failure("order.cancelled", order_id, exc)
        return await self._repository.get_or_raise(order_id)

    @staticmethod
    def _log_publish_failure(event_name: str, order_id: str, exc: EventBusError) -> None:
        logger.error(
            "order.publish_failed event=%s order_id=%s code=%s error=%s",
            event_name, order_id, exc.code, exc.message,
        )


__all__ = ["OrderService"]
