"""SQLAlchemy adapter – SqlAlchemyOrderRepository."""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Callable

from sqlalchemy import exists, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mp_orders.adapters.sqlalchemy.models import OrderModel, UserModel
from mp_orders.kernel.errors import NotFoundError, PersistenceError
from mp_orders.kernel.orders import (
    ListOrdersQuery,
    Order,
    OrderItem,
    OrderPage,
    OrderRepository,
    OrderStatus,
)
from mp_orders.kernel.time import Clock, SystemClock

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "created_at": OrderModel.created_at,
    "updated_at": OrderModel.updated_at,
    "total_sum": OrderModel.total_sum,
}


def _aware(value: datetime) -> datetime:
    # SQLite drops the offset; stored values are always UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class SqlAlchemyOrderRepository(OrderRepository):
    """Order persistence on SQLAlchemy 2.x async sessions.

    Each call runs in its own session and transaction.  Driver failures
    surface as :class:`~mp_orders.kernel.errors.PersistenceError`.

    Parameters
    ----------
    session_factory:
        Zero-argument callable returning an ``AsyncSession``, typically a
        :class:`~mp_orders.adapters.sqlalchemy.SqlAlchemySessionFactory`.
    clock:
        Source of ``updated_at`` on status changes.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderModel:
        return OrderModel(
            id=order.id,
            user_id=order.user_id,
            items=[item.to_dict() for item in order.items],
            status=order.status,
            total_sum=order.total_sum,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    @staticmethod
    def _to_domain(row: OrderModel) -> Order:
        return Order(
            id=str(row.id),
            user_id=str(row.user_id),
            items=tuple(OrderItem.from_dict(i) for i in row.items),
            status=OrderStatus(row.status),
            total_sum=float(row.total_sum),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    # ------------------------------------------------------------------
    # OrderRepository
    # ------------------------------------------------------------------

    async def create(self, order: Order) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(self._to_row(order))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to create order {order.id}", cause=exc) from exc

    async def get(self, order_id: str) -> Order | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderModel, order_id)
                return self._to_domain(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load order {order_id}", cause=exc) from exc

    async def list_for_user(self, user_id: str, query: ListOrdersQuery) -> OrderPage:
        conditions: list[Any] = [OrderModel.user_id == user_id]
        if query.status is not None:
            conditions.append(OrderModel.status == query.status)

        column = _SORT_COLUMNS[query.sort]
        ordering = column.asc() if query.order == "asc" else column.desc()

        try:
            async with self._session_factory() as session:
                total = await session.scalar(
                    select(func.count()).select_from(OrderModel).where(*conditions)
                )
                result = await session.scalars(
                    select(OrderModel)
                    .where(*conditions)
                    .order_by(ordering)
                    .limit(query.limit)
                    .offset(query.offset)
                )
                orders = [self._to_domain(row) for row in result.all()]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to list orders of user {user_id}", cause=exc) from exc

        return OrderPage(orders=orders, total=int(total or 0), limit=query.limit, offset=query.offset)

    async def update_status(self, order_id: str, status: OrderStatus) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    update(OrderModel)
                    .where(OrderModel.id == order_id)
                    .values(status=status, updated_at=self._clock.now())
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to update order {order_id}", cause=exc) from exc
        if result.rowcount == 0:
            raise NotFoundError("Order", order_id)
        logger.debug("orders.status_written order_id=%s status=%s", order_id, status.value)

    async def user_exists(self, user_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                found = await session.scalar(select(exists().where(UserModel.id == user_id)))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to look up user {user_id}", cause=exc) from exc
        return bool(found)


__all__ = ["SqlAlchemyOrderRepository"]
