"""OrderRepository port, listing query and an in-memory implementation."""

from __future__ import annotations

import abc
import asyncio
import dataclasses
from typing import Literal

from mp_orders.kernel.errors import NotFoundError, ValidationError
from mp_orders.kernel.orders.order import Order, OrderStatus
from mp_orders.kernel.time import Clock, SystemClock

SortField = Literal["created_at", "updated_at", "total_sum"]
SortOrder = Literal["asc", "desc"]

_SORT_FIELDS: frozenset[str] = frozenset({"created_at", "updated_at", "total_sum"})
MAX_PAGE_SIZE = 100


@dataclasses.dataclass(frozen=True)
class ListOrdersQuery:
    """Filtering, sorting and paging for a user's order list."""

    limit: int = 10
    offset: int = 0
    status: OrderStatus | None = None
    sort: SortField = "created_at"
    order: SortOrder = "desc"

    def __post_init__(self) -> None:
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if self.offset < 0:
            raise ValidationError("offset must be >= 0")
        if self.sort not in _SORT_FIELDS:
            raise ValidationError(f"Unsupported sort field {self.sort!r}")
        if self.order not in ("asc", "desc"):
            raise ValidationError(f"Unsupported sort order {self.order!r}")


@dataclasses.dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    total: int
    limit: int
    offset: int

    def to_dict(self) -> dict[str, object]:
        return {
            "orders": [o.to_dict() for o in self.orders],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }


class OrderRepository(abc.ABC):
    """Port: order persistence.

    Concrete implementations live in ``adapters/sqlalchemy`` (PostgreSQL)
    and below (in-memory, for tests and local development).
    """

    @abc.abstractmethod
    async def create(self, order: Order) -> None: ...

    @abc.abstractmethod
    async def get(self, order_id: str) -> Order | None: ...

    async def get_or_raise(self, order_id: str) -> Order:
        order = await self.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    @abc.abstractmethod
    async def list_for_user(self, user_id: str, query: ListOrdersQuery) -> OrderPage: ...

    @abc.abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus) -> None: ...

    async def cancel(self, order_id: str) -> None:
        await self.update_status(order_id, OrderStatus.CANCELLED)

    @abc.abstractmethod
    async def user_exists(self, user_id: str) -> bool: ...


class InMemoryOrderRepository(OrderRepository):
    """Dict-backed repository; every known user id is accepted unless
    ``known_users`` restricts it."""

    def __init__(
        self,
        known_users: set[str] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._orders: dict[str, Order] = {}
        self._known_users = known_users
        self._clock = clock or SystemClock()
        self._lock = asyncio.Lock()

    async def create(self, order: Order) -> None:
        async with self._lock:
            self._orders[order.id] = dataclasses.replace(order)

    async def get(self, order_id: str) -> Order | None:
        order = self._orders.get(order_id)
        return dataclasses.replace(order) if order is not None else None

    async def list_for_user(self, user_id: str, query: ListOrdersQuery) -> OrderPage:
        matching = [
            o for o in self._orders.values()
            if o.user_id == user_id and (query.status is None or o.status == query.status)
        ]
        matching.sort(key=lambda o: getattr(o, query.sort), reverse=query.order == "desc")
        window = matching[query.offset:query.offset + query.limit]
        return OrderPage(
            orders=[dataclasses.replace(o) for o in window],
            total=len(matching),
            limit=query.limit,
            offset=query.offset,
        )

    async def update_status(self, order_id: str, status: OrderStatus) -> None:
        async with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            order.status = status
            order.updated_at = self._clock.now()

    async def user_exists(self, user_id: str) -> bool:
        return self._known_users is None or user_id in self._known_users

    def __len__(self) -> int:
        return len(self._orders)


__all__ = [
    "InMemoryOrderRepository",
    "ListOrdersQuery",
    "MAX_PAGE_SIZE",
    "OrderPage",
    "OrderRepository",
]
