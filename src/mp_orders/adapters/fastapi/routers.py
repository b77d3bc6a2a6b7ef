"""FastAPI adapter – orders, event statistics and health routers."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from mp_orders.adapters.fastapi.deps import CurrentRequest, CurrentUser, Events, OrderId, Orders
from mp_orders.adapters.fastapi.schemas import CreateOrderRequest, UpdateStatusRequest, success_response
from mp_orders.kernel.events import SERVICE_NAME
from mp_orders.kernel.orders import MAX_PAGE_SIZE, ListOrdersQuery, OrderStatus
from mp_orders.kernel.time import utc_now

STATS_DESCRIPTION = "Статистика доменных событий"


def _page_param(raw: str | None, default: int, minimum: int, maximum: int | None = None) -> int:
    """Lenient integer query parameter: out-of-range or non-numeric means *default*."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value < minimum or (maximum is not None and value > maximum):
        return default
    return value


def FastAPIOrdersRouter(prefix: str = "/v1/orders", tags: list[str] | None = None) -> APIRouter:
    """Return the order CRUD router."""
    router = APIRouter(prefix=prefix, tags=tags or ["orders"])

    @router.post("", status_code=201)
    async def create_order(
        body: CreateOrderRequest,
        user: CurrentUser,
        request: CurrentRequest,
        orders: Orders,
    ) -> dict[str, Any]:
        order = await orders.create_order(user, [i.to_domain() for i in body.items], request)
        return success_response(order.to_dict())

    @router.get("")
    async def list_orders(
        user: CurrentUser,
        orders: Orders,
        limit: str | None = Query(default=None),
        offset: str | None = Query(default=None),
        status: str | None = Query(default=None),
        sort: str = Query(default="created_at"),
        order: str = Query(default="desc"),
    ) -> dict[str, Any]:
        query = ListOrdersQuery(
            limit=_page_param(limit, 10, 1, MAX_PAGE_SIZE),
            offset=_page_param(offset, 0, 0),
            status=OrderStatus.parse(status) if status else None,
            sort=sort,  # type: ignore[arg-type]
            order=order,  # type: ignore[arg-type]
        )
        page = await orders.list_orders(user, query)
        return success_response(page.to_dict())

    @router.get("/{order_id}")
    async def get_order(user: CurrentUser, order_id: OrderId, orders: Orders) -> dict[str, Any]:
        order = await orders.get_order(user, order_id)
        return success_response(order.to_dict())

    @router.put("/{order_id}/status")
    async def update_status(
        user: CurrentUser,
        order_id: OrderId,
        body: UpdateStatusRequest,
        request: CurrentRequest,
        orders: Orders,
    ) -> dict[str, Any]:
        order = await orders.update_status(user, order_id, OrderStatus.parse(body.status), request)
        return success_response(order.to_dict())

    # POST is accepted as well for older clients
    @router.api_route("/{order_id}/cancel", methods=["PUT", "POST"])
    async def cancel_order(
        user: CurrentUser,
        order_id: OrderId,
        request: CurrentRequest,
        orders: Orders,
    ) -> dict[str, Any]:
        order = await orders.cancel_order(user, order_id, request)
        return success_response(order.to_dict())

    return router


def FastAPIEventsRouter(prefix: str = "/v1/events", tags: list[str] | None = None) -> APIRouter:
    """Return the event statistics router used for monitoring."""
    router = APIRouter(prefix=prefix, tags=tags or ["events"])

    @router.get("/stats")
    async def event_stats(events: Events) -> dict[str, Any]:
        return success_response({
            "statistics": events.get_stats(),
            "service": SERVICE_NAME,
            "timestamp": utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            "description": STATS_DESCRIPTION,
        })

    return router


def FastAPIHealthRouter(path: str = "/health", tags: list[str] | None = None) -> APIRouter:
    """Return the liveness router."""
    router = APIRouter(tags=tags or ["ops"])

    @router.get(f"{path}/live")
    async def liveness() -> dict[str, str]:
        """Liveness probe – always 200 OK when the process is up."""
        return {"status": "ok"}

    return router


__all__ = ["FastAPIEventsRouter", "FastAPIHealthRouter", "FastAPIOrdersRouter", "STATS_DESCRIPTION"]
