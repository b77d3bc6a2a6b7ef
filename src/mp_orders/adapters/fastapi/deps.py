"""FastAPI adapter – reusable dependency functions."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Request

from mp_orders.application.events import EventService
from mp_orders.application.orders import OrderService
from mp_orders.kernel.errors import ValidationError
from mp_orders.kernel.security import UserContext
from mp_orders.observability.correlation import RequestContext


def current_user(request: Request) -> UserContext:
    """Caller identity from the gateway headers; 401 when absent or malformed."""
    return UserContext.from_headers(request.headers)


def request_context(request: Request) -> RequestContext:
    """Tracing fields sent by the caller.

    Only an incoming ``X-Request-ID`` becomes the event request id; the id the
    logging middleware generates for header-less requests stays in the logs.
    """
    return RequestContext.from_headers(
        request.headers,
        remote_addr=request.client.host if request.client else "",
    )


def order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def event_service(request: Request) -> EventService:
    return request.app.state.event_service


def order_id_path(order_id: str) -> str:
    """Validate the ``{order_id}`` path segment as a UUID."""
    try:
        return str(uuid.UUID(order_id))
    except ValueError as exc:
        raise ValidationError(
            "Invalid order id",
            errors=[{"field": "order_id", "value": order_id}],
            cause=exc,
        ) from exc


CurrentUser = Annotated[UserContext, Depends(current_user)]
CurrentRequest = Annotated[RequestContext, Depends(request_context)]
Orders = Annotated[OrderService, Depends(order_service)]
Events = Annotated[EventService, Depends(event_service)]
OrderId = Annotated[str, Depends(order_id_path)]

__all__ = [
    "CurrentRequest",
    "CurrentUser",
    "Events",
    "OrderId",
    "Orders",
    "current_user",
    "event_service",
    "order_id_path",
    "order_service",
    "request_context",
]
