"""FastAPI adapter – app factory, routers, middleware, exception mapper, deps."""
from mp_orders.adapters.fastapi.app import create_app
from mp_orders.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from mp_orders.adapters.fastapi.middleware import FastAPIRequestLoggingMiddleware
from mp_orders.adapters.fastapi.routers import (
    FastAPIEventsRouter,
    FastAPIHealthRouter,
    FastAPIOrdersRouter,
)

__all__ = [
    "FastAPIEventsRouter",
    "FastAPIExceptionMapper",
    "FastAPIHealthRouter",
    "FastAPIOrdersRouter",
    "FastAPIRequestLoggingMiddleware",
    "create_app",
]
