"""FastAPI adapter – application factory."""
from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

import mp_orders
from mp_orders.adapters.event_bus import build_event_bus
from mp_orders.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from mp_orders.adapters.fastapi.middleware import FastAPIRequestLoggingMiddleware
from mp_orders.adapters.fastapi.routers import (
    FastAPIEventsRouter,
    FastAPIHealthRouter,
    FastAPIOrdersRouter,
)
from mp_orders.adapters.sqlalchemy import SqlAlchemyOrderRepository, SqlAlchemySessionFactory
from mp_orders.application.events import EventService, Notifier
from mp_orders.application.orders import OrderService
from mp_orders.config import OrdersSettings
from mp_orders.kernel.events import SERVICE_NAME, EventBus
from mp_orders.kernel.orders import OrderRepository
from mp_orders.observability.logging import AuditSink

logger = logging.getLogger(__name__)


def create_app(
    settings: OrdersSettings,
    *,
    repository: OrderRepository | None = None,
    bus: EventBus | None = None,
    notifier: Notifier | None = None,
    audit_sink: AuditSink | None = None,
) -> FastAPI:
    """Wire the orders service into a FastAPI application.

    Without *repository* the PostgreSQL repository is built from
    ``settings``; without *bus* the backend named by
    ``settings.event_bus_backend`` is used.  The bus starts with the
    application and is drained and closed on shutdown, before the database
    engine is disposed.
    """
    session_factory: SqlAlchemySessionFactory | None = None
    if repository is None:
        session_factory = SqlAlchemySessionFactory(settings.resolved_database_url, pool_pre_ping=True)
        repository = SqlAlchemyOrderRepository(session_factory)

    events = EventService(
        bus if bus is not None else build_event_bus(settings),
        notifier=notifier,
        audit_sink=audit_sink,
    )
    orders = OrderService(repository, events)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await events.start()
        logger.info(
            "service.started service=%s environment=%s port=%d",
            SERVICE_NAME, settings.environment, settings.server_port,
        )
        try:
            yield
        finally:
            logger.info("service.stopping service=%s", SERVICE_NAME)
            await events.close()
            if session_factory is not None:
                await session_factory.dispose()
            logger.info("service.stopped service=%s stats=%s", SERVICE_NAME, events.get_stats())

    app = FastAPI(
        title="Orders service",
        version=mp_orders.__version__,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
    )
    app.state.settings = settings
    app.state.event_service = events
    app.state.order_service = orders

    FastAPIExceptionMapper().register(app)
    app.add_middleware(FastAPIRequestLoggingMiddleware, service=SERVICE_NAME)
    app.include_router(FastAPIOrdersRouter())
    app.include_router(FastAPIEventsRouter())
    app.include_router(FastAPIHealthRouter())
    return app


__all__ = ["create_app"]
