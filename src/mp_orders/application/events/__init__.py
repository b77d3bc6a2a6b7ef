"""Application events – in-memory bus, built-in handlers and EventService."""
from mp_orders.application.events.handlers import (
    DEFAULT_HANDLERS,
    NOTIFY_ON_STATUSES,
    AnalyticsHandler,
    AuditHandler,
    NotificationHandler,
    expect_payload,
)
from mp_orders.application.events.in_memory_bus import (
    DEFAULT_CAPACITY,
    BusState,
    InMemoryEventBus,
)
from mp_orders.application.events.notifications import (
    InMemoryNotifier,
    LoggingNotifier,
    Notification,
    Notifier,
)
from mp_orders.application.events.service import EventService

__all__ = [
    "AnalyticsHandler",
    "AuditHandler",
    "BusState",
    "DEFAULT_CAPACITY",
    "DEFAULT_HANDLERS",
    "EventService",
    "InMemoryEventBus",
    "InMemoryNotifier",
    "LoggingNotifier",
    "NOTIFY_ON_STATUSES",
    "Notification",
    "NotificationHandler",
    "Notifier",
    "expect_payload",
]
