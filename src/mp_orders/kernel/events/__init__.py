"""Order domain events – value objects, bus port and handler registry."""
from mp_orders.kernel.events.bus import EventBus, EventStats
from mp_orders.kernel.events.event import (
    PAYLOAD_TYPES,
    SCHEMA_VERSION,
    SERVICE_NAME,
    Event,
    EventMetadata,
    EventType,
    OrderCreatedPayload,
    OrderStatusUpdatedPayload,
    Payload,
)
from mp_orders.kernel.events.registry import Handler, HandlerRegistry

__all__ = [
    "Event",
    "EventBus",
    "EventMetadata",
    "EventStats",
    "EventType",
    "Handler",
    "HandlerRegistry",
    "OrderCreatedPayload",
    "OrderStatusUpdatedPayload",
    "PAYLOAD_TYPES",
    "Payload",
    "SCHEMA_VERSION",
    "SERVICE_NAME",
]
