"""Adapters – choose the EventBus implementation from settings."""
from __future__ import annotations

import logging

from mp_orders.adapters.kafka import KafkaEventBus
from mp_orders.application.events import InMemoryEventBus
from mp_orders.config import OrdersSettings
from mp_orders.kernel.events import EventBus, EventStats

logger = logging.getLogger(__name__)


def build_event_bus(settings: OrdersSettings, stats: EventStats | None = None) -> EventBus:
    """Return the bus named by ``settings.event_bus_backend``.

    ``"memory"`` builds an :class:`InMemoryEventBus` sized by
    ``event_queue_capacity``; ``"kafka"`` builds the broker bus, which
    refuses every operation.
    """
    if settings.event_bus_backend == "kafka":
        logger.warning(
            "event_bus.backend=kafka brokers=%s topic=%s",
            ",".join(settings.kafka_brokers), settings.kafka_topic,
        )
        return KafkaEventBus(settings.kafka_brokers, settings.kafka_topic, stats=stats)

    logger.info("event_bus.backend=memory capacity=%d", settings.event_queue_capacity)
    return InMemoryEventBus(capacity=settings.event_queue_capacity, stats=stats)


__all__ = ["build_event_bus"]
