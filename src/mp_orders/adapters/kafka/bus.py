"""Kafka adapter – KafkaEventBus placeholder."""
from __future__ import annotations

import asyncio
import logging

from mp_orders.kernel.errors import BrokerNotImplementedError
from mp_orders.kernel.events import Event, EventBus, EventStats, EventType, Handler

logger = logging.getLogger(__name__)

BROKER_NAME = "Kafka"


class KafkaEventBus(EventBus):
    """Broker-backed ``EventBus`` reserved for multi-instance deployments.

    Not implemented: every operation raises
    :class:`~mp_orders.kernel.errors.BrokerNotImplementedError` so that a
    deployment configured for Kafka fails at startup instead of dropping
    events silently.
    """

    def __init__(
        self,
        brokers: list[str],
        topic: str,
        stats: EventStats | None = None,
    ) -> None:
        super().__init__(stats)
        self.brokers = list(brokers)
        self.topic = topic

    def _fail(self, operation: str) -> BrokerNotImplementedError:
        logger.error(
            "event_bus.kafka_unavailable operation=%s brokers=%s topic=%s",
            operation, ",".join(self.brokers), self.topic,
        )
        return BrokerNotImplementedError(BROKER_NAME)

    async def start(self) -> None:
        raise self._fail("start")

    async def publish(self, event: Event, *, cancel: asyncio.Event | None = None) -> None:
        raise self._fail("publish")

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        raise self._fail("subscribe")

    async def close(self) -> None:
        raise self._fail("close")


__all__ = ["BROKER_NAME", "KafkaEventBus"]
