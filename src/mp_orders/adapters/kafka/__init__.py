"""Kafka adapter – broker-backed event bus."""
from mp_orders.adapters.kafka.bus import KafkaEventBus

__all__ = ["KafkaEventBus"]
