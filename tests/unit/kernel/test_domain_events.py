"""Unit tests for order domain events."""
from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime

import pytest

from mp_orders.kernel.errors import SerializationError, ValidationError
from mp_orders.kernel.events import (
    SCHEMA_VERSION,
    SERVICE_NAME,
    Event,
    EventMetadata,
    EventType,
    OrderCreatedPayload,
    OrderStatusUpdatedPayload,
)
from mp_orders.kernel.orders import Order, OrderItem, OrderStatus
from mp_orders.kernel.time import FrozenClock

CLOCK = FrozenClock(datetime(2026, 10, 18, 9, 30, tzinfo=UTC))


def _order() -> Order:
    return Order.new("u-1", [OrderItem("Lamp", 2, 25.5), OrderItem("Bulb", 4, 2.0)], clock=CLOCK)


class TestEventType:
    def test_wire_values(self) -> None:
        assert EventType.ORDER_CREATED.value == "order.created"
        assert EventType.ORDER_STATUS_UPDATED.value == "order.status.updated"

    def test_display_names(self) -> None:
        assert EventType.ORDER_CREATED.display_name == "Заказ создан"
        assert EventType.ORDER_STATUS_UPDATED.display_name == "Статус заказа обновлен"


class TestEventConstruction:
    def test_order_created_factory(self) -> None:
        order = _order()
        event = Event.order_created(order, EventMetadata())
        assert event.type is EventType.ORDER_CREATED
        assert event.aggregate_id == order.id
        assert event.actor_id == "u-1"
        assert event.schema_version == SCHEMA_VERSION
        payload = event.payload
        assert isinstance(payload, OrderCreatedPayload)
        assert payload.total_sum == 59.0
        assert payload.items == order.items
        assert payload.status is OrderStatus.CREATED
        assert payload.created_at == CLOCK.now()

    def test_status_updated_factory(self) -> None:
        event = Event.order_status_updated(
            "o-1", "owner", "admin", OrderStatus.CREATED, OrderStatus.COMPLETED, EventMetadata()
        )
        payload = event.payload
        assert isinstance(payload, OrderStatusUpdatedPayload)
        assert event.actor_id == "owner"
        assert payload.user_id == "owner"
        assert payload.updated_by == "admin"
        assert payload.updated_at == event.timestamp

    def test_ids_are_unique(self) -> None:
        order = _order()
        assert Event.order_created(order, EventMetadata()).id != Event.order_created(order, EventMetadata()).id

    def test_event_is_immutable(self) -> None:
        event = Event.order_created(_order(), EventMetadata())
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.aggregate_id = "other"  # type: ignore[misc]

    def test_payload_must_match_type(self) -> None:
        created = Event.order_created(_order(), EventMetadata())
        with pytest.raises(ValidationError):
            Event(
                type=EventType.ORDER_STATUS_UPDATED,
                aggregate_id="o-1",
                actor_id="u-1",
                payload=created.payload,
            )


class TestEventMetadata:
    def test_defaults_to_service_source(self) -> None:
        assert EventMetadata().source == SERVICE_NAME

    def test_empty_fields_omitted(self) -> None:
        assert EventMetadata().to_dict() == {"source": SERVICE_NAME}

    def test_round_trip(self) -> None:
        meta = EventMetadata(request_id="r", user_agent="ua", ip_address="1.2.3.4", correlation_id="r-op")
        assert EventMetadata.from_dict(meta.to_dict()) == meta


class TestWireForm:
    def test_to_dict_keys(self) -> None:
        event = Event.order_created(_order(), EventMetadata(request_id="r-1"))
        data = event.to_dict()
        assert set(data) == {"id", "type", "aggregate_id", "user_id", "timestamp", "version", "data", "metadata"}
        assert data["type"] == "order.created"
        assert data["data"]["items"][0] == {"product": "Lamp", "quantity": 2, "price": 25.5}
        assert data["metadata"] == {"request_id": "r-1", "source": SERVICE_NAME}

    def test_json_keeps_cyrillic_status(self) -> None:
        event = Event.order_status_updated(
            "o-1", "u-1", "u-1", OrderStatus.CREATED, OrderStatus.CANCELLED, EventMetadata()
        )
        raw = event.to_json()
        assert "отменён" in raw
        assert json.loads(raw)["data"]["old_status"] == "создан"

    def test_from_json_restores_typed_payload(self) -> None:
        original = Event.order_created(_order(), EventMetadata(correlation_id="c"))
        restored = Event.from_json(original.to_json())
        assert restored == original
        assert isinstance(restored.payload, OrderCreatedPayload)

    def test_unknown_type_rejected(self) -> None:
        data = Event.order_created(_order(), EventMetadata()).to_dict()
        data["type"] = "order.deleted"
        with pytest.raises(SerializationError):
            Event.from_dict(data)

    def test_payload_not_matching_type_rejected(self) -> None:
        data = Event.order_created(_order(), EventMetadata()).to_dict()
        data["type"] = "order.status.updated"
        with pytest.raises(SerializationError) as info:
            Event.from_dict(data)
        assert info.value.payload_type == "OrderStatusUpdatedPayload"

    def test_invalid_item_rejected(self) -> None:
        data = Event.order_created(_order(), EventMetadata()).to_dict()
        data["data"]["items"][0]["quantity"] = 0
        with pytest.raises(SerializationError):
            Event.from_dict(data)

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]"])
    def test_malformed_json_rejected(self, raw: str) -> None:
        with pytest.raises(SerializationError):
            Event.from_json(raw)
