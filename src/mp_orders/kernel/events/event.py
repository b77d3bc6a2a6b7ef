"""Order domain events and their payload variants.

An :class:`Event` is immutable once built.  Its ``payload`` is one of the
variants in :data:`PAYLOAD_TYPES`, chosen by ``type``; the pairing is checked
at construction and decoded exactly once when an event is read back from its
JSON form, so handlers always receive a typed payload.

Example::

    event = Event.order_created(order, EventMetadata(source=SERVICE_NAME))
    assert isinstance(event.payload, OrderCreatedPayload)
"""

from __future__ import annotations

import dataclasses
import enum
import json
from datetime import datetime
from typing import Any, Mapping, Union
from uuid import uuid4

from mp_orders.kernel.errors import SerializationError, ValidationError
from mp_orders.kernel.orders import Order, OrderItem, OrderStatus
from mp_orders.kernel.time import utc_now

SERVICE_NAME = "service_orders"
SCHEMA_VERSION = 1


class EventType(str, enum.Enum):
    ORDER_CREATED = "order.created"
    ORDER_STATUS_UPDATED = "order.status.updated"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, "Неизвестное событие")


_DISPLAY_NAMES: dict[EventType, str] = {
    EventType.ORDER_CREATED: "Заказ создан",
    EventType.ORDER_STATUS_UPDATED: "Статус заказа обновлен",
}


@dataclasses.dataclass(frozen=True)
class EventMetadata:
    """Tracing context captured from the request that caused the event."""

    source: str = SERVICE_NAME
    request_id: str = ""
    user_agent: str = ""
    ip_address: str = ""
    correlation_id: str = ""

    def to_dict(self) -> dict[str, str]:
        # empty optional fields are omitted from the wire form
        data = {
            "request_id": self.request_id,
            "user_agent": self.user_agent,
            "ip_address": self.ip_address,
            "source": self.source,
            "correlation_id": self.correlation_id,
        }
        return {k: v for k, v in data.items() if v or k == "source"}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventMetadata":
        return cls(
            source=str(data.get("source", SERVICE_NAME)),
            request_id=str(data.get("request_id", "")),
            user_agent=str(data.get("user_agent", "")),
            ip_address=str(data.get("ip_address", "")),
            correlation_id=str(data.get("correlation_id", "")),
        )


@dataclasses.dataclass(frozen=True)
class OrderCreatedPayload:
    order_id: str
    user_id: str
    items: tuple[OrderItem, ...]
    total_sum: float
    status: OrderStatus
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "user_id": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "total_sum": self.total_sum,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderCreatedPayload":
        return cls(
            order_id=str(data["order_id"]),
            user_id=str(data["user_id"]),
            items=tuple(OrderItem.from_dict(i) for i in data["items"]),
            total_sum=float(data["total_sum"]),
            status=OrderStatus(data["status"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclasses.dataclass(frozen=True)
class OrderStatusUpdatedPayload:
    order_id: str
    user_id: str
    old_status: OrderStatus
    new_status: OrderStatus
    updated_at: datetime
    updated_by: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "user_id": self.user_id,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "updated_at": self.updated_at.isoformat(),
            "updated_by": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderStatusUpdatedPayload":
        return cls(
            order_id=str(data["order_id"]),
            user_id=str(data["user_id"]),
            old_status=OrderStatus(data["old_status"]),
            new_status=OrderStatus(data["new_status"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            updated_by=str(data["updated_by"]),
        )


Payload = Union[OrderCreatedPayload, OrderStatusUpdatedPayload]

#: The payload variant each event type carries.
PAYLOAD_TYPES: dict[EventType, type[OrderCreatedPayload] | type[OrderStatusUpdatedPayload]] = {
    EventType.ORDER_CREATED: OrderCreatedPayload,
    EventType.ORDER_STATUS_UPDATED: OrderStatusUpdatedPayload,
}


@dataclasses.dataclass(frozen=True)
class Event:
    """Immutable record of something that happened to an order."""

    type: EventType
    aggregate_id: str
    actor_id: str
    payload: Payload
    metadata: EventMetadata = dataclasses.field(default_factory=EventMetadata)
    id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = dataclasses.field(default_factory=utc_now)
    schema_version: int = SCHEMA_VERSION

    def __post_init__(self) -> None:
        expected = PAYLOAD_TYPES.get(self.type)
        if expected is None:
            raise ValidationError(f"Unknown event type {self.type!r}")
        if not isinstance(self.payload, expected):
            raise ValidationError(
                f"{self.type.value} expects {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def order_created(cls, order: Order, metadata: EventMetadata) -> "Event":
        return cls(
            type=EventType.ORDER_CREATED,
            aggregate_id=order.id,
            actor_id=order.user_id,
            payload=OrderCreatedPayload(
                order_id=order.id,
                user_id=order.user_id,
                items=tuple(order.items),
                total_sum=order.total_sum,
                status=order.status,
                created_at=order.created_at,
            ),
            metadata=metadata,
        )

    @classmethod
    def order_status_updated(
        cls,
        order_id: str,
        owner_id: str,
        updated_by: str,
        old_status: OrderStatus,
        new_status: OrderStatus,
        metadata: EventMetadata,
    ) -> "Event":
        now = utc_now()
        return cls(
            type=EventType.ORDER_STATUS_UPDATED,
            aggregate_id=order_id,
            actor_id=owner_id,
            payload=OrderStatusUpdatedPayload(
                order_id=order_id,
                user_id=owner_id,
                old_status=old_status,
                new_status=new_status,
                updated_at=now,
                updated_by=updated_by,
            ),
            metadata=metadata,
            timestamp=now,
        )

    # ------------------------------------------------------------------
    # Wire form
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "aggregate_id": self.aggregate_id,
            "user_id": self.actor_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.schema_version,
            "data": self.payload.to_dict(),
            "metadata": self.metadata.to_dict(),
        }

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        """Rebuild an event, decoding ``data`` into its typed payload variant.

        Raises
        ------
        SerializationError
            When the type is unknown or the payload does not fit the variant
            registered for it.
        """
        raw_type = data.get("type")
        try:
            event_type = EventType(raw_type)
        except ValueError as exc:
            raise SerializationError(
                f"Unknown event type {raw_type!r}", payload_type=str(raw_type), cause=exc
            ) from exc

        payload_cls = PAYLOAD_TYPES[event_type]
        try:
            payload = payload_cls.from_dict(data["data"])
            return cls(
                type=event_type,
                aggregate_id=str(data["aggregate_id"]),
                actor_id=str(data["user_id"]),
                payload=payload,
                metadata=EventMetadata.from_dict(data.get("metadata") or {}),
                id=str(data["id"]),
                timestamp=datetime.fromisoformat(data["timestamp"]),
                schema_version=int(data.get("version", SCHEMA_VERSION)),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise SerializationError(
                f"Cannot decode {event_type.value} event: {exc}",
                payload_type=payload_cls.__name__,
                cause=exc,
            ) from exc

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Event":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"Malformed event JSON: {exc.msg}", cause=exc) from exc
        if not isinstance(data, dict):
            raise SerializationError("Event JSON must be an object")
        return cls.from_dict(data)


__all__ = [
    "Event",
    "EventMetadata",
    "EventType",
    "OrderCreatedPayload",
    "OrderStatusUpdatedPayload",
    "PAYLOAD_TYPES",
    "Payload",
    "SCHEMA_VERSION",
    "SERVICE_NAME",
]
