"""Order aggregate, line items and status lifecycle."""

from __future__ import annotations

import dataclasses
import enum
import uuid
from datetime import datetime
from typing import Any, Iterable, Mapping

from mp_orders.kernel.errors import ValidationError
from mp_orders.kernel.time import Clock, SystemClock


class OrderStatus(str, enum.Enum):
    """Order lifecycle states; values are the wire representation."""

    CREATED = "создан"
    IN_PROGRESS = "в работе"
    COMPLETED = "выполнен"
    CANCELLED = "отменён"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @classmethod
    def parse(cls, value: "str | OrderStatus") -> "OrderStatus":
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError(
                f"Invalid order status {value!r}; expected one of: {allowed}",
                errors=[{"field": "status", "value": str(value)}],
            ) from exc


@dataclasses.dataclass(frozen=True, slots=True)
class OrderItem:
    """Immutable order line: product, quantity and unit price."""

    product: str
    quantity: int
    price: float

    def __post_init__(self) -> None:
        if not self.product:
            raise ValidationError("Order item product is required")
        if self.quantity < 1:
            raise ValidationError(f"Order item quantity must be >= 1, got {self.quantity}")
        if self.price < 0:
            raise ValidationError(f"Order item price must be >= 0, got {self.price}")

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {"product": self.product, "quantity": self.quantity, "price": self.price}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderItem":
        return cls(
            product=str(data["product"]),
            quantity=int(data["quantity"]),
            price=float(data["price"]),
        )


def calculate_total(items: Iterable[OrderItem]) -> float:
    """Sum of ``price * quantity`` over *items*, rounded to cents."""
    return round(sum(item.subtotal for item in items), 2)


@dataclasses.dataclass
class Order:
    """Order aggregate root. Identity is ``id``; ``status`` moves forward only."""

    id: str
    user_id: str
    items: tuple[OrderItem, ...]
    status: OrderStatus
    total_sum: float
    created_at: datetime
    updated_at: datetime

    @classmethod
    def new(
        cls,
        user_id: str,
        items: Iterable[OrderItem],
        clock: Clock | None = None,
    ) -> "Order":
        lines = tuple(items)
        if not lines:
            raise ValidationError("An order needs at least one item")
        now = (clock or SystemClock()).now()
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            items=lines,
            status=OrderStatus.CREATED,
            total_sum=calculate_total(lines),
            created_at=now,
            updated_at=now,
        )

    def can_be_updated(self) -> bool:
        return self.status in (OrderStatus.CREATED, OrderStatus.IN_PROGRESS)

    def can_be_cancelled(self) -> bool:
        return self.status in (OrderStatus.CREATED, OrderStatus.IN_PROGRESS)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "status": self.status.value,
            "total_sum": self.total_sum,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


__all__ = ["Order", "OrderItem", "OrderStatus", "calculate_total"]
