"""SQLAlchemy ORM models for the ``users`` and ``orders`` tables."""
from __future__ import annotations

import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Numeric, String, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from mp_orders.kernel.orders import OrderStatus


class OrdersBase(DeclarativeBase):
    pass


class TimestampMixin:
    """``created_at`` / ``updated_at`` columns defaulting to the database clock."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UserModel(TimestampMixin, OrdersBase):
    """Owned by the users service; read here only to check that a user exists."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))


class OrderModel(TimestampMixin, OrdersBase):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"))
    status: Mapped[OrderStatus] = mapped_column(
        Enum(
            OrderStatus,
            name="order_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.CREATED,
        index=True,
    )
    total_sum: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0.0)


__all__ = ["OrderModel", "OrdersBase", "TimestampMixin", "UserModel"]
