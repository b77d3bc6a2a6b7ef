"""FastAPI adapter – request bodies and the response envelope."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from mp_orders.kernel.orders import OrderItem


class OrderItemIn(BaseModel):
    product: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

    def to_domain(self) -> OrderItem:
        return OrderItem(product=self.product, quantity=self.quantity, price=self.price)


class CreateOrderRequest(BaseModel):
    items: list[OrderItemIn] = Field(min_length=1)


class UpdateStatusRequest(BaseModel):
    status: str


def success_response(data: Any) -> dict[str, Any]:
    """``{"success": true, "data": ...}``"""
    return {"success": True, "data": data}


def error_response(code: str, message: str) -> dict[str, Any]:
    """``{"success": false, "error": {"code": ..., "message": ...}}``"""
    return {"success": False, "error": {"code": code, "message": message}}


__all__ = [
    "CreateOrderRequest",
    "OrderItemIn",
    "UpdateStatusRequest",
    "error_response",
    "success_response",
]
