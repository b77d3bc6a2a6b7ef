"""Application orders – order use cases."""
from mp_orders.application.orders.service import OrderService

__all__ = ["OrderService"]
