"""Order domain – aggregate, statuses and repository port."""
from mp_orders.kernel.orders.order import Order, OrderItem, OrderStatus, calculate_total
from mp_orders.kernel.orders.repository import (
    MAX_PAGE_SIZE,
    InMemoryOrderRepository,
    ListOrdersQuery,
    OrderPage,
    OrderRepository,
)

__all__ = [
    "InMemoryOrderRepository",
    "ListOrdersQuery",
    "MAX_PAGE_SIZE",
    "Order",
    "OrderItem",
    "OrderPage",
    "OrderRepository",
    "OrderStatus",
    "calculate_total",
]
