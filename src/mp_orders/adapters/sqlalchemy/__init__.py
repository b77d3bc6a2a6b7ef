"""SQLAlchemy adapter – session factory, ORM models, order repository."""
from mp_orders.adapters.sqlalchemy.models import OrderModel, OrdersBase, UserModel
from mp_orders.adapters.sqlalchemy.repository import SqlAlchemyOrderRepository
from mp_orders.adapters.sqlalchemy.session import SqlAlchemySessionFactory

__all__ = [
    "OrderModel",
    "OrdersBase",
    "SqlAlchemyOrderRepository",
    "SqlAlchemySessionFactory",
    "UserModel",
]
