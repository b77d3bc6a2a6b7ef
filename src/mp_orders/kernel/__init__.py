"""Kernel – framework-agnostic order domain and event building blocks."""

from mp_orders.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    EventBusError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "EventBusError",
    "ForbiddenError",
    "InfrastructureError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
]
