"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── ValidationError
    │   └── NotFoundError
    ├── ApplicationError     (application.py)
    │   ├── UnauthorizedError
    │   └── ForbiddenError
    ├── InfrastructureError  (infrastructure.py)
    │   ├── SerializationError
    │   └── PersistenceError
    └── EventBusError        (messaging.py)
        ├── QueueFullError
        ├── BusClosedError
        ├── CallerCancelledError
        ├── SubscriptionError
        ├── HandlerError
        └── BrokerNotImplementedError
"""

from mp_orders.kernel.errors.application import (
    ApplicationError,
    ForbiddenError,
    UnauthorizedError,
)
from mp_orders.kernel.errors.base import BaseError
from mp_orders.kernel.errors.domain import (
    DomainError,
    NotFoundError,
    ValidationError,
)
from mp_orders.kernel.errors.infrastructure import (
    InfrastructureError,
    PersistenceError,
    SerializationError,
)
from mp_orders.kernel.errors.messaging import (
    BrokerNotImplementedError,
    BusClosedError,
    CallerCancelledError,
    EventBusError,
    HandlerError,
    QueueFullError,
    SubscriptionError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "BrokerNotImplementedError",
    "BusClosedError",
    "CallerCancelledError",
    "DomainError",
    "EventBusError",
    "ForbiddenError",
    "HandlerError",
    "InfrastructureError",
    "NotFoundError",
    "PersistenceError",
    "QueueFullError",
    "SerializationError",
    "SubscriptionError",
    "UnauthorizedError",
    "ValidationError",
]
