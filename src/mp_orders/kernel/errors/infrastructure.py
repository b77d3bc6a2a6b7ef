"""Infrastructure errors – I/O failures, wire-format problems."""

from __future__ import annotations

from typing import Any

from mp_orders.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize a payload."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


class PersistenceError(InfrastructureError):
    """The order store rejected or failed an operation."""

    default_code = "persistence_error"


__all__ = [
    "InfrastructureError",
    "PersistenceError",
    "SerializationError",
]
