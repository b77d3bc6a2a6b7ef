"""Application-layer errors – caller identity and permissions."""

from __future__ import annotations

from typing import Any

from mp_orders.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class UnauthorizedError(ApplicationError):
    """Missing or malformed identity headers."""

    default_code = "unauthorized"


class ForbiddenError(ApplicationError):
    """The caller may not act on the requested order."""

    default_code = "forbidden"

    def __init__(
        self,
        message: str = "Access denied",
        *,
        permission: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.permission = permission


__all__ = [
    "ApplicationError",
    "ForbiddenError",
    "UnauthorizedError",
]
