"""Kernel security – UserContext built from gateway identity headers.

The API gateway authenticates the caller and forwards the identity as
``X-User-ID`` / ``X-User-Email`` / ``X-User-Roles``; the orders service
trusts those headers and never sees the token itself.
"""
from __future__ import annotations

import dataclasses
import uuid
from typing import Mapping

from mp_orders.kernel.errors import ForbiddenError, UnauthorizedError

ADMIN_ROLE = "admin"


@dataclasses.dataclass(frozen=True)
class UserContext:
    """Authenticated caller as asserted by the gateway."""

    user_id: str
    email: str
    roles: frozenset[str] = frozenset()

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "UserContext":
        """Parse identity headers (matched case-insensitively).

        Raises
        ------
        UnauthorizedError
            When ``X-User-ID`` is missing or not a UUID, or ``X-User-Email``
            is missing.
        """
        norm = {k.lower(): v for k, v in headers.items()}

        raw_id = norm.get("x-user-id", "").strip()
        if not raw_id:
            raise UnauthorizedError("Missing X-User-ID header")
        try:
            user_id = str(uuid.UUID(raw_id))
        except ValueError as exc:
            raise UnauthorizedError(f"Malformed X-User-ID header: {raw_id!r}", cause=exc) from exc

        email = norm.get("x-user-email", "").strip()
        if not email:
            raise UnauthorizedError("Missing X-User-Email header")

        roles = frozenset(
            r.strip() for r in norm.get("x-user-roles", "").split(",") if r.strip()
        )
        return cls(user_id=user_id, email=email, roles=roles)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(ADMIN_ROLE)

    def ensure_can_access(self, owner_id: str) -> None:
        """Admins may act on any order; everyone else only on their own."""
        if self.is_admin:
            return
        if self.user_id != owner_id:
            raise ForbiddenError("Insufficient permissions to access this order")


__all__ = ["ADMIN_ROLE", "UserContext"]
