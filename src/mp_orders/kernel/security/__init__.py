"""Kernel security – caller identity."""
from mp_orders.kernel.security.user_context import ADMIN_ROLE, UserContext

__all__ = ["ADMIN_ROLE", "UserContext"]
