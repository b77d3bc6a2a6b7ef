"""Observability – request correlation."""
from mp_orders.observability.correlation.context import RequestContext

__all__ = ["RequestContext"]
