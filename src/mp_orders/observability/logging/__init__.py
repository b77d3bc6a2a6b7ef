"""Observability – structured logging setup, helpers and audit sinks."""
from mp_orders.observability.logging.audit import AuditLogger, AuditSink, InMemoryAuditSink
from mp_orders.observability.logging.factory import JsonLoggerFactory
from mp_orders.observability.logging.processors import get_logger

__all__ = [
    "AuditLogger",
    "AuditSink",
    "InMemoryAuditSink",
    "JsonLoggerFactory",
    "get_logger",
]
