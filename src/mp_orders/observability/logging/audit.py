"""Observability – AuditLogger and audit sinks.

A dedicated structured-log sink for the audit trail of order events.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from mp_orders.observability.logging.processors import get_logger


@runtime_checkable
class AuditSink(Protocol):
    """Port: durability-agnostic destination for audit records."""

    async def emit(self, record: dict[str, Any]) -> None: ...


class AuditLogger:
    """Audit sink that writes each record as one structured log line.

    All audit entries are emitted at ``WARNING`` level so they pass through
    even restrictive log-level filters.

    Parameters
    ----------
    service:
        Logical service name injected into every audit entry.
    logger:
        Underlying logger to use.  Defaults to a structlog logger named
        ``audit``; a stdlib :class:`logging.Logger` is accepted too.
    """

    def __init__(
        self,
        service: str = "unknown",
        logger: Any = None,
    ) -> None:
        self._service = service
        self._log = logger if logger is not None else get_logger("audit")

    async def emit(self, record: dict[str, Any]) -> None:
        self.log_event(record)

    def log_event(self, record: dict[str, Any]) -> None:
        """Record one audit entry.

        Parameters
        ----------
        record:
            Serialisable mapping; an ``event`` key, if present, becomes the
            log event name (default ``audit.event``).
        """
        entry = {"service": self._service, **record}
        event = str(entry.pop("event", "audit.event"))
        if isinstance(self._log, logging.Logger):
            msg = " ".join(f"{k}={v!r}" for k, v in entry.items())
            self._log.warning("%s %s", event, msg)
        else:
            self._log.warning(event, **entry)


class InMemoryAuditSink:
    """Fake AuditSink that keeps every record."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []

    async def emit(self, record: dict[str, Any]) -> None:
        self.records.append(record)

    def for_aggregate(self, aggregate_id: str) -> list[dict[str, Any]]:
        return [r for r in self.records if r.get("aggregate_id") == aggregate_id]


__all__ = ["AuditLogger", "AuditSink", "InMemoryAuditSink"]
