"""Observability – JsonLoggerFactory."""
from __future__ import annotations

import logging
from typing import Any, Literal

import structlog

Renderer = Literal["json", "console"]


class JsonLoggerFactory:
    """Configure structlog and route stdlib ``logging`` through it.

    Modules keep logging with ``logging.getLogger(__name__)``; their records
    are rendered by the same processor chain as structlog loggers, so
    request-scoped context bound with
    :func:`structlog.contextvars.bind_contextvars` (``request_id``,
    ``user_id``…) shows up on every line.
    """

    @staticmethod
    def configure(level: int | str = logging.INFO, renderer: Renderer = "json") -> None:
        shared_processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.StackInfoRenderer(),
        ]

        structlog.configure(
            processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        final: Any = (
            structlog.processors.JSONRenderer(ensure_ascii=False)
            if renderer == "json"
            else structlog.dev.ConsoleRenderer()
        )
        formatter = structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                final,
            ],
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(level)

    @staticmethod
    def renderer_for(environment: str) -> Renderer:
        """JSON lines in production, coloured console output elsewhere."""
        return "json" if environment == "production" else "console"


__all__ = ["JsonLoggerFactory", "Renderer"]
