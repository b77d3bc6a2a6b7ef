"""Run the orders service: ``python -m mp_orders``."""
from __future__ import annotations

import logging

import uvicorn

from mp_orders.adapters.fastapi import create_app
from mp_orders.config import load_settings
from mp_orders.observability.logging import JsonLoggerFactory

logger = logging.getLogger("mp_orders")


def main() -> None:
    settings = load_settings()
    JsonLoggerFactory.configure(
        level=settings.log_level,
        renderer=JsonLoggerFactory.renderer_for(settings.environment),
    )
    app = create_app(settings)
    logger.info("service.listening host=%s port=%d", settings.server_host, settings.server_port)
    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown before exiting
    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_config=None)


if __name__ == "__main__":
    main()
