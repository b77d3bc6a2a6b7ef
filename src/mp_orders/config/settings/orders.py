"""Config settings – OrdersSettings and the default loading chain."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any

from mp_orders.config.settings.base import Settings
from mp_orders.config.settings.factory import SettingsFactory
from mp_orders.config.settings.loaders import DotenvSettingsLoader
from mp_orders.config.validation import InvalidSettingValueError

EVENT_BUS_BACKENDS = ("memory", "kafka")
ENVIRONMENTS = ("development", "test", "staging", "production")


@dataclasses.dataclass
class OrdersSettings(Settings):
    """Settings of the orders service.

    ``DATABASE_URL`` wins when set; otherwise the URL is assembled from the
    ``DB_*`` variables for the asyncpg driver.
    """

    environment: str = "development"
    server_host: str = "0.0.0.0"
    server_port: int = 8082
    log_level: str = "INFO"

    database_url: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "system_control"
    db_user: str = "postgres"
    db_password: str = "postgres"

    event_bus_backend: str = "memory"
    event_queue_capacity: int = 100
    kafka_brokers: list[str] = dataclasses.field(default_factory=lambda: ["localhost:9092"])
    kafka_topic: str = "orders.events"

    def _validate(self) -> None:
        self.environment = self.environment.lower()
        self.event_bus_backend = self.event_bus_backend.lower()
        self.log_level = self.log_level.upper()

        if self.environment not in ENVIRONMENTS:
            raise InvalidSettingValueError(
                "ENVIRONMENT", self.environment, f"expected one of {', '.join(ENVIRONMENTS)}"
            )
        if not 0 < self.server_port < 65536:
            raise InvalidSettingValueError("SERVER_PORT", self.server_port, "out of range")
        if self.event_bus_backend not in EVENT_BUS_BACKENDS:
            raise InvalidSettingValueError(
                "EVENT_BUS_BACKEND",
                self.event_bus_backend,
                f"expected one of {', '.join(EVENT_BUS_BACKENDS)}",
            )
        if self.event_queue_capacity < 1:
            raise InvalidSettingValueError(
                "EVENT_QUEUE_CAPACITY", self.event_queue_capacity, "must be >= 1"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InvalidSettingValueError("LOG_LEVEL", self.log_level, "unknown level")

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings(env_file: str = ".env", **overrides: Any) -> OrdersSettings:
    """Read ``.env`` (if present) and the environment into :class:`OrdersSettings`."""
    return SettingsFactory.create(
        OrdersSettings,
        loaders=[DotenvSettingsLoader(env_file)],
        overrides=overrides or None,
    )


__all__ = ["ENVIRONMENTS", "EVENT_BUS_BACKENDS", "OrdersSettings", "load_settings"]
