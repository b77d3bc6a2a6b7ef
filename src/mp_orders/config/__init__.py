"""Config – environment-driven service settings."""
from mp_orders.config.settings import OrdersSettings, SettingsFactory, load_settings
from mp_orders.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "OrdersSettings",
    "SettingsFactory",
    "load_settings",
]
