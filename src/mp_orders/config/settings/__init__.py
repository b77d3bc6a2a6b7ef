"""Config settings – 12-factor env-based configuration."""
from mp_orders.config.settings.base import Settings
from mp_orders.config.settings.factory import SettingsFactory
from mp_orders.config.settings.loaders import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    SettingsLoader,
)
from mp_orders.config.settings.orders import OrdersSettings, load_settings

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "OrdersSettings",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
    "load_settings",
]
