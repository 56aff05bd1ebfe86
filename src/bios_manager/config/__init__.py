"""Configuration helpers for the BIOS manager."""

from .settings import (
    APP_NAME,
    DEFAULT_NETWORK_LIBRARY,
    DEFAULT_ODBC_DRIVER,
    Settings,
    SettingsManager,
)

__all__ = [
    "APP_NAME",
    "DEFAULT_NETWORK_LIBRARY",
    "DEFAULT_ODBC_DRIVER",
    "Settings",
    "SettingsManager",
]
