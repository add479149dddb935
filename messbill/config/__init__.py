"""Configuration package."""

from messbill.config.settings import (
    AppSettings,
    EmailRelaySettings,
    GoogleSheetsSettings,
    LocalStorageSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "EmailRelaySettings",
    "GoogleSheetsSettings",
    "LocalStorageSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
