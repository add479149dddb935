"""
Configuration Management for the Mess Bill Calculator

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocalStorageSettings(BaseSettings):
    """Local key-value storage (one JSON file per key)."""

    model_config = SettingsConfigDict(
        env_prefix="MESS_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default="~/.messbill",
        description="Directory holding the JSON files"
    )
    members_key: str = Field(
        default="hostel-members",
        description="Key (file stem) for the current member list"
    )
    history_key: str = Field(
        default="calculation-history",
        description="Key (file stem) for the bounded history log"
    )

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    members_sheet_name: str = Field(default="Members")
    history_sheet_name: str = Field(default="History")
    audit_sheet_name: str = Field(default="AuditLog")

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class EmailRelaySettings(BaseSettings):
    """Email relay (SMTP2GO HTTP API) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    sender_email: Optional[str] = Field(
        default=None,
        description="Address bills are sent from"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Relay API key"
    )
    endpoint: str = Field(
        default="https://api.smtp2go.com/v3/email/send",
        description="Relay send endpoint"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
    )
    signature: str = Field(
        default="Santiniketan Mess Management",
        description="Closing line of every bill email"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.sender_email and self.api_key)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    mess_name: str = Field(
        default="Santiniketan Mess",
        description="Name shown in the UI header"
    )
    storage_backend: str = Field(
        default="local",
        pattern="^(local|google_sheets)$",
        description="Where members and history are persisted"
    )

    # History
    history_capacity: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many calculations the history log keeps"
    )

    # Validation thresholds
    max_reasonable_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Deposits or fines above this are flagged for review"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def local_storage(self) -> LocalStorageSettings:
        return LocalStorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def email_relay(self) -> EmailRelaySettings:
        return EmailRelaySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for the settings page in the UI.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.local_storage
        results["local_storage"] = True
    except Exception as e:
        results["local_storage"] = False
        results["local_storage_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        relay = settings.email_relay
        results["email_relay"] = relay.is_configured
        if not relay.is_configured:
            results["email_relay_error"] = "Sender email or API key missing"
    except Exception as e:
        results["email_relay"] = False
        results["email_relay_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
