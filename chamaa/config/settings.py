"""
Configuration Management for Chamaa Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which storage backend and business rules are
active, and ensures configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
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

    # One worksheet per collection
    admins_sheet_name: str = Field(
        default="Admins",
        description="Name of the sheet for admins"
    )
    groups_sheet_name: str = Field(
        default="Groups",
        description="Name of the sheet for groups"
    )
    members_sheet_name: str = Field(
        default="Members",
        description="Name of the sheet for members"
    )
    contributions_sheet_name: str = Field(
        default="Contributions",
        description="Name of the sheet for contributions"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

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


class LedgerSettings(BaseSettings):
    """Storage backend selection and ledger business rules."""

    model_config = SettingsConfigDict(
        env_prefix="CHAMAA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Where entities are kept"
    )

    # Default admin seeded at startup
    seed_default_admin: bool = Field(
        default=True,
        description="Create the default admin when the app starts"
    )
    default_admin_name: str = Field(
        default="Default Admin",
        min_length=1,
    )
    default_admin_email: str = Field(
        default="admin@chamaa.local",
        min_length=1,
    )
    default_admin_id: Optional[str] = Field(
        default=None,
        description=(
            "Fixed id for the seeded admin. Without it every start "
            "creates a new admin with a fresh id."
        )
    )

    # Business rules
    require_membership_for_contribution: bool = Field(
        default=False,
        description="Reject contributions from members outside the group"
    )
    empty_list_as_error: bool = Field(
        default=False,
        description="Report empty list results as EmptyResultError"
    )


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
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)


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
    # (Google Sheets credentials are only needed for that backend)

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
