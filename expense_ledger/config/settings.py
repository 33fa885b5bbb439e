"""
Configuration Management for the Expense Ledger

Each concern gets its own pydantic-settings class, read from the
environment (with an optional .env file).

DESIGN DECISION: Sub-settings are built lazily by the root Settings.
The ledger runs on in-memory storage without any Google Sheets
variables set; only code that touches the sheet needs them.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets persistence backend configuration."""

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
    expenses_sheet_name: str = Field(
        default="Expenses",
        description="Name of the worksheet holding expenses"
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


class SessionSettings(BaseSettings):
    """Local session configuration (who may log in)."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Parsed from JSON, e.g. SESSION_USERS='{"me@example.com": "secret"}'
    users: dict[str, str] = Field(
        default_factory=dict,
        description="Email to password map accepted by the local session"
    )


class AppSettings(BaseSettings):
    """
    Ledger behaviour: budget, logging and store options.

    Unprefixed, e.g. MONTHLY_BUDGET=2500 or RESYNC_AFTER_WRITE=true.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False for human-readable console output)"
    )

    # Budget
    monthly_budget: Decimal = Field(
        default=Decimal("2000"),
        gt=0,
        description="Fixed monthly budget used by projections"
    )
    recent_expenses_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many expenses the 'recent' list shows"
    )

    # Store behaviour
    resync_after_write: bool = Field(
        default=False,
        description="Refetch the full collection after every committed write"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Hands out sub-settings on demand.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # A missing section only fails when it is first read

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def session(self) -> SessionSettings:
        return SessionSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings.

    Cached after the first call; get_settings.cache_clear() forces a reload.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try to build every settings section.

    Returns a dict of {setting_name: is_valid}, with a
    `<name>_error` entry for each section that failed.
    Meant for a startup check before the app is wired.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "session", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
