"""
Configuration Management for PaisaPal

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every knob the app exposes (where the snapshot lives, the mood list,
the backfill cap) can be read from one place and is validated before
the first session starts.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SNAPSHOT_PATH = Path.home() / ".paisapal" / "paisa-pal-v1.json"


class StorageSettings(BaseSettings):
    """On-device snapshot storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PAISAPAL_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    snapshot_path: Path = Field(
        default=DEFAULT_SNAPSHOT_PATH,
        description="Path of the JSON file holding the application snapshot"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed snapshot write is attempted"
    )

    @field_validator('snapshot_path')
    @classmethod
    def expand_snapshot_path(cls, v: Path) -> Path:
        """Allow ~ in the configured path."""
        return v.expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAISAPAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level for the structured activity log"
    )

    # Tagging
    moods: str = Field(
        default="Happy,Stressed,Bored,Excited,Neutral",
        description="Comma-separated list of moods offered for tagging"
    )

    # Display
    currency_symbol: str = Field(
        default="£",
        description="Currency symbol used when formatting amounts"
    )
    month_window: int = Field(
        default=6,
        ge=0,
        le=24,
        description="How many months before and after today the month picker offers"
    )

    # Recurrence
    max_backfill_occurrences: int = Field(
        default=3660,
        ge=1,
        description="Maximum occurrences materialized per saved item in one run"
    )

    # Export
    csv_sanitize_all_fields: bool = Field(
        default=False,
        description="Replace commas in category and mood too, not only in description"
    )

    @property
    def moods_list(self) -> list[str]:
        """Get moods as a list."""
        return _split_csv_setting(self.moods)


def _split_csv_setting(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
