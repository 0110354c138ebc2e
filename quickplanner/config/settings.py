"""
Configuration Management for QuickPlanner

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Planner quotas, import formats and storage locations are all validated
at startup instead of being scattered through the code as literals.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlannerSettings(BaseSettings):
    """Meal planning configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PLANNER_",
        extra="ignore"
    )

    days_per_plan: int = Field(
        default=7,
        ge=1,
        le=31,
        description="Number of days in a generated plan"
    )

    # Weekly balance used by the quota-based recommendation pass
    max_quick_meals_per_week: int = Field(
        default=3,
        ge=0,
        description="Upper bound of quick meals when balancing a week"
    )
    max_medium_meals_per_week: int = Field(
        default=3,
        ge=0,
        description="Upper bound of medium meals when balancing a week"
    )
    min_long_meals_per_week: int = Field(
        default=1,
        ge=0,
        description="Long meals to place before anything else when balancing a week"
    )

    recipe_file_extension: str = Field(
        default="html",
        description="Extension of recipe documents in the recipe directory"
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for recipe selection (unset = non-deterministic)"
    )

    @field_validator('recipe_file_extension')
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Store the extension lowercase and without a leading dot."""
        return v.strip().lstrip(".").lower()


class ImportSettings(BaseSettings):
    """Transaction import configuration."""

    model_config = SettingsConfigDict(
        env_prefix="IMPORT_",
        extra="ignore"
    )

    csv_date_format: str = Field(
        default="%d/%m/%Y",
        description="strptime format of the Date column"
    )
    currency_code: str = Field(
        default="CAD",
        min_length=3,
        max_length=3,
        description="Currency used when formatting amounts"
    )


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".quickplanner",
        description="Directory holding the JSON documents"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a document write before giving up"
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
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def planner(self) -> PlannerSettings:
        return PlannerSettings()

    @property
    def imports(self) -> ImportSettings:
        return ImportSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` entry for every section that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("planner", "imports", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
