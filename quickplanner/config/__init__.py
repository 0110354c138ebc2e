"""Configuration package."""

from quickplanner.config.settings import (
    AppSettings,
    ImportSettings,
    PlannerSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ImportSettings",
    "PlannerSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
