"""Configuration package."""

from stipend_tracker.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    LedgerSettings,
    MindeeSettings,
    RecommendationSettings,
    ReportSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "LedgerSettings",
    "MindeeSettings",
    "RecommendationSettings",
    "ReportSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
