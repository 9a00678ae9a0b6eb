"""
Configuration Management for Stipend Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.

Note that the stipend amount and the display name are NOT configuration.
They are user data and live in the ledger's key-value store.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MindeeSettings(BaseSettings):
    """Mindee OCR service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MINDEE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Mindee API key"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets key-value storage configuration."""

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
    ledger_sheet_name: str = Field(
        default="Ledger",
        description="Name of the sheet holding one row per stored key"
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
    """Where and how the ledger is persisted."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_backend: Literal["memory", "json_file", "google_sheets"] = Field(
        default="json_file",
        description="Key-value backend used to persist the ledger"
    )
    data_file: Path = Field(
        default=Path("stipend_tracker_data.json"),
        description="File used by the json_file backend"
    )
    key_prefix: str = Field(
        default="stipend_tracker",
        description="Prefix for every storage key"
    )
    goal_match_by_name: bool = Field(
        default=True,
        description=(
            "Count Savings transactions without an explicit goal link toward a goal "
            "when the description contains the goal name"
        )
    )


class RecommendationSettings(BaseSettings):
    """Thresholds used by the recommendation rules."""

    model_config = SettingsConfigDict(
        env_prefix="RECOMMENDATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    budget_alert_ratio: Decimal = Field(
        default=Decimal("0.9"),
        gt=0,
        description="Warn once expenses exceed this share of the stipend"
    )
    food_concentration_ratio: Decimal = Field(
        default=Decimal("0.4"),
        gt=0,
        description="Food spend above this share of the stipend triggers a tip"
    )
    weekly_food_budget_factor: Decimal = Field(
        default=Decimal("0.7"),
        gt=0,
        le=1,
        description="Suggested weekly food budget as a share of a quarter of current food spend"
    )
    receipt_coverage_ratio: Decimal = Field(
        default=Decimal("0.5"),
        ge=0,
        le=1,
        description="Minimum share of transactions that should carry a receipt"
    )
    savings_suggestion_cap: Decimal = Field(
        default=Decimal("20"),
        gt=0,
        description="Largest amount suggested for a first savings transfer"
    )
    workshop_target: int = Field(
        default=3,
        ge=0,
        description="Workshops a user should attend before the reminder stops"
    )


class ReportSettings(BaseSettings):
    """Export and report formatting."""

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(default="$", max_length=5)
    recent_transactions: int = Field(
        default=20,
        ge=1,
        le=500,
        description="How many of the newest transactions go into the document report"
    )
    title: str = Field(
        default="Financial Wellness Tracker",
        description="Product name printed in report headers"
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

    # Receipt extraction
    extraction_backend: Literal["simulated", "mindee"] = Field(
        default="simulated",
        description="Which receipt extractor the pipeline uses"
    )
    simulated_extraction_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=30.0,
        description="Artificial latency of the simulated extractor"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum upload file size in MB"
    )

    # Analytics
    trend_window_days: int = Field(
        default=7,
        ge=1,
        le=366,
        description="Length of the trailing daily series"
    )
    top_categories_limit: int = Field(
        default=3,
        ge=1,
        description="How many categories the top-spending list shows"
    )

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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
    def mindee(self) -> MindeeSettings:
        return MindeeSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def recommendations(self) -> RecommendationSettings:
        return RecommendationSettings()

    @property
    def reports(self) -> ReportSettings:
        return ReportSettings()

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
    "<name>_error" entry for every section that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = ("mindee", "google_sheets", "ledger", "recommendations", "reports", "app")
    for name in sections:
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
