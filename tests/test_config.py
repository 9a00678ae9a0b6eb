"""Tests for settings loading."""

import pytest
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError as SchemaError

from stipend_tracker.config import (
    AppSettings,
    LedgerSettings,
    MindeeSettings,
    RecommendationSettings,
    ReportSettings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the pydantic-settings sections."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LEDGER_STORAGE_BACKEND", raising=False)
        ledger = LedgerSettings(_env_file=None)
        assert ledger.storage_backend == "json_file"
        assert ledger.data_file == Path("stipend_tracker_data.json")
        assert ledger.goal_match_by_name is True

        app = AppSettings(_env_file=None)
        assert app.max_upload_size_bytes == 10 * 1024 * 1024
        assert app.trend_window_days == 7

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("RECOMMENDATION_BUDGET_ALERT_RATIO", "0.75")
        assert LedgerSettings(_env_file=None).storage_backend == "memory"
        assert RecommendationSettings().budget_alert_ratio == Decimal("0.75")

    def test_every_section_reads_dotenv(self, tmp_path, monkeypatch):
        """Values placed in .env reach every settings section."""
        for name in (
            "RECOMMENDATION_WORKSHOP_TARGET",
            "REPORT_CURRENCY_SYMBOL",
            "MINDEE_API_KEY",
            "TREND_WINDOW_DAYS",
        ):
            monkeypatch.delenv(name, raising=False)
        (tmp_path / ".env").write_text(
            "RECOMMENDATION_WORKSHOP_TARGET=1\n"
            "REPORT_CURRENCY_SYMBOL=EUR\n"
            "MINDEE_API_KEY=from-dotenv\n"
            "TREND_WINDOW_DAYS=10\n",
            encoding="utf-8",
        )
        monkeypatch.chdir(tmp_path)

        assert RecommendationSettings().workshop_target == 1
        assert ReportSettings().currency_symbol == "EUR"
        assert MindeeSettings().api_key == "from-dotenv"
        assert AppSettings().trend_window_days == 10

    def test_invalid_values_rejected(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "postgres")
        with pytest.raises(SchemaError):
            LedgerSettings(_env_file=None)

    def test_validate_all_settings_reports_missing_sections(self, monkeypatch):
        """Optional integrations may be unconfigured without breaking the rest."""
        monkeypatch.delenv("MINDEE_API_KEY", raising=False)
        results = validate_all_settings()
        assert results["ledger"] is True
        assert results["app"] is True
        assert results["mindee"] is False
        assert "mindee_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
