"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from expense_tracker.config import AppSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No stray .env file or EXPENSE_TRACKER_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in [
        "EXPENSE_TRACKER_STORAGE_BACKEND",
        "EXPENSE_TRACKER_LOG_LEVEL",
        "EXPENSE_TRACKER_DATA_DIR",
        "EXPENSE_TRACKER_SEED_SAMPLE_DATA",
        "EXPENSE_TRACKER_RECENT_EXPENSES_LIMIT",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.storage_backend == "json"
        assert settings.data_dir == Path("data")
        assert settings.seed_sample_data is True
        assert settings.recent_expenses_limit == 5
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("EXPENSE_TRACKER_SEED_SAMPLE_DATA", "false")
        monkeypatch.setenv("EXPENSE_TRACKER_LOG_LEVEL", "debug")

        settings = AppSettings()
        assert settings.storage_backend == "memory"
        assert settings.seed_sample_data is False
        assert settings.log_level == "DEBUG"

    def test_dotenv_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("EXPENSE_TRACKER_RECENT_EXPENSES_LIMIT=10\n", encoding="utf-8")
        assert AppSettings().recent_expenses_limit == 10

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValidationError):
            AppSettings(storage_backend="postgres")

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="LOUD")


class TestGetSettings:
    """Tests for the cached root container."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_settings(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "memory")
        assert validate_all_settings() == {"app": True}

    def test_validate_reports_missing_sheets_config(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)

        results = validate_all_settings()
        assert results["app"] is True
        assert results["google_sheets"] is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
