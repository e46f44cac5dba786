"""Tests for settings loaded from the environment."""

import pytest

from simperfi.config import DEFAULT_BINANCE_URL, Settings, load_settings
from simperfi.database import factories
from simperfi.database.factories import resolve_database_path


def test_defaults():
    """Test settings with an empty environment."""
    settings = load_settings({})

    assert settings.binance_url == DEFAULT_BINANCE_URL
    assert settings.http_timeout == 10.0
    assert settings.price_cache_ttl == 900.0
    assert settings.history_days == 30


def test_overrides():
    """Test reading every variable."""
    settings = load_settings(
        {
            "SIMPERFI_BINANCE_URL": "https://mirror.example/",
            "SIMPERFI_HTTP_TIMEOUT": "2.5",
            "SIMPERFI_PRICE_CACHE_TTL": "60",
            "SIMPERFI_HISTORY_DAYS": "7",
        }
    )

    assert settings.binance_url == "https://mirror.example"
    assert settings.http_timeout == 2.5
    assert settings.price_cache_ttl == 60.0
    assert settings.history_days == 7


def test_cli_owned_variables_are_not_settings():
    """Test that the database path and log level stay with the CLI options."""
    fields = Settings.__dataclass_fields__

    assert "database_path" not in fields
    assert "log_level" not in fields


def test_invalid_number():
    """Test that a non-numeric value is reported by name."""
    with pytest.raises(ValueError, match="SIMPERFI_HTTP_TIMEOUT"):
        load_settings({"SIMPERFI_HTTP_TIMEOUT": "soon"})


@pytest.mark.parametrize("raw", ["-1", "7.5", "week"])
def test_invalid_history_days(raw):
    """Test that history days must be a non-negative whole number."""
    with pytest.raises(ValueError, match="SIMPERFI_HISTORY_DAYS"):
        load_settings({"SIMPERFI_HISTORY_DAYS": raw})


def test_history_days_zero_allowed():
    """Test that a zero-day window is accepted."""
    assert load_settings({"SIMPERFI_HISTORY_DAYS": "0"}).history_days == 0


def test_database_path_ignores_environment(tmp_path, monkeypatch):
    """Test that only an explicit path overrides the default location."""
    default = tmp_path / "home" / "simperfi.db"
    monkeypatch.setattr(factories, "DEFAULT_DATABASE_PATH", default)
    monkeypatch.setenv("SIMPERFI_DB_PATH", str(tmp_path / "env.db"))
    explicit = tmp_path / "nested" / "explicit.db"

    assert resolve_database_path(str(explicit)) == explicit
    assert explicit.parent.is_dir()
    assert resolve_database_path(None) == default
