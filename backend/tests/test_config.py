"""
Tests for centralized configuration.
"""
import pytest
from app.core.config import Settings, get_settings, reload_settings


def test_settings_defaults(monkeypatch):
    """Test that settings have sensible defaults."""
    for name in ("MAX_RECORDS_PER_REQUEST", "RATE_LIMIT_PER_MINUTE", "RATE_LIMIT_ENABLED",
                 "REQUEST_TIMEOUT_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.max_records_per_request == 50000
    assert settings.rate_limit_per_minute == 100
    assert settings.rate_limit_enabled is True
    assert settings.request_timeout_seconds == 30
    assert settings.log_level == "INFO"


def test_settings_from_env(monkeypatch):
    """Test loading settings from environment variables."""
    monkeypatch.setenv("MAX_RECORDS_PER_REQUEST", "1000")
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "20")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    try:
        settings = reload_settings()

        assert settings.max_records_per_request == 1000
        assert settings.rate_limit_per_minute == 20
        assert settings.rate_limit_enabled is False
        assert settings.log_level == "DEBUG"
        assert get_settings() is settings
    finally:
        monkeypatch.undo()
        reload_settings()


def test_settings_validation():
    """Test that settings validate input ranges."""
    with pytest.raises(ValueError):
        Settings(max_records_per_request=0)

    with pytest.raises(ValueError):
        Settings(rate_limit_per_minute=0)

    with pytest.raises(ValueError):
        Settings(log_level="INVALID")


def test_settings_properties():
    """Test computed properties."""
    settings = Settings(rate_limit_per_minute=42, allowed_origins="http://a.test, ,http://b.test")

    assert settings.rate_limit == "42/minute"
    assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]


def test_settings_singleton():
    """Test that get_settings returns singleton."""
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2
