"""Configuration loading."""

import pytest
from pydantic import ValidationError

from emr.config import Settings, get_settings, settings


def test_database_url_comes_from_environment():
    assert settings.database_url == "sqlite:///:memory:"
    assert get_settings() is settings


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("APP_DEBUG", "true")

    configured = Settings()

    assert configured.app_env == "test"
    assert configured.app_debug is True
