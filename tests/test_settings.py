"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from parallel_search.config import AppSettings, get_settings


def test_defaults(settings):
    assert settings.transport == "stdio"
    assert settings.call_timeout is None
    assert settings.error_message_max_length == 500
    assert settings.defaults.count == 10
    assert settings.defaults.country == "France"
    assert settings.defaults.language == "fr"
    assert settings.retry.max_retries == 1
    assert settings.dataforseo.timeout == 15.0
    assert settings.brave.timeout == 15.0
    assert settings.dataforseo.endpoint.endswith("/serp/google/organic/live/advanced")
    assert settings.brave.endpoint == "https://api.search.brave.com/res/v1/web/search"


def test_nested_environment_variables(monkeypatch):
    monkeypatch.setenv("DATAFORSEO__LOGIN", "env-login")
    monkeypatch.setenv("DATAFORSEO__PASSWORD", "env-pass")
    monkeypatch.setenv("BRAVE__TIMEOUT", "3.5")
    monkeypatch.setenv("DEFAULTS__COUNT", "20")
    monkeypatch.setenv("CALL_TIMEOUT", "30")

    settings = AppSettings(_env_file=None)

    assert settings.dataforseo.login == "env-login"
    assert settings.dataforseo.password.get_secret_value() == "env-pass"
    assert settings.brave.timeout == 3.5
    assert settings.defaults.count == 20
    assert settings.call_timeout == 30.0


def test_secrets_are_masked(monkeypatch):
    monkeypatch.setenv("BRAVE__API_KEY", "very-secret")
    settings = AppSettings(_env_file=None)
    assert "very-secret" not in repr(settings)
    assert settings.brave.api_key.get_secret_value() == "very-secret"


def test_log_level_and_transport_are_normalized():
    settings = AppSettings(
        _env_file=None, log_level="debug", transport="Streamable-HTTP"
    )
    assert settings.log_level == "DEBUG"
    assert settings.transport == "streamable-http"


@pytest.mark.parametrize(
    "field,value",
    [
        ("log_level", "LOUD"),
        ("transport", "carrier-pigeon"),
        ("environment", "moon"),
        ("port", 0),
        ("call_timeout", 0),
    ],
)
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, **{field: value})


def test_default_count_must_be_in_range():
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, defaults={"count": 51})


def test_get_provider_config(settings):
    assert settings.get_provider_config("DataForSEO") is settings.dataforseo
    assert settings.get_provider_config("brave") is settings.brave
    assert settings.get_provider_config("google") is None


@pytest.mark.parametrize("name", ["retry", "port", "defaults", "transport"])
def test_get_provider_config_ignores_non_source_sections(settings, name):
    assert settings.get_provider_config(name) is None


def test_get_settings_is_cached(mock_env):
    assert get_settings() is get_settings()
    assert get_settings().log_level == "DEBUG"
