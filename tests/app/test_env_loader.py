import logging
from unittest.mock import patch

import pytest

from realty.app.env_loader import (
    DEFAULT_API_BASE_URL,
    Settings,
    get_current_environment,
    load_environment,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "ENV",
        "REALTY_API_BASE_URL",
        "REALTY_API_TIMEOUT",
        "REALTY_STORAGE_PATH",
        "REALTY_OFFLINE",
        "REALTY_ALLOW_FALLBACK_LOGIN",
        "REALTY_FALLBACK_ON_VALIDATION_ERROR",
        "REALTY_RETRY_ATTEMPTS",
        "REALTY_RETRY_INITIAL_DELAY",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env(load=False)
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.timeout == 10.0
    assert not settings.offline
    assert settings.allow_fallback_login
    assert settings.fallback_on_validation_error
    assert settings.retry_attempts == 1
    assert settings.log_level is None


def test_values_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("REALTY_API_BASE_URL", "https://api.promiserealty.in/api/")
    monkeypatch.setenv("REALTY_API_TIMEOUT", "2.5")
    monkeypatch.setenv("REALTY_STORAGE_PATH", str(tmp_path / "s.json"))
    monkeypatch.setenv("REALTY_OFFLINE", "yes")
    monkeypatch.setenv("REALTY_ALLOW_FALLBACK_LOGIN", "false")
    monkeypatch.setenv("REALTY_RETRY_ATTEMPTS", "3")

    settings = Settings.from_env(load=False)

    assert settings.api_base_url == "https://api.promiserealty.in/api"
    assert settings.timeout == 2.5
    assert settings.resolved_storage_path == tmp_path / "s.json"
    assert settings.offline
    assert not settings.allow_fallback_login
    assert settings.retry_attempts == 3


@pytest.mark.parametrize(
    "name,value",
    [("REALTY_API_TIMEOUT", "soon"), ("REALTY_RETRY_ATTEMPTS", "2.5")],
)
def test_malformed_numbers_name_the_variable(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Settings.from_env(load=False)


def test_retry_attempts_must_be_positive(monkeypatch):
    monkeypatch.setenv("REALTY_RETRY_ATTEMPTS", "0")
    with pytest.raises(ValueError, match="at least 1"):
        Settings.from_env(load=False)


@pytest.mark.parametrize("env", ["dev", "staging", "prod"])
def test_get_current_environment(monkeypatch, env):
    monkeypatch.setenv("ENV", env)
    assert get_current_environment() == env


def test_invalid_environment(monkeypatch):
    monkeypatch.setenv("ENV", "qa")
    with pytest.raises(ValueError, match="Invalid ENV value"):
        get_current_environment()


def test_dev_loads_env_file():
    with patch("realty.app.env_loader.load_dotenv") as mock_load:
        assert load_environment() == "dev"
    mock_load.assert_called_once_with(".env.dev")


def test_prod_skips_env_file(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    with patch("realty.app.env_loader.load_dotenv") as mock_load:
        assert load_environment() == "prod"
    mock_load.assert_not_called()


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings.from_env(load=False).log_level == logging.DEBUG


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValueError, match="Invalid log level"):
        Settings.from_env(load=False)
