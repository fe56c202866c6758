import pytest
from pydantic import ValidationError

from user_registry.config.settings import Settings

_SETTINGS_ENV = (
    "DATABASE_URL",
    "API_HOST",
    "API_PORT",
    "PASSWORD_RESET_TOKEN_TTL_MINUTES",
    "EMAIL_SENDER_ADDRESS",
    "LOG_LEVEL",
)


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)


def test_defaults_are_deterministic(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)

    settings = Settings(_env_file=None)

    assert settings.database_url is None
    assert settings.api_host == "0.0.0.0"
    assert settings.api_port == 8000
    assert settings.password_reset_token_ttl_minutes == 60
    assert settings.email_sender_address == "no-reply@example.org"
    assert settings.log_level == "INFO"


def test_env_values_override_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./users.db")
    monkeypatch.setenv("API_PORT", "9090")
    monkeypatch.setenv("PASSWORD_RESET_TOKEN_TTL_MINUTES", "15")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite+aiosqlite:///./users.db"
    assert settings.api_port == 9090
    assert settings.password_reset_token_ttl_minutes == 15
    assert settings.log_level == "debug"


def test_non_positive_reset_ttl_raises_validation_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("PASSWORD_RESET_TOKEN_TTL_MINUTES", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_out_of_range_port_raises_validation_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("API_PORT", "70000")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_sender_address_raises_validation_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("EMAIL_SENDER_ADDRESS", "")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
