"""Unit tests for core/config.py -- Settings validation."""

import pytest
from pydantic import ValidationError

from core.config import Settings

GOOD_SECRET = "x" * 32


def test_missing_secret_refuses_to_load(monkeypatch) -> None:
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValidationError, match="JWT_SECRET is required"):
        Settings(_env_file=None)


def test_short_secret_rejected(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", "x" * 31)
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(_env_file=None)


def test_non_positive_ttl_rejected(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    monkeypatch.setenv("TOKEN_EXPIRE_SECONDS", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_defaults(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    for name in ("PORT", "HOST", "DATABASE_URL", "TOKEN_EXPIRE_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.port == 5000
    assert settings.host == "127.0.0.1"
    assert settings.database_url == "sqlite:///./assettrack.db"
    assert settings.token_expire_seconds == 86400


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    settings = Settings(_env_file=None)
    assert settings.port == 8080
    assert settings.database_url == "sqlite:///./other.db"


def test_log_level_is_case_insensitive(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings(_env_file=None).log_level == "DEBUG"


def test_unknown_log_level_rejected(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_debug_flag(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    monkeypatch.setenv("DEBUG", "true")
    assert Settings(_env_file=None).debug is True
