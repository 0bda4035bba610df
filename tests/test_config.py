"""Unit tests for core/config.py -- Settings validation."""

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_production_requires_secret_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValidationError):
        Settings(debug=False, _env_file=None)


def test_debug_generates_secret_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SECRET_KEY", raising=False)
    settings = Settings(debug=True, _env_file=None)
    assert len(settings.secret_key) >= 32


def test_short_secret_key_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(debug=True, secret_key="short", _env_file=None)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BCRYPT_ROUNDS", raising=False)
    monkeypatch.delenv("TOKEN_EXPIRE_SECONDS", raising=False)
    settings = Settings(debug=True, _env_file=None)
    assert settings.token_expire_seconds == 30 * 24 * 60 * 60
    assert settings.bcrypt_rounds == 10


def test_bcrypt_rounds_bounds() -> None:
    with pytest.raises(ValidationError):
        Settings(debug=True, bcrypt_rounds=3, _env_file=None)
