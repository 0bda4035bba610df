"""
core/config.py -- custauth settings, read from the environment by pydantic-settings.

get_settings() caches one Settings instance per process. Field names map to
environment variables (bcrypt_rounds -> BCRYPT_ROUNDS) and may also come
from a .env file in the working directory.

Settings are read once at startup and passed into the store, hasher and token
issuer by api/main.py. Nothing below core/ reads them at import time.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("custauth.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'custauth.db'}"

# 30 days
_DEFAULT_TOKEN_EXPIRE_SECONDS = 30 * 24 * 60 * 60


class Settings(BaseSettings):
    """custauth configuration: signing key, database URL, token lifetime and bcrypt cost."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=_DEFAULT_TOKEN_EXPIRE_SECONDS, gt=0)
    # bcrypt accepts 4..31; each step doubles the work.
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Fill in or reject SECRET_KEY, the HS256 signing key for bearer tokens.

        With DEBUG=true a missing key is replaced by a random one, so tokens
        issued before a restart stop verifying. Without DEBUG a missing key is
        an error. Keys under 32 characters are always rejected.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not survive a restart.")
            else:
                raise ValueError("SECRET_KEY must be set to sign bearer tokens (or run with DEBUG=true).")
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings; tests call get_settings.cache_clear() after changing env vars."""
    return Settings()
