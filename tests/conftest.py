"""
tests/conftest.py -- Shared test fixtures for custauth.

This module provides:
  - store / service: a fresh in-memory AccountStore and AuthService per test
  - api_client: TestClient wired to an isolated store via a patched lifespan
  - registered: a signed-up account on the api_client's store

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

DEBUG and BCRYPT_ROUNDS must be set before any api/core import so
get_settings() auto-generates SECRET_KEY and bcrypt stays fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any api/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, build_auth_service
from auth.hashing import CredentialHasher
from auth.service import AuthService
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.config import get_settings

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789"
THIRTY_DAYS = 30 * 24 * 60 * 60


def _shared_memory_url(name: str) -> str:
    return f"sqlite:///file:{name}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore(_shared_memory_url("unit"))
    yield s
    s.close()


@pytest.fixture
def hasher() -> CredentialHasher:
    return CredentialHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, THIRTY_DAYS)


@pytest.fixture
def service(store: AccountStore, hasher: CredentialHasher, issuer: TokenIssuer) -> AuthService:
    return AuthService(store=store, hasher=hasher, issuer=issuer)


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(service: AuthService):
    """Return an async context manager that replaces the real lifespan.

    Wires the test AuthService into app.state so TestClient routes see an
    isolated in-memory DB rather than the production database file.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.auth_service = service
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[tuple[TestClient, AuthService], None, None]:
    """Yield (client, service) backed by a fresh in-memory store."""
    test_store = AccountStore(_shared_memory_url("api"))
    test_service = build_auth_service(get_settings(), store=test_store)
    app.router.lifespan_context = _patch_lifespan(test_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, test_service

    test_store.close()


@pytest.fixture
def registered(api_client: tuple[TestClient, AuthService]) -> dict:
    """Sign up one account through the API and return its credentials."""
    client, _service = api_client
    account = {
        "email": "ada@example.com",
        "password": "correct horse battery staple",
        "first_name": "Ada",
        "last_name": "Lovelace",
    }
    resp = client.post("/api/v1/auth/signup", json=account)
    assert resp.status_code == 200, resp.text
    return account
