"""
tests/conftest.py -- Shared test fixtures for DevConnector integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for auth + social
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: (client, tokens) -- TestClient plus the TokenIssuer it trusts
  - register(): helper that creates an account through the API

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment must be set before any api/ or core/ import: get_settings() is
read once when api.main is imported.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before importing api.main so get_settings() auto-generates a
# SECRET_KEY in dev mode, accepts the TestClient host, and does not throttle
# the many logins the suite performs.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["*"]')
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("REGISTER_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenConfig, TokenIssuer
from social.store import SocialStore

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, SocialStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    auth_url = f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true"
    social_url = f"sqlite:///file:test_social_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=auth_url), SocialStore(db_url=social_url)


def _patch_lifespan(user_store: UserStore, social_store: SocialStore, tokens: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Uses the minimum bcrypt cost so the suite stays fast.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.social_store = social_store
        app.state.tokens = tokens
        app.state.hasher = PasswordHasher(rounds=4)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, TokenIssuer], None, None]:
    """Yield (client, tokens) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but use isolated in-memory stores. One client per
    test module; tests create their own accounts with register().
    """
    user_store, social_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])
    tokens = TokenIssuer(TokenConfig(secret_key=TEST_SECRET))

    app.router.lifespan_context = _patch_lifespan(user_store, social_store, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, tokens

    user_store.close()
    social_store.close()


@dataclass
class Account:
    user_id: str
    token: str
    email: str
    password: str
    name: str

    @property
    def headers(self) -> dict[str, str]:
        return {"x-auth-token": self.token}


@pytest.fixture
def register(api_client: tuple[TestClient, TokenIssuer]):
    """Return a callable that registers a fresh account (unique email) through POST /api/users."""
    client, tokens = api_client

    def _register(name: str = "Alice", password: str = "secret1") -> Account:
        email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
        resp = client.post("/api/users", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        user_id = tokens.verify(token)
        assert user_id is not None
        return Account(user_id=user_id, token=token, email=email, password=password, name=name)

    return _register
