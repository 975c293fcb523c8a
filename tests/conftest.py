"""
tests/conftest.py -- Shared test fixtures for asset tracker integration tests.

This module provides:
  - make_test_database(): an isolated shared-memory SQLite Database
  - provision_tenant(): one organization + one user, straight through the stores
  - _patch_lifespan(): wires test services into app.state, bypassing real startup
  - api_client: TestClient plus bearer tokens for two tenants (Acme and Globex)

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

JWT_SECRET must be set before api.main is imported: the app reads its
settings at import time and refuses to load without a signing secret.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set JWT_SECRET before any api/core import so get_settings()
# does not raise on the missing secret.
os.environ.setdefault("JWT_SECRET", "test-signing-secret-0123456789abcdef")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Organization, User
from auth.store import UserStore
from auth.tokens import TokenService, hash_password
from core.config import get_settings
from core.database import Database
from inventory.service import AssetService
from inventory.store import AssetStore

ACME_EMAIL = "admin@acme.test"
GLOBEX_EMAIL = "hank@globex.test"
PASSWORD = "password123"


@dataclass
class Tenant:
    org_id: str
    user_id: str
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass
class ApiHarness:
    client: TestClient
    acme: Tenant
    globex: Tenant
    db: Database
    tokens: TokenService


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_database(db_suffix: str) -> Database:
    """Create an isolated named shared-memory SQLite Database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. the test module name).
    """
    return Database(f"sqlite:///file:test_assettrack_{db_suffix}?mode=memory&cache=shared&uri=true")


def make_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.jwt_secret, settings.token_expire_seconds)


def provision_tenant(
    users: UserStore,
    tokens: TokenService,
    name: str,
    slug: str,
    email: str,
    password: str = PASSWORD,
) -> Tenant:
    """Create one organization with one user and return a Tenant holding a fresh token."""
    org_id = users.create_organization(Organization(name=name, slug=slug))
    user_id = users.create_user(
        User(email=email, password=hash_password(password), organization_id=org_id, role="admin")
    )
    return Tenant(
        org_id=org_id,
        user_id=user_id,
        email=email,
        password=password,
        token=tokens.issue(user_id, org_id),
    )


def _patch_lifespan(db: Database, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test database and token service into app.state so
    TestClient routes see the isolated test DB rather than DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.db = db
        app.state.user_store = UserStore(db)
        app.state.asset_service = AssetService(AssetStore(db))
        app.state.token_service = tokens
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request: pytest.FixtureRequest) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated in-memory store.
    Two tenants are provisioned before the client starts; each gets a
    token issued by the same TokenService the app verifies with.
    """
    db = make_test_database(request.module.__name__.rsplit(".", 1)[-1])
    tokens = make_token_service()
    users = UserStore(db)
    acme = provision_tenant(users, tokens, "Acme Corp", "acme-corp", ACME_EMAIL)
    globex = provision_tenant(users, tokens, "Globex Corp", "globex", GLOBEX_EMAIL)

    app.router.lifespan_context = _patch_lifespan(db, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(client=client, acme=acme, globex=globex, db=db, tokens=tokens)

    db.close()


@pytest.fixture
def memory_db() -> Generator[Database, None, None]:
    """Plain in-memory Database for store and service unit tests."""
    db = Database("sqlite:///:memory:")
    yield db
    db.close()
