"""
tests/test_login.py -- Integration tests for POST /api/auth/login.

Covers:
  - Valid credentials: 200 with token and {email, orgId}, no password digest
  - The issued token opens the asset routes for the right tenant
  - Malformed email and missing fields: 400 before any storage lookup
  - Unknown email and wrong password: byte-identical 401 responses
"""

from __future__ import annotations

import pytest


class TestLoginSuccess:
    def test_login_returns_token_and_user(self, api_client) -> None:
        resp = api_client.client.post(
            "/api/auth/login", json={"email": api_client.acme.email, "password": api_client.acme.password}
        )
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert set(data) == {"token", "user"}
        assert data["user"] == {"email": api_client.acme.email, "orgId": api_client.acme.org_id}
        assert "password" not in resp.text
        assert resp.headers["cache-control"] == "no-store"

    def test_login_token_verifies_to_user_and_org(self, api_client) -> None:
        resp = api_client.client.post(
            "/api/auth/login", json={"email": api_client.acme.email, "password": api_client.acme.password}
        )
        ctx = api_client.tokens.verify(resp.json()["token"])
        assert ctx is not None
        assert ctx.user_id == api_client.acme.user_id
        assert ctx.org_id == api_client.acme.org_id

    def test_login_token_opens_asset_routes(self, api_client) -> None:
        token = api_client.client.post(
            "/api/auth/login", json={"email": api_client.acme.email, "password": api_client.acme.password}
        ).json()["token"]
        resp = api_client.client.get("/api/assets", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200


class TestLoginValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "password": "password123"},
            {"email": "two@@acme.test", "password": "password123"},
            {"email": "no-tld@acme", "password": "password123"},
            {"email": "", "password": "password123"},
            {"email": "admin@acme.test"},
            {"password": "password123"},
            {"email": "admin@acme.test", "password": ""},
            {},
        ],
    )
    def test_malformed_body_is_400(self, api_client, body: dict) -> None:
        resp = api_client.client.post("/api/auth/login", json=body)
        assert resp.status_code == 400, f"Expected 400, got {resp.status_code}: {resp.text}"
        assert isinstance(resp.json()["error"], str)

    def test_malformed_email_skips_storage(self, api_client, monkeypatch) -> None:
        calls: list[str] = []
        store = api_client.client.app.state.user_store
        monkeypatch.setattr(store, "get_by_email", lambda email: calls.append(email))
        resp = api_client.client.post("/api/auth/login", json={"email": "nope", "password": "password123"})
        assert resp.status_code == 400
        assert calls == []

    def test_non_json_body_is_400(self, api_client) -> None:
        resp = api_client.client.post(
            "/api/auth/login", content=b"email=x", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400


class TestLoginFailure:
    def test_unknown_email_and_wrong_password_are_identical(self, api_client) -> None:
        unknown = api_client.client.post(
            "/api/auth/login", json={"email": "ghost@acme.test", "password": "password123"}
        )
        wrong = api_client.client.post(
            "/api/auth/login", json={"email": api_client.acme.email, "password": "wrong-password"}
        )
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.content == wrong.content
        assert unknown.json() == {"error": "Invalid credentials"}

    def test_other_tenant_password_does_not_work(self, api_client) -> None:
        """Each user's digest is checked on its own; there is no shared login."""
        resp = api_client.client.post(
            "/api/auth/login", json={"email": api_client.globex.email, "password": "wrong-password"}
        )
        assert resp.status_code == 401

    def test_overlong_password_is_plain_401(self, api_client) -> None:
        """Passwords past bcrypt's input limit fail like any wrong password."""
        resp = api_client.client.post(
            "/api/auth/login", json={"email": api_client.acme.email, "password": "p" * 100}
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}
