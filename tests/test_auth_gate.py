"""
tests/test_auth_gate.py -- Tests for the bearer-token gate (auth/dependencies.py).

Covers:
  - read_bearer_token() accepts only "Bearer <token>"
  - authenticate_header(): no token -> Unauthenticated, bad token -> Forbidden
  - Over HTTP: 401 without a usable header, 403 for a rejected token,
    on every asset route, with the {"error": ...} envelope
  - Auth runs before body and path validation
  - The request log line names the resolved tenant
"""

from __future__ import annotations

import logging
import uuid

import pytest

from auth.dependencies import authenticate_header, read_bearer_token
from auth.tokens import TokenService
from core.errors import Forbidden, Unauthenticated

SECRET = "gate-test-secret-abcdefghijklmnopqrstuvwxyz"

_ASSET_ROUTES = [
    ("GET", "/api/assets"),
    ("POST", "/api/assets"),
    ("PATCH", f"/api/assets/{uuid.uuid4()}"),
    ("DELETE", f"/api/assets/{uuid.uuid4()}"),
]


class TestReadBearerToken:
    @pytest.mark.parametrize(
        "header",
        [None, "", "Bearer", "Bearer ", "Bearer    ", "Basic dXNlcjpwdw==", "bearer abc", "Token abc"],
    )
    def test_no_usable_token(self, header) -> None:
        assert read_bearer_token(header) is None

    def test_extracts_token(self) -> None:
        assert read_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


class TestAuthenticateHeader:
    def test_missing_header_is_unauthenticated(self) -> None:
        with pytest.raises(Unauthenticated):
            authenticate_header(None, TokenService(SECRET))

    def test_invalid_token_is_forbidden(self) -> None:
        with pytest.raises(Forbidden):
            authenticate_header("Bearer not-a-token", TokenService(SECRET))

    def test_valid_token_returns_context(self) -> None:
        tokens = TokenService(SECRET)
        ctx = authenticate_header(f"Bearer {tokens.issue('u-1', 'o-1')}", tokens)
        assert (ctx.user_id, ctx.org_id) == ("u-1", "o-1")


class TestGateOverHttp:
    @pytest.mark.parametrize("method,path", _ASSET_ROUTES)
    def test_no_header_is_401(self, api_client, method: str, path: str) -> None:
        resp = api_client.client.request(method, path, json={"name": "x", "serialNumber": "y"})
        assert resp.status_code == 401, f"Expected 401, got {resp.status_code}: {resp.text}"
        assert resp.json() == {"error": "Access denied: no token provided."}

    @pytest.mark.parametrize("method,path", _ASSET_ROUTES)
    def test_bad_token_is_403(self, api_client, method: str, path: str) -> None:
        resp = api_client.client.request(
            method, path, json={"name": "x", "serialNumber": "y"}, headers={"Authorization": "Bearer garbage"}
        )
        assert resp.status_code == 403, f"Expected 403, got {resp.status_code}: {resp.text}"
        assert resp.json() == {"error": "Invalid or expired token."}

    def test_wrong_scheme_is_401(self, api_client) -> None:
        resp = api_client.client.get("/api/assets", headers={"Authorization": f"Token {api_client.acme.token}"})
        assert resp.status_code == 401

    def test_expired_token_is_403(self, api_client) -> None:
        expired = TokenService(api_client.tokens._secret, ttl_seconds=-60)
        token = expired.issue(api_client.acme.user_id, api_client.acme.org_id)
        resp = api_client.client.get("/api/assets", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_foreign_secret_token_is_403(self, api_client) -> None:
        token = TokenService(SECRET).issue(api_client.acme.user_id, api_client.acme.org_id)
        resp = api_client.client.get("/api/assets", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_auth_checked_before_body_validation(self, api_client) -> None:
        """An invalid body without credentials reports the missing token, not the body."""
        resp = api_client.client.post("/api/assets", json={})
        assert resp.status_code == 401

    def test_auth_checked_before_path_validation(self, api_client) -> None:
        resp = api_client.client.delete("/api/assets/not-a-uuid")
        assert resp.status_code == 401

    def test_valid_token_passes(self, api_client) -> None:
        resp = api_client.client.get("/api/assets", headers=api_client.acme.headers)
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"


class TestRequestLog:
    """The request log line carries the tenant the gate resolved."""

    @staticmethod
    def _lines(caplog) -> list[str]:
        return [r.getMessage() for r in caplog.records if r.name == "assettrack.api"]

    def test_authenticated_request_logs_org(self, api_client, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="assettrack.api"):
            api_client.client.get("/api/assets", headers=api_client.globex.headers)
        lines = [line for line in self._lines(caplog) if line.startswith("GET /api/assets 200")]
        assert lines, f"No request log line in {self._lines(caplog)}"
        assert lines[-1].endswith(f"org={api_client.globex.org_id}")

    def test_unauthenticated_request_logs_no_org(self, api_client, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="assettrack.api"):
            api_client.client.get("/api/assets")
        lines = [line for line in self._lines(caplog) if line.startswith("GET /api/assets 401")]
        assert lines
        assert lines[-1].endswith("org=-")
