"""
auth/dependencies.py -- The auth gate: FastAPI Depends() helpers for bearer tokens.

Only one credential is accepted: an "Authorization: Bearer <token>" header.

  No header, a header with another scheme, or an empty token
      -> Unauthenticated (401). Nothing was presented.
  Token present but TokenService.verify() rejects it
      -> Forbidden (403). Something was presented and refused.
  Otherwise
      -> AuthContext(user_id, org_id) for the handler.

read_bearer_token() and authenticate_header() are plain functions so the
gate logic is testable without a request object. require_auth_context() is
the FastAPI dependency; the asset router mounts it at router level so no
asset route is reachable without passing through it.

Layer rule: no imports from inventory/. May import from fastapi because this
module is part of the dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import AuthContext
from auth.tokens import TokenService
from core.errors import Forbidden, Unauthenticated

logger = logging.getLogger("assettrack.auth")

_BEARER_PREFIX = "Bearer "


def read_bearer_token(authorization_header: str | None) -> str | None:
    """Return the token from a "Bearer <token>" header value, or None.

    A missing header, another scheme, and an empty token all come back as
    None -- the gate treats them identically.
    """
    if not authorization_header or not authorization_header.startswith(_BEARER_PREFIX):
        return None
    token = authorization_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def authenticate_header(authorization_header: str | None, tokens: TokenService) -> AuthContext:
    """Run the gate against a raw Authorization header value.

    Raises Unauthenticated when no token is present and Forbidden when the
    token fails verification.
    """
    token = read_bearer_token(authorization_header)
    if token is None:
        raise Unauthenticated()
    ctx = tokens.verify(token)
    if ctx is None:
        raise Forbidden()
    return ctx


def require_auth_context(request: Request) -> AuthContext:
    """Require a valid bearer token and return the caller's AuthContext.

    Use as a FastAPI dependency:
        @router.get("/assets")
        def route(ctx: AuthContext = Depends(require_auth_context)): ...

    The context is also stored on request.state.auth; the request-log
    middleware in api/main.py reads it to tag each line with the tenant.
    """
    tokens: TokenService = request.app.state.token_service
    try:
        ctx = authenticate_header(request.headers.get("Authorization"), tokens)
    except Forbidden:
        logger.warning("Rejected token on %s %s", request.method, request.url.path)
        raise
    request.state.auth = ctx
    return ctx
