"""
api/routes/auth.py -- Login endpoint.

Routes:
  POST /api/auth/login  -- email/password login; returns a bearer token

Security:
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Unknown email and wrong password raise the same InvalidCredentials, so the
  status code and body are byte-identical for both.
  Cache-Control: no-store on the token response.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, LoginUser
from auth.store import UserStore
from auth.tokens import TokenService, authenticate_user
from core.errors import InvalidCredentials

logger = logging.getLogger("assettrack.auth")

# Auth policy: POST /api/auth/login is public -- it is where tokens come from.
router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a token and the user's tenant.

    Malformed input (missing fields, bad email shape) is rejected with 400 by
    request validation before this function runs, so storage is never
    touched for it.
    """
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.token_service

    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        logger.info("Failed login attempt")
        raise InvalidCredentials()

    token = tokens.issue(user.id, user.organization_id)
    logger.info("User %s logged in (org %s)", user.id, user.organization_id)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            user=LoginUser(email=user.email, org_id=user.organization_id),
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
