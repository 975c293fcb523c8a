"""
api/main.py -- FastAPI application entry point for the asset tracker.

Run with:  uvicorn asgi:app --reload
           python main.py serve

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers for the configured browser origins
  2. log_requests    -- one log line per request with status, latency and tenant

Lifespan builds the storage client and everything that depends on it on
startup, and disposes the connection pool on shutdown.

Error handling: every failure leaves as {"error": "<message>"}. AppError
subclasses carry their own status via core.errors.status_for; request
validation failures become 400; anything else is logged and returned as an
opaque 500.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.assets import router as assets_router
from api.routes.auth import router as auth_router
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings
from core.database import Database
from core.errors import AppError, Internal, status_for
from inventory.service import AssetService
from inventory.store import AssetStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("assettrack.api")

# ---------------------------------------------------------------------------
# Settings -- read once at import; a missing JWT_SECRET stops the process here.
# ---------------------------------------------------------------------------

_settings = get_settings()
logging.getLogger("assettrack").setLevel(_settings.log_level)


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The Database is the only pooled resource; the stores and the
    asset service share it.
    """
    logger.info("Asset tracker API starting up")
    db = Database(_settings.database_url)
    app.state.db = db
    app.state.user_store = UserStore(db)
    app.state.asset_service = AssetService(AssetStore(db))
    app.state.token_service = TokenService(_settings.jwt_secret, _settings.token_expire_seconds)
    logger.info("Storage initialized")

    yield

    db.close()
    logger.info("Asset tracker API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Asset Tracker API",
    description="Multi-tenant asset tracking with bearer-token authentication.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. Wall-clock time before and after call_next gives the latency.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    # Set by the auth gate; absent on public and rejected requests.
    auth = getattr(request.state, "auth", None)
    logger.info(
        "%s %s %d %.1fms %s org=%s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
        auth.org_id if auth is not None else "-",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(assets_router, prefix="/api", tags=["Assets"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can
# parse errors uniformly and key off the status code.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Summarize the first validation error as "field: reason".

    Pydantic prefixes messages from custom validators with "Value error, ";
    that prefix is dropped. The "body" / "path" location head is dropped too.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid input."
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    msg = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    if first.get("type") == "missing":
        msg = "Field required"
    return f"{'.'.join(loc)}: {msg}" if loc else msg


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate the application error taxonomy into HTTP responses."""
    status_code = status_for(exc)
    if isinstance(exc, Internal):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(status_code, Internal.default_message)
    return _error_response(status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 (not FastAPI's default 422) when the body or path fails validation."""
    return _error_response(400, _describe_validation_error(exc))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework-raised errors (404 unknown route, 405, ...) in the same envelope."""
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the server log only, never to the response
    body. Storage errors in particular can name tables, constraints and
    values from other tenants.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, Internal.default_message)


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# No auth -- load balancers and monitors call it.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability."""
    db: Database = request.app.state.db
    database = "ok" if db.ping() else "error"
    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        version=__version__,
        components={"app": "ok", "database": database},
    )
