"""
auth/tokens.py -- JWT token service, password hashing, and credential checks.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry exactly userId, orgId and exp --
       nothing else. TokenService.verify() returns None on any failure
       (malformed, bad signature, expired, missing claims); the auth gate
       turns that into a 403. There is no "decoded but untrusted" result.

  Signing secret: injected into TokenService by whoever constructs it (the
       API lifespan, the CLI, tests). An empty secret is a ConfigurationError
       at construction time -- the service never signs with a default key.

  Passwords: bcrypt directly (no passlib wrapper). The _DUMMY_HASH constant
       enables timing equalization in authenticate_user() so response time
       does not reveal whether an email exists.

Layer rule: no imports from api/ or inventory/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import AuthContext
from core.errors import ConfigurationError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("assettrack.auth")

_ALGORITHM = "HS256"
_DEFAULT_TTL_SECONDS = 24 * 60 * 60

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


# bcrypt refuses (or, in older releases, truncates) input beyond this.
PASSWORD_MAX_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a bcrypt digest of the given plaintext password.

    Raises ValueError when the UTF-8 encoding is longer than
    PASSWORD_MAX_BYTES. Provisioning checks the length first.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    bcrypt.checkpw compares in constant time. A digest that is not valid
    bcrypt (e.g. a legacy plaintext row) never matches, and neither does a
    password longer than PASSWORD_MAX_BYTES.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("assettrack_timing_dummy")


# ---------------------------------------------------------------------------
# Token service
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies bearer tokens carrying {userId, orgId}.

    Stateless: no token store, no revocation list. A token stays valid until
    its exp claim passes.

    Usage:
        tokens = TokenService(settings.jwt_secret)
        token = tokens.issue(user.id, user.organization_id)
        ctx = tokens.verify(token)   # AuthContext or None
    """

    def __init__(self, secret: str, ttl_seconds: int = _DEFAULT_TTL_SECONDS) -> None:
        if not secret:
            raise ConfigurationError("Token signing secret is not configured.")
        self._secret = secret
        self.ttl_seconds = ttl_seconds

    def issue(self, user_id: str, org_id: str) -> str:
        """Encode a signed JWT for user_id in org_id, expiring ttl_seconds from now."""
        expire = datetime.now(timezone.utc) + timedelta(seconds=self.ttl_seconds)
        payload = {
            "userId": user_id,
            "orgId": org_id,
            "exp": expire,
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> AuthContext | None:
        """Decode and verify a JWT. Returns the AuthContext or None on any failure.

        Checks signature and expiry (exp is required), then that both identity
        claims are present and are non-empty strings.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                options={"require_exp": True},
            )
        except JWTError as exc:
            logger.info("Token rejected: %s", exc)
            return None
        user_id = payload.get("userId")
        org_id = payload.get("orgId")
        if not isinstance(user_id, str) or not isinstance(org_id, str) or not user_id or not org_id:
            logger.info("Token rejected: missing identity claims")
            return None
        return AuthContext(user_id=user_id, org_id=org_id)


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Check an email/password pair with timing equalization.

    Always runs bcrypt whether or not the user exists. This prevents an
    attacker from enumerating valid emails by measuring response time:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real digest (same cost)

    Returns the User on success, None on any failure. Callers must report
    both failures identically.
    """
    user = store.get_by_email(email)
    if user is None:
        # Do NOT return early before running bcrypt.
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password):
        return None
    return user
