"""
core/errors.py -- Application error taxonomy and its HTTP status translation.

Every failure a caller can observe is one of the AppError subclasses below.
Services and dependencies raise them; api/main.py registers one exception
handler that turns any AppError into {"error": message} with the status
returned by status_for(). No route picks its own status code for an error.

Messages are client-facing. Never put storage errors, stack traces, or
identifiers from another tenant into them -- log those server-side instead.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing or unusable."""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    default_message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(AppError):
    default_message = "Invalid input."


class InvalidCredentials(AppError):
    # One fixed message for unknown email and wrong password alike.
    default_message = "Invalid credentials"


class Unauthenticated(AppError):
    default_message = "Access denied: no token provided."


class Forbidden(AppError):
    default_message = "Invalid or expired token."


class NotFound(AppError):
    default_message = "Not found."


class Conflict(AppError):
    default_message = "Conflict."


class Internal(AppError):
    default_message = "Internal server error"


_STATUS: dict[type[AppError], int] = {
    InvalidInput: 400,
    InvalidCredentials: 401,
    Unauthenticated: 401,
    Forbidden: 403,
    NotFound: 404,
    Conflict: 409,
    Internal: 500,
}


def status_for(exc: AppError) -> int:
    """Return the HTTP status for an AppError.

    Walks the MRO so a subclass of a taxonomy member inherits its status.
    Anything unrecognised is a 500.
    """
    for cls in type(exc).__mro__:
        if cls in _STATUS:
            return _STATUS[cls]
    return 500
