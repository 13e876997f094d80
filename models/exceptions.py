"""
Application exceptions mapped to HTTP responses by api.errors.

Each class carries the status code and the error code used in the
response envelope. Input validation errors are marshmallow's
ValidationError and are not redefined here.
"""
from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base class for errors that translate directly to a response."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None,
                 error_code: Optional[str] = None, details: Optional[dict] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details


class AuthenticationError(AppError):
    """Missing credentials (401) or a present but unusable token (403)."""

    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"

    @classmethod
    def forbidden(cls) -> "AuthenticationError":
        return cls("Forbidden", status_code=403, error_code="FORBIDDEN")


class AuthorizationError(AppError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Conflict"
