"""Typed application errors.

Services raise these; ``main.py`` converts every one of them into the uniform
response envelope. Each class carries the HTTP status and a stable error code.
"""

from typing import Any


class AppError(Exception):
    """Base class for errors mapped to HTTP responses."""

    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, details: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400
    error_code = "validation_error"
    default_message = "Invalid request"


class InvalidCredentialsError(AppError):
    """Login failed. Never says whether the email or the password was wrong."""

    status_code = 401
    error_code = "invalid_credentials"
    default_message = "Email or password is invalid"


class UnauthenticatedError(AppError):
    """Missing, invalid or expired access token."""

    status_code = 401
    error_code = "unauthenticated"
    default_message = "Not authenticated"


class MissingTokenError(AppError):
    status_code = 401
    error_code = "missing_token"
    default_message = "Refresh token is required"


class TokenInvalidError(AppError):
    """Token failed signature, purpose or expiry checks."""

    status_code = 401
    error_code = "token_invalid"
    default_message = "Invalid or expired token"


class TokenReusedError(AppError):
    """Refresh token verified but is not the one currently stored (possible replay)."""

    status_code = 401
    error_code = "token_reused"
    default_message = "Refresh token has already been used or revoked"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"
    default_message = "You are not allowed to perform this action"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"
    default_message = "Resource already exists"


class InternalError(AppError):
    """Unexpected downstream failure."""

    status_code = 500
    error_code = "internal_error"
    default_message = "Something went wrong"
