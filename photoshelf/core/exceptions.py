"""Application exceptions mapped to HTTP responses.

Endpoints, dependencies and services raise these directly; the handlers
in ``photoshelf.middleware.error_handler`` turn them into the
``{"success": false, "message": ..., "details": ...}`` envelope using the
class's ``status_code``.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base class: a message, an HTTP status and optional context.

    Subclasses only override the class attributes.

    Attributes:
        status_code: HTTP status returned to the client.
        default_message: Used when no message is given.
        headers: Extra response headers (e.g. WWW-Authenticate).
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(AppException):
    status_code = 404
    default_message = "Resource not found"


class ValidationException(AppException):
    """Request is well-formed JSON/multipart but its content is unacceptable."""

    status_code = 422
    default_message = "Validation error"


class UnauthorizedException(AppException):
    status_code = 401
    default_message = "Authentication required"
    headers = {"WWW-Authenticate": "Bearer"}


class ConflictException(AppException):
    """A unique username, email or filename is already taken."""

    status_code = 409
    default_message = "Resource already exists"


class PayloadTooLargeException(AppException):
    status_code = 413
    default_message = "File too large"


class DatabaseException(AppException):
    status_code = 500
    default_message = "Database operation failed"
