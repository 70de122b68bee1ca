"""
Application Error Taxonomy

Every failure the API reports deliberately is an ``AppError``. The exception
handlers in ``fooddelivery.main`` render them as
``{"success": false, "error": message}`` with the attached status code.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class BadRequestError(AppError):
    """Missing or malformed input."""
    status_code = 400


class BusinessRuleError(AppError):
    """Well-formed request that breaks a business rule."""
    status_code = 400


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""
    status_code = 401


class ForbiddenError(AppError):
    """Authenticated, but not allowed to act on this resource."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class InternalServerError(AppError):
    status_code = 500
