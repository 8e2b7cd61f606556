"""
Application Error Taxonomy

Every error a request can end in is one of these classes. Services raise
them; the handlers registered in phuongnam.main turn them into the
standard error envelope.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        errors: Optional[list[Any]] = None,
        details: Optional[Any] = None,
    ):
        self.message = message or self.default_message
        if code:
            self.code = code
        self.errors = errors
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request data"


class ReservationConflictError(AppError):
    """The phone number already holds an active booking for that slot."""
    status_code = 400
    code = "RESERVATION_CONFLICT"
    default_message = "You already have a reservation at this date and time"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class AuthError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class DatabaseError(AppError):
    status_code = 500
    code = "DATABASE_ERROR"
    default_message = "Database error"
