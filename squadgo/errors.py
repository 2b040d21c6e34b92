"""Custom exception classes for the application."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


class AppError(Exception):
    """Base application error class."""

    code = "unknown"

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for a JSON response."""
        return {"code": self.code, "message": self.message}


class ValidationError(AppError):
    """Raised when user input fails validation."""

    code = "invalid-argument"

    def __init__(self, message="Validation failed.", errors=None):
        """Initialize the error."""
        super().__init__(message, 400)
        self.errors = errors or {}

    def to_dict(self) -> dict[str, Any]:
        """Include the per-field errors."""
        data = super().to_dict()
        if self.errors:
            data["fields"] = self.errors
        return data


class UnauthenticatedError(AppError):
    """Raised when the caller has no verified identity."""

    code = "unauthenticated"

    def __init__(self, message="User must be authenticated."):
        """Initialize the error."""
        super().__init__(message, 401)


class ForbiddenError(AppError):
    """Raised when the caller is not the required participant or organizer."""

    code = "permission-denied"

    def __init__(self, message="Not authorized."):
        """Initialize the error."""
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    code = "not-found"

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class InvalidStateError(AppError):
    """Raised when a record is not in the state an operation requires."""

    code = "failed-precondition"

    def __init__(self, message="Operation not allowed in the current state."):
        """Initialize the error."""
        super().__init__(message, 400)


class ConflictError(AppError):
    """Raised when trying to create a resource that already exists."""

    code = "already-exists"

    def __init__(self, message="Resource already exists."):
        """Initialize the error."""
        super().__init__(message, 409)


class InternalError(AppError):
    """Raised when the store fails for reasons unrelated to caller input."""

    code = "internal"

    def __init__(self, message="Internal error."):
        """Initialize the error."""
        super().__init__(message, 500)


def surface_errors(message: str) -> Callable[[F], F]:
    """Let AppErrors through and turn anything else into an InternalError.

    Used on caller-facing operations so raw store exceptions never reach
    the client.
    """

    def decorator(func: F) -> F:
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except AppError:
                raise
            except Exception as e:
                logger.error(f"{message}: {e}")
                raise InternalError(message) from e

        return wrapper  # type: ignore[return-value]

    return decorator
