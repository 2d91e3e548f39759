"""Application-wide exception classes and handlers.

Services raise these typed errors and never translate them to HTTP
themselves; the handlers registered here turn every failure into the
``{"success": false, "error": {...}}`` envelope with a machine-readable
code and a human-readable message.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for application errors.

    Subclasses pin ``status_code`` and ``error_code``; call sites only pass a
    message and, where useful, the offending field or resource.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Resource not found"

    def __init__(self, message: str | None = None, resource: str | None = None):
        super().__init__(message, {"resource": resource} if resource else None)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, field: str | None = None):
        super().__init__(message, {"field": field} if field else None)


class InvalidTargetError(ValidationError):
    """Raised when a user targets themselves."""

    error_code = "INVALID_TARGET"
    default_message = "Cannot follow yourself"

    def __init__(self, message: str | None = None):
        super().__init__(message, field="targetUserId")


class ConflictError(AppError):
    """Duplicate resource or relationship state. Reported as 400, not 409."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "CONFLICT"
    default_message = "Resource conflict"

    def __init__(self, message: str | None = None, resource: str | None = None):
        super().__init__(message, {"resource": resource} if resource else None)


class AlreadyFollowingError(ConflictError):
    error_code = "ALREADY_FOLLOWING"
    default_message = "Already following this user"

    def __init__(self, message: str | None = None):
        super().__init__(message, resource="follow")


class RequestAlreadySentError(ConflictError):
    error_code = "REQUEST_ALREADY_SENT"
    default_message = "Follow request already sent"

    def __init__(self, message: str | None = None):
        super().__init__(message, resource="follow")


class UnauthorizedError(AppError):
    """Missing credentials, or the wrong user acting on a relationship."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class StorageUnavailableError(AppError):
    error_code = "STORAGE_UNAVAILABLE"
    default_message = "Storage is temporarily unavailable"


def _error_content(code: str, message: str, details: dict[str, Any] | None) -> dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details if details else None,
        },
    }


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError and return consistent JSON response."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "AppError: %s (code=%s, status=%d)",
        exc.message,
        exc.error_code,
        exc.status_code,
        extra={"details": exc.details},
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.error_code, exc.message, exc.details),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed or missing input as a 400 validation error."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
    message = first.get("msg", "Invalid request")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_content(
            "VALIDATION_ERROR",
            message,
            {"field": field} if field else None,
        ),
    )


async def storage_exception_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    """Surface database driver failures as StorageUnavailable."""
    logger.exception("Database failure: %s", exc.__class__.__name__)
    error = StorageUnavailableError()
    return JSONResponse(
        status_code=error.status_code,
        content=_error_content(error.error_code, error.message, None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with a generic error response."""
    logger.exception("Unhandled exception: %s", str(exc))

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_content("INTERNAL_ERROR", "An unexpected error occurred", None),
    )


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Register exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
        debug: If True, unhandled exceptions propagate with stack traces.
    """
    app.add_exception_handler(AppError, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DBAPIError, storage_exception_handler)  # type: ignore[arg-type]
    if not debug:
        app.add_exception_handler(Exception, unhandled_exception_handler)

