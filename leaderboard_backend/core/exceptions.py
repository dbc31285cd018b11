"""
Custom exceptions and error handlers for the Leaderboards backend
Provides consistent error responses and logging
"""

import logging
from typing import Any, Dict, List, Optional

import sentry_sdk
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from leaderboard_backend.core.config import settings

logger = logging.getLogger(__name__)

VALIDATION_TITLE = "One or more validation errors occurred."

# Request errors that mean the body could not be read at all, rather than
# a well-formed body breaking a rule
MALFORMED_REQUEST_TYPES = {"json_invalid", "enum"}


class LeaderboardException(Exception):
    """Base exception for the Leaderboards application"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationException(LeaderboardException):
    """Authentication exception"""

    def __init__(
        self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTHENTICATION_ERROR",
            details=details,
        )


class AuthorizationException(LeaderboardException):
    """Authorization exception"""

    def __init__(
        self, message: str = "Insufficient permissions", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTHORIZATION_ERROR",
            details=details,
        )


class ValidationException(LeaderboardException):
    """Validation exception raised by services after the request parsed"""

    def __init__(self, errors: List[Dict[str, str]], message: str = VALIDATION_TITLE):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_ERROR",
            details={"errors": errors},
        )


class NotFoundException(LeaderboardException):
    """Resource not found exception"""

    def __init__(self, title: str = "Not Found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=title,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details,
        )


class AlreadyDeletedException(LeaderboardException):
    """Deleting something that is already deleted"""

    def __init__(self):
        super().__init__(
            message="Already Deleted",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="ALREADY_DELETED",
        )


class NotDeletedException(LeaderboardException):
    """Restoring something that was never deleted"""

    def __init__(self):
        super().__init__(
            message="Not Deleted",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_DELETED",
        )


class ConflictException(LeaderboardException):
    """A live entity already holds the requested slug"""

    def __init__(self, conflicting: Dict[str, Any]):
        super().__init__(
            message="Conflict",
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT",
            details={"conflicting": conflicting},
        )


class DuplicateException(LeaderboardException):
    """Duplicate resource exception"""

    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource} already exists",
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_ERROR",
            details=details,
        )


class StateConflictException(LeaderboardException):
    """The request is valid but the resource is in the wrong state for it"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="STATE_CONFLICT",
        )


class EmailFailedException(LeaderboardException):
    """Email delivery exception"""

    def __init__(self, message: str = "Email delivery failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="EMAIL_FAILED",
            details=details,
        )


def create_error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    Create standardized error response

    Args:
        request: FastAPI request object
        status_code: HTTP status code
        error_code: Application error code
        message: Error message
        details: Additional error details
        headers: Extra response headers

    Returns:
        JSON response with error information
    """
    error_response = {
        "error": {
            "code": error_code,
            "message": message,
            "details": details or {},
            "path": str(request.url),
            "method": request.method,
        }
    }

    # Add request ID if available
    if hasattr(request.state, "request_id"):
        error_response["error"]["request_id"] = request.state.request_id

    return JSONResponse(status_code=status_code, content=error_response, headers=headers)


async def leaderboard_exception_handler(request: Request, exc: LeaderboardException) -> JSONResponse:
    """Handle application exceptions"""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"Application exception: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": str(request.url),
        },
    )

    # Send to Sentry if configured
    if settings.SENTRY_DSN and exc.status_code >= 500:
        sentry_sdk.capture_exception(exc)

    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP exceptions (unknown routes, bad methods)"""
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={"status_code": exc.status_code, "path": str(request.url)},
    )

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code="HTTP_ERROR",
        message=str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors

    Malformed JSON and unknown enum members are reported as 400, every other
    rule violation as 422.

    Args:
        request: FastAPI request object
        exc: Validation error

    Returns:
        JSON error response with validation details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.info("Validation error", extra={"errors": errors, "path": str(request.url)})

    if any(error["type"] in MALFORMED_REQUEST_TYPES for error in errors):
        status_code = status.HTTP_400_BAD_REQUEST
        error_code = "BAD_REQUEST"
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        error_code = "VALIDATION_ERROR"

    return create_error_response(
        request=request,
        status_code=status_code,
        error_code=error_code,
        message=VALIDATION_TITLE,
        details={"errors": errors},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    logger.error(
        f"Unexpected error: {str(exc)}",
        extra={"exception_type": type(exc).__name__, "path": str(request.url)},
        exc_info=True,
    )

    # Send to Sentry if configured
    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    # Don't expose internal errors in production
    if settings.is_production():
        message = "An unexpected error occurred"
    else:
        message = str(exc)

    return create_error_response(
        request=request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_ERROR",
        message=message,
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(LeaderboardException, leaderboard_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all handler for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
