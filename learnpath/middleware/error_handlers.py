"""Exception handlers that turn errors into one JSON envelope.

Every handled error is returned as
`{"error": {"category", "code", "detail", "suggestions"?, "metadata"?}}`.
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from learnpath.exceptions import (
    AuthenticationRequiredError,
    MergeInProgressError,
    ResourceNotFoundError,
)


logger = logging.getLogger(__name__)

# Headers worth keeping in error logs; everything else may carry credentials
LOGGED_HEADERS = ("user-agent", "x-user-id", "x-guest-id", "content-type")


class ErrorCategory:
    """Error category constants."""

    VALIDATION = "VALIDATION_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT_ERROR"
    STORAGE = "STORAGE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


class ErrorCode:
    """Specific error codes for client handling."""

    INVALID_INPUT = "INVALID_INPUT"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    NOT_FOUND = "NOT_FOUND"
    MERGE_IN_PROGRESS = "MERGE_IN_PROGRESS"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    INTERNAL = "INTERNAL_ERROR"


def format_error_response(
    category: str,
    code: str,
    detail: str,
    status_code: int,
    suggestions: list[str] | None = None,
    metadata: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the error envelope."""
    error: dict[str, Any] = {"category": category, "code": code, "detail": detail}
    if suggestions:
        error["suggestions"] = suggestions
    if metadata:
        error["metadata"] = metadata
    return JSONResponse(status_code=status_code, content={"error": error})


async def handle_validation_errors(request: Request, exc: Exception) -> JSONResponse:
    """Handle pydantic errors raised outside request parsing and domain validation errors."""
    logger.info(f"Validation error on {request.method} {request.url.path}: {exc}")

    if isinstance(exc, PydanticValidationError):
        errors = [
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return format_error_response(
            category=ErrorCategory.VALIDATION,
            code=ErrorCode.INVALID_INPUT,
            detail="Invalid data",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            metadata={"errors": errors},
        )

    return format_error_response(
        category=ErrorCategory.VALIDATION,
        code=ErrorCode.INVALID_INPUT,
        detail=str(exc),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def handle_not_found_errors(_request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    """Handle unknown catalog items, collections and profiles."""
    return format_error_response(
        category=ErrorCategory.RESOURCE_NOT_FOUND,
        code=ErrorCode.NOT_FOUND,
        detail=exc.message,
        status_code=status.HTTP_404_NOT_FOUND,
        metadata={"resource_type": exc.resource_type, "resource_id": exc.resource_id},
    )


async def handle_authentication_errors(request: Request, exc: AuthenticationRequiredError) -> JSONResponse:
    """Handle guest requests to endpoints that need a signed-in user."""
    logger.info(f"Unauthenticated request to {request.method} {request.url.path}")
    return format_error_response(
        category=ErrorCategory.AUTHENTICATION,
        code=ErrorCode.AUTH_REQUIRED,
        detail=exc.message,
        status_code=status.HTTP_401_UNAUTHORIZED,
        suggestions=["Sign in and send the X-User-Id header"],
    )


async def handle_merge_conflict_errors(request: Request, exc: MergeInProgressError) -> JSONResponse:
    """Handle a second sign-in merge while one is running."""
    logger.info(f"Rejected concurrent merge on {request.method} {request.url.path}: {exc.message}")
    return format_error_response(
        category=ErrorCategory.CONFLICT,
        code=ErrorCode.MERGE_IN_PROGRESS,
        detail=exc.message,
        status_code=status.HTTP_409_CONFLICT,
        suggestions=["Wait for the running merge to finish"],
    )


async def handle_storage_errors(request: Request, exc: Exception) -> JSONResponse:
    """Handle guest storage or document store failures that escaped a service."""
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return format_error_response(
        category=ErrorCategory.STORAGE,
        code=ErrorCode.STORE_UNAVAILABLE,
        detail="Progress storage is temporarily unavailable",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        suggestions=["Please try again later"],
    )


def log_error_context(request: Request, exc: Exception, error_id: UUID | None = None) -> None:
    """Log an unhandled error with enough request context to reproduce it."""
    context = {
        "error_id": str(error_id) if error_id else None,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client_host": request.client.host if request.client else "unknown",
        "error_type": type(exc).__name__,
        "headers": {name: request.headers[name] for name in LOGGED_HEADERS if name in request.headers},
    }
    logger.error(f"Request failed: {exc}", extra={"context": context}, exc_info=exc)
