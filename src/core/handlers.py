"""
Exception handlers for FastAPI application.

Every error leaves the API in the same envelope:

    {"success": false, "error": "<message>", "code": "<CODE>",
     "details": ..., "meta": {"request_id": "..."}}

This module provides:
- Custom application exception handler (AppException)
- Pydantic validation error handler (RequestValidationError)
- Starlette HTTP exception handler (404 routes, 405 with Allow header)
- General unhandled exception handler (Exception)
- Rate limit exceeded handler (RateLimitExceeded)
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.config import settings
from src.exceptions import AppException

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_body(
    request: Request,
    message: str,
    code: str,
    details: Any = None,
) -> dict[str, Any]:
    """Build the error envelope shared by all handlers."""
    return {
        "success": False,
        "error": message,
        "code": code,
        "details": details or {},
        "meta": {"request_id": _request_id(request)},
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Converts AppException to proper HTTP responses with consistent format.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.error_code} - {exc.message} "
        f"(request_id={_request_id(request)})"
    )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.message, exc.error_code, exc.details),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Malformed or missing fields are client errors and answered with 400.
    """
    logger.warning(
        f"Validation error: {exc.errors()} (request_id={_request_id(request)})"
    )

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(request, "Request validation failed", "VALIDATION_ERROR", errors),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Wrap framework-raised HTTP errors (unknown route, wrong method) in the envelope.

    Starlette attaches the ``Allow`` header to 405 errors; it is passed through.
    """
    code = {
        status.HTTP_404_NOT_FOUND: "NOT_FOUND",
        status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    }.get(exc.status_code, "HTTP_ERROR")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, str(exc.detail), code),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full error and returns a generic error response to the client
    (internal details are only exposed in debug mode).
    """
    logger.error(
        f"Unexpected error: {str(exc)} (request_id={_request_id(request)})",
        exc_info=True,
    )

    message = str(exc) if settings.debug else "An unexpected error occurred. Please contact support."
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, message, "INTERNAL_ERROR"),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Handle rate limit exceeded errors.

    Returns 429 status with retry information.
    """
    logger.warning(
        f"Rate limit exceeded: {request.client.host if request.client else 'unknown'} "
        f"(request_id={_request_id(request)})"
    )

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(
            request,
            "Rate limit exceeded. Please try again later.",
            "RATE_LIMIT_EXCEEDED",
        ),
    )
