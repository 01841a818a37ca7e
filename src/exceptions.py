"""
Custom exception classes for the Ticketdesk API.

This module defines a hierarchy of custom exceptions that map to HTTP status codes
and provide consistent error responses across the API.

Exception hierarchy:
    AppException (base, 500)
    ├── AuthenticationError (401)
    │   ├── InvalidCredentialsError
    │   └── InvalidTokenError
    ├── AuthorizationError (403)
    │   └── InsufficientPermissionsError
    ├── ResourceError
    │   ├── NotFoundError (404)
    │   ├── AlreadyExistsError (409)
    │   └── ConflictError (409)
    ├── ValidationError (400)
    │   ├── RequiredFieldError
    │   ├── UnknownPermissionError
    │   └── WeakPasswordError
    └── InternalError (500)
"""

from typing import Any, Iterable


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        status_code: HTTP status code for the error
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to the response envelope.

        Returns:
            Dictionary with success flag, message and error code
        """
        return {
            "success": False,
            "error": self.message,
            "code": self.error_code,
            "details": self.details,
        }


# =============================================================================
# Authentication Errors (401 Unauthorized)
# =============================================================================


class AuthenticationError(AppException):
    """Base class for authentication errors."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: str = "UNAUTHENTICATED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message=message, error_code="INVALID_CREDENTIALS")


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT is missing, malformed, expired or names no live user."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message=message, error_code="INVALID_TOKEN")


# =============================================================================
# Authorization Errors (403 Forbidden)
# =============================================================================


class AuthorizationError(AppException):
    """Base class for authorization errors."""

    def __init__(
        self,
        message: str = "Access forbidden",
        error_code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details,
        )


class InsufficientPermissionsError(AuthorizationError):
    """Raised when a user holds none of the permissions an action requires."""

    def __init__(
        self,
        required: Iterable[str] | None = None,
        message: str = "Insufficient permissions to perform this action",
    ) -> None:
        details = {"required": sorted(required)} if required else None
        super().__init__(
            message=message,
            error_code="INSUFFICIENT_PERMISSIONS",
            details=details,
        )


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(AppException):
    """Base class for resource-related errors."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class NotFoundError(ResourceError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = f"{resource} not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class AlreadyExistsError(ResourceError):
    """Raised when attempting to create a resource that already exists."""

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = f"{resource} already exists"
        super().__init__(
            message=message,
            status_code=409,
            error_code="ALREADY_EXISTS",
            details=details,
        )


class ConflictError(ResourceError):
    """Raised when an operation conflicts with the current state of a resource."""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


# =============================================================================
# Validation Errors (400 Bad Request)
# =============================================================================


class ValidationError(AppException):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | list[Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details,
        )


class RequiredFieldError(ValidationError):
    """Raised when a required field is missing or blank."""

    def __init__(self, *fields: str) -> None:
        names = " and ".join(fields)
        verb = "is" if len(fields) == 1 else "are"
        super().__init__(
            message=f"{names} {verb} required",
            error_code="REQUIRED_FIELD",
            details={"fields": list(fields)},
        )


class UnknownPermissionError(ValidationError):
    """Raised when a permission name is not part of the permission catalog."""

    def __init__(self, names: Iterable[str]) -> None:
        unknown = sorted(names)
        super().__init__(
            message=f"Unknown permission(s): {', '.join(unknown)}",
            error_code="UNKNOWN_PERMISSION",
            details={"unknown": unknown},
        )


class WeakPasswordError(ValidationError):
    """Raised when a password doesn't meet strength requirements."""

    def __init__(self, message: str = "Password does not meet security requirements") -> None:
        super().__init__(message=message, error_code="WEAK_PASSWORD")


# =============================================================================
# Internal Errors (500)
# =============================================================================


class InternalError(AppException):
    """Raised when a backing store or collaborator fails unexpectedly."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message=message, status_code=500, error_code="INTERNAL_ERROR")
