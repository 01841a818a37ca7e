"""
FastAPI dependencies for authentication and authorization.

This module provides:
- Current user extraction from JWT
- The permission guard (``require_permissions``)
- Pagination query parameters
- Request metadata for audit entries
- Service factories bound to the request session
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.database import get_db
from src.core.permissions import PermissionName, normalize_permission
from src.core.security import TOKEN_TYPE_ACCESS, decode_token, verify_token_type
from src.exceptions import (
    AuthenticationError,
    InsufficientPermissionsError,
    InternalError,
    InvalidTokenError,
)
from src.models.user import User
from src.repositories.user_repository import UserRepository
from src.schemas.common import PaginationParams
from src.services import (
    ActivityLogService,
    AuditService,
    AuthService,
    CategoryService,
    DashboardService,
    LocationService,
    NotificationService,
    PermissionService,
    ReportService,
    SavedViewService,
    TicketService,
    UserService,
)

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI - this adds the padlock icon
security = HTTPBearer(
    scheme_name="Bearer",
    description="Enter your JWT access token",
    auto_error=False,
)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to extract and validate current user from JWT access token.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Decodes and validates JWT
    3. Verifies token is an access token
    4. Retrieves the live (not soft deleted) user from database

    Raises:
        AuthenticationError (401): If the token is missing
        InvalidTokenError (401): If the token is invalid or the user is gone
    """
    if not credentials:
        logger.warning("Authentication failed: missing Bearer token")
        raise AuthenticationError("Missing authentication credentials")

    try:
        token_data = decode_token(credentials.credentials)
    except JWTError as e:
        logger.warning(f"Authentication failed: invalid JWT - {e}")
        raise InvalidTokenError() from e

    if not verify_token_type(token_data, TOKEN_TYPE_ACCESS):
        logger.warning("Authentication failed: wrong token type")
        raise InvalidTokenError("Invalid token type")

    user_id_str = token_data.get("sub")
    if not user_id_str:
        logger.warning("Authentication failed: missing user ID in token")
        raise InvalidTokenError("Invalid token payload")

    try:
        user_id = uuid.UUID(user_id_str)
    except ValueError as e:
        logger.warning(f"Authentication failed: invalid user ID format - {user_id_str}")
        raise InvalidTokenError("Invalid token payload") from e

    user = await UserRepository(db).get_by_id(user_id)
    if user is None or user.deleted_at is not None:
        logger.warning(f"Authentication failed: user not found - {user_id}")
        raise InvalidTokenError("User not found")

    return user


@dataclass
class AuthContext:
    """Identity admitted by the permission guard."""

    user: User
    roles: list[str] = field(default_factory=list)
    permissions: set[str] = field(default_factory=set)

    def has(self, *permissions: str | PermissionName) -> bool:
        return any(normalize_permission(p) in self.permissions for p in permissions)


def require_permissions(*required: str | PermissionName) -> Callable[..., Any]:
    """
    Build a dependency admitting callers holding ANY of ``required``.

    Permissions are re-read from the role store on every request, so a grant
    or revoke takes effect without re-issuing tokens.

    Usage:
        @router.get("/tickets")
        async def list_tickets(
            auth: AuthContext = Depends(require_permissions("view_tickets", "view_all_tickets"))
        ):
            ...
    """
    if not required:
        raise ValueError("require_permissions needs at least one permission")
    required_names = frozenset(normalize_permission(p) for p in required)

    async def guard(
        request: Request,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ) -> AuthContext:
        try:
            permissions = await PermissionService(db).get_effective_permissions(current_user.id)
        except Exception as e:
            logger.error(
                f"Permission lookup failed for user {current_user.id}: {e}", exc_info=True
            )
            raise InternalError("Unable to resolve permissions") from e

        if permissions.isdisjoint(required_names):
            logger.warning(
                f"Access denied: user {current_user.id} lacks any of "
                f"{sorted(required_names)} for {request.method} {request.url.path}"
            )
            raise InsufficientPermissionsError(required_names)

        roles = [name for name in [current_user.primary_role_name] if name]
        roles.extend(current_user.additional_role_names)

        request.state.user = current_user
        request.state.roles = roles
        request.state.permissions = permissions
        return AuthContext(user=current_user, roles=roles, permissions=permissions)

    return guard


@dataclass
class RequestMeta:
    """Request metadata recorded on audit entries."""

    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    def as_kwargs(self) -> dict[str, str | None]:
        return {
            "request_id": self.request_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }


def request_context(request: Request) -> RequestMeta:
    return RequestMeta(
        request_id=getattr(request.state, "request_id", None),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def pagination_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(
        20,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description=f"Items per page (max {settings.max_page_size})",
    ),
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


# ============================================================================
# Service Dependencies
# ============================================================================


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    return PermissionService(db)


def get_report_service(db: AsyncSession = Depends(get_db)) -> ReportService:
    return ReportService(db)


def get_ticket_service(db: AsyncSession = Depends(get_db)) -> TicketService:
    return TicketService(db)


def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_location_service(db: AsyncSession = Depends(get_db)) -> LocationService:
    return LocationService(db)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_saved_view_service(db: AsyncSession = Depends(get_db)) -> SavedViewService:
    return SavedViewService(db)


def get_dashboard_service(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


def get_activity_log_service(db: AsyncSession = Depends(get_db)) -> ActivityLogService:
    return ActivityLogService(db)


# Convenience type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
Pagination = Annotated[PaginationParams, Depends(pagination_params)]
ClientMeta = Annotated[RequestMeta, Depends(request_context)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]
PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
LocationServiceDep = Annotated[LocationService, Depends(get_location_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
SavedViewServiceDep = Annotated[SavedViewService, Depends(get_saved_view_service)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
ActivityLogServiceDep = Annotated[ActivityLogService, Depends(get_activity_log_service)]
