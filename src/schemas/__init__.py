"""
Pydantic schemas for API request/response validation.

This package provides all Pydantic models used for:
- Request validation
- Response serialization
- API documentation
"""

from src.schemas.attachment import AttachmentCreate, AttachmentResponse
from src.schemas.audit import AuditLogResponse
from src.schemas.auth import AuthUser, LoginRequest, RegisterRequest, TokenResponse
from src.schemas.comment import ActivityLogResponse, CommentCreate, CommentResponse
from src.schemas.common import (
    ApiResponse,
    CamelModel,
    MessageData,
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    SearchResult,
    SortField,
    SortOrder,
)
from src.schemas.dashboard import DashboardMetrics, RecentTickets
from src.schemas.notification import (
    NotificationCreate,
    NotificationList,
    NotificationResponse,
    ReadAllResult,
)
from src.schemas.reference import (
    CategoryCreate,
    CategoryResponse,
    CategorySummary,
    CategoryTreeNode,
    CategoryUpdate,
    LocationCreate,
    LocationResponse,
    LocationSummary,
    LocationUpdate,
    SortOrderItem,
)
from src.schemas.report import (
    PublicReport,
    ReportCreate,
    ReportFilterParams,
    ReportListItem,
    ReportResponse,
    ReportUpdate,
)
from src.schemas.role import (
    PermissionResponse,
    RoleCreate,
    RolePermissionsUpdate,
    RoleResponse,
    RoleUpdate,
)
from src.schemas.saved_view import SavedViewCreate, SavedViewResponse, SavedViewUpdate
from src.schemas.ticket import (
    UNASSIGNED,
    RoleSummary,
    TicketCreate,
    TicketFilterParams,
    TicketListItem,
    TicketResponse,
    TicketReviewCreate,
    TicketReviewResponse,
    TicketUpdate,
)
from src.schemas.user import (
    UserCreate,
    UserFilterParams,
    UserPasswordChange,
    UserResponse,
    UserRolesResponse,
    UserRolesUpdate,
    UserSummary,
    UserUpdate,
)

__all__ = [
    # Common
    "ApiResponse",
    "CamelModel",
    "MessageData",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "SearchResult",
    "SortField",
    "SortOrder",
    # Auth and users
    "AuthUser",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserCreate",
    "UserFilterParams",
    "UserPasswordChange",
    "UserResponse",
    "UserRolesResponse",
    "UserRolesUpdate",
    "UserSummary",
    "UserUpdate",
    # Roles
    "PermissionResponse",
    "RoleCreate",
    "RolePermissionsUpdate",
    "RoleResponse",
    "RoleUpdate",
    # Work items
    "ActivityLogResponse",
    "AttachmentCreate",
    "AttachmentResponse",
    "CommentCreate",
    "CommentResponse",
    "PublicReport",
    "ReportCreate",
    "ReportFilterParams",
    "ReportListItem",
    "ReportResponse",
    "ReportUpdate",
    "UNASSIGNED",
    "RoleSummary",
    "TicketCreate",
    "TicketFilterParams",
    "TicketListItem",
    "TicketResponse",
    "TicketReviewCreate",
    "TicketReviewResponse",
    "TicketUpdate",
    # Reference data
    "CategoryCreate",
    "CategoryResponse",
    "CategorySummary",
    "CategoryTreeNode",
    "CategoryUpdate",
    "LocationCreate",
    "LocationResponse",
    "LocationSummary",
    "LocationUpdate",
    "SortOrderItem",
    # Notifications, views, dashboard, audit
    "AuditLogResponse",
    "DashboardMetrics",
    "NotificationCreate",
    "NotificationList",
    "NotificationResponse",
    "ReadAllResult",
    "RecentTickets",
    "SavedViewCreate",
    "SavedViewResponse",
    "SavedViewUpdate",
]
