"""
Service layer for business logic.

This package provides service classes that implement business logic,
coordinate between repositories, and handle transaction management.
"""

from src.services.activity_log_service import ActivityLogService
from src.services.attachment_service import AttachmentService
from src.services.audit_service import AuditService
from src.services.auth_service import AuthService
from src.services.category_service import CategoryService
from src.services.comment_service import CommentService
from src.services.dashboard_service import DashboardService
from src.services.id_service import IdService
from src.services.location_service import LocationService
from src.services.notification_service import NotificationService
from src.services.permission_service import PermissionService
from src.services.report_service import ReportService
from src.services.saved_view_service import SavedViewService
from src.services.ticket_service import TicketService
from src.services.user_service import UserService

__all__ = [
    "ActivityLogService",
    "AttachmentService",
    "AuditService",
    "AuthService",
    "CategoryService",
    "CommentService",
    "DashboardService",
    "IdService",
    "LocationService",
    "NotificationService",
    "PermissionService",
    "ReportService",
    "SavedViewService",
    "TicketService",
    "UserService",
]
