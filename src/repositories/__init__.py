"""
Database repositories for the ticket desk.

This module exports all repository classes for database operations.
"""

from src.repositories.activity_log_repository import ActivityLogRepository
from src.repositories.attachment_repository import AttachmentRepository
from src.repositories.audit_repository import AuditLogRepository
from src.repositories.base import BaseRepository
from src.repositories.category_repository import CategoryRepository
from src.repositories.comment_repository import CommentRepository
from src.repositories.location_repository import LocationRepository
from src.repositories.notification_repository import NotificationRepository
from src.repositories.report_repository import ReportRepository
from src.repositories.role_repository import PermissionRepository, RoleRepository
from src.repositories.saved_view_repository import SavedViewRepository
from src.repositories.ticket_repository import TicketRepository
from src.repositories.user_repository import UserRepository

__all__ = [
    "ActivityLogRepository",
    "AttachmentRepository",
    "AuditLogRepository",
    "BaseRepository",
    "CategoryRepository",
    "CommentRepository",
    "LocationRepository",
    "NotificationRepository",
    "PermissionRepository",
    "ReportRepository",
    "RoleRepository",
    "SavedViewRepository",
    "TicketRepository",
    "UserRepository",
]
