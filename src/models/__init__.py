"""
Database models for the Ticketdesk API.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure every table is registered on
Base.metadata (Alembic and the test suite rely on it).
"""

from src.models.activity_log import ActivityLog
from src.models.attachment import Attachment
from src.models.audit_log import AuditAction, AuditLog, AuditStatus
from src.models.base import Base
from src.models.category import Category
from src.models.comment import Comment
from src.models.enums import (
    AttachmentParentType,
    ParentType,
    Priority,
    ReportStatus,
    SavedViewType,
    TicketStatus,
)
from src.models.id_sequence import IdSequence
from src.models.location import Location
from src.models.mixins import SoftDeleteMixin, TimestampMixin
from src.models.notification import Notification
from src.models.report import Report, ReportTicket
from src.models.saved_view import SavedView
from src.models.ticket import Ticket, TicketReview
from src.models.user import Permission, Role, RolePermission, User, UserRole

__all__ = [
    # Base
    "Base",
    # Mixins
    "TimestampMixin",
    "SoftDeleteMixin",
    # Identity and authorization
    "User",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
    # Audit
    "AuditLog",
    "AuditAction",
    "AuditStatus",
    # Work items
    "Report",
    "ReportTicket",
    "Ticket",
    "TicketReview",
    "Comment",
    "Attachment",
    "ActivityLog",
    "Notification",
    "SavedView",
    # Reference data
    "Category",
    "Location",
    "IdSequence",
    # Enums
    "TicketStatus",
    "ReportStatus",
    "Priority",
    "SavedViewType",
    "ParentType",
    "AttachmentParentType",
]
