"""
AuditLog model for the administrative audit trail.

Records security-relevant actions: logins, user management, role and
permission changes. Audit logs are WRITE-ONCE; nothing updates or deletes
them after creation. Work-item history lives in ActivityLog instead.
"""

import enum
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.user import User


class AuditAction(str, enum.Enum):
    """Enumeration of audited action types."""

    # Authentication actions
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    REGISTER = "REGISTER"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"

    # User management
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ROLE_ASSIGN = "ROLE_ASSIGN"

    # Role management
    ROLE_CREATE = "ROLE_CREATE"
    ROLE_UPDATE = "ROLE_UPDATE"
    ROLE_DELETE = "ROLE_DELETE"
    ROLE_RESET = "ROLE_RESET"

    # Authorization actions
    PERMISSION_GRANT = "PERMISSION_GRANT"
    PERMISSION_REVOKE = "PERMISSION_REVOKE"


class AuditStatus(str, enum.Enum):
    """Status of the audited action."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class AuditLog(Base):
    """
    Immutable record of one administrative action.

    Attributes:
        user_id: User who performed the action (NULL for system actions)
        action: Type of action performed
        entity_type: Type of entity affected (e.g. "user", "role")
        entity_id: Identifier of the affected entity, as text
        old_values / new_values: JSONB snapshots around the change
        description: Human-readable description
        ip_address / user_agent / request_id: Request context
        status: SUCCESS or FAILURE
        error_message: Reason for a FAILURE
        created_at: When the action occurred

    Example:
        audit_log = AuditLog(
            user_id=admin.id,
            action=AuditAction.PERMISSION_GRANT,
            entity_type="role",
            entity_id=str(role.id),
            new_values={"granted": ["view_reports"]},
        )
    """

    __tablename__ = "audit_logs"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action_enum"),
        nullable=False,
        index=True,
    )

    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    old_values: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    new_values: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Request context
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    request_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    status: Mapped[AuditStatus] = mapped_column(
        Enum(AuditStatus, name="audit_status_enum"),
        nullable=False,
        default=AuditStatus.SUCCESS,
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )

    user: Mapped[Optional["User"]] = relationship("User", lazy="selectin")

    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id", "created_at"),
        Index("ix_audit_logs_action_date", "action", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"AuditLog(id={self.id}, user_id={self.user_id}, action={self.action}, "
            f"entity_type={self.entity_type}, entity_id={self.entity_id})"
        )
