"""
ActivityLog model: the human-readable history shown on a report or ticket.

Unlike AuditLog (security trail for administrators), activity logs are part
of the work item and are shown to everyone who can see it.
"""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base
from src.models.enums import ParentType

if TYPE_CHECKING:
    from src.models.user import User


class ActivityLog(Base):
    """One history entry, e.g. "Status changed from PENDING to IN_PROGRESS"."""

    __tablename__ = "activity_logs"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    parent_id: Mapped[str] = mapped_column(String(50), nullable=False)
    parent_type: Mapped[ParentType] = mapped_column(
        Enum(ParentType, name="parent_type_enum"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    user: Mapped[Optional["User"]] = relationship("User", lazy="selectin")

    __table_args__ = (
        Index("ix_activity_logs_parent", "parent_type", "parent_id", "created_at"),
    )
