"""
Notification model: in-app messages addressed to one user.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.enums import ParentType
from src.models.mixins import TimestampMixin


class Notification(Base, TimestampMixin):
    """
    Message for one user, optionally linking to a report or ticket.

    Attributes:
        user_id: Recipient
        title / message: Content
        is_read: Set by the recipient
        related_id / related_type: Linked work item, if any
    """

    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    related_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    related_type: Mapped[Optional[ParentType]] = mapped_column(
        Enum(ParentType, name="parent_type_enum"),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )
