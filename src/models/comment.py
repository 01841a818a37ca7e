"""
Comment model shared by reports and tickets.
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base
from src.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from src.models.user import User


class Comment(Base, TimestampMixin):
    """
    Discussion entry on exactly one report or one ticket.

    Attributes:
        content: Comment text
        user_id: Author
        report_id / ticket_id: Parent, exactly one is set
    """

    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    report_id: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    ticket_id: Mapped[Optional[str]] = mapped_column(
        String(20),
        ForeignKey("tickets.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "(report_id IS NULL) <> (ticket_id IS NULL)",
            name="single_parent",
        ),
    )
