"""
Report model and its link to tickets.

Reports are filed by users (or on their behalf by customer service) and are
processed into tickets. Their primary key is the sequential, human-readable
id issued by IdService (``R`` prefix).
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base
from src.models.enums import Priority, ReportStatus
from src.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from src.models.category import Category
    from src.models.location import Location
    from src.models.user import User


class Report(Base, TimestampMixin):
    """
    Incoming report.

    Attributes:
        id: Sequential id, e.g. "R26101800001"
        title: Short summary (required)
        description: Free text
        status: ReportStatus, UNCONFIRMED on creation
        priority: Priority, MEDIUM unless given
        creator_id: Filing user
        assignee_id: User handling the report
        category_id: Leaf or inner node of the category tree
        location_id: Where the issue is
        contact_phone / contact_email: How to reach the reporter
    """

    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status_enum"),
        nullable=False,
        default=ReportStatus.UNCONFIRMED,
        index=True,
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority, name="priority_enum"),
        nullable=False,
        default=Priority.MEDIUM,
        index=True,
    )

    creator_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    location_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("locations.id"),
        nullable=True,
        index=True,
    )

    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    creator: Mapped["User"] = relationship("User", foreign_keys=[creator_id], lazy="selectin")
    assignee: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assignee_id], lazy="selectin"
    )
    category: Mapped[Optional["Category"]] = relationship("Category", lazy="selectin")
    location: Mapped[Optional["Location"]] = relationship("Location", lazy="selectin")

    def __repr__(self) -> str:
        return f"Report(id={self.id}, status={self.status})"


class ReportTicket(Base):
    """Link between a report and a ticket created from it."""

    __tablename__ = "report_tickets"

    report_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ticket_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("tickets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("report_id", "ticket_id", name="uq_report_tickets_report_ticket"),
    )
