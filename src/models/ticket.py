"""
Ticket and TicketReview models.

A ticket is a unit of work dispatched to a role. Members of the role claim
it, work it, and submit reviews that close it out. The primary key is the
sequential id issued by IdService (``W`` prefix).
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base
from src.models.enums import Priority, TicketStatus
from src.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from src.models.user import Role, User


class Ticket(Base, TimestampMixin):
    """
    Work ticket.

    Attributes:
        id: Sequential id, e.g. "W26101800001"
        title / description: Both required
        status: TicketStatus, PENDING on creation
        priority: Priority
        creator_id: Who opened the ticket
        assignee_id: Who is working it (NULL while unclaimed)
        role_id: Team the ticket is dispatched to
    """

    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[TicketStatus] = mapped_column(
        Enum(TicketStatus, name="ticket_status_enum"),
        nullable=False,
        default=TicketStatus.PENDING,
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
    role_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    creator: Mapped["User"] = relationship("User", foreign_keys=[creator_id], lazy="selectin")
    assignee: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assignee_id], lazy="selectin"
    )
    role: Mapped[Optional["Role"]] = relationship("Role", lazy="selectin")

    def __repr__(self) -> str:
        return f"Ticket(id={self.id}, status={self.status})"


class TicketReview(Base, TimestampMixin):
    """Work report submitted against a ticket, optionally closing it out."""

    __tablename__ = "ticket_reviews"

    ticket_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("tickets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    creator: Mapped["User"] = relationship("User", lazy="selectin")
