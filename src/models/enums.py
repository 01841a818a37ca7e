"""
Enums for the ticket and report models.

These enums are stored as PostgreSQL ENUM types and reused by the pydantic
schemas, so API values and database values are the same strings.
"""

import enum


class TicketStatus(str, enum.Enum):
    """
    Lifecycle of a work ticket.

    PENDING -> IN_PROGRESS (claimed or assigned) -> COMPLETED | FAILED
    COMPLETED -> VERIFIED | VERIFICATION_FAILED (review by a verifier)
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    VERIFIED = "VERIFIED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"


class ReportStatus(str, enum.Enum):
    """Lifecycle of an incoming report."""

    UNCONFIRMED = "UNCONFIRMED"
    PROCESSING = "PROCESSING"
    REJECTED = "REJECTED"
    PENDING_REVIEW = "PENDING_REVIEW"
    REVIEWED = "REVIEWED"
    RETURNED = "RETURNED"


class Priority(str, enum.Enum):
    """Urgency shared by reports and tickets."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class SavedViewType(str, enum.Enum):
    """List screen a saved view belongs to."""

    REPORT = "REPORT"
    TICKET = "TICKET"


class ParentType(str, enum.Enum):
    """Owner of an activity log entry or notification link."""

    REPORT = "REPORT"
    TICKET = "TICKET"


class AttachmentParentType(str, enum.Enum):
    """Owner of an attachment. Ticket reviews can carry files too."""

    REPORT = "REPORT"
    TICKET = "TICKET"
    TICKET_REVIEW = "TICKET_REVIEW"


# Ticket statuses counted as resolved on the dashboard
RESOLVED_TICKET_STATUSES = (TicketStatus.COMPLETED, TicketStatus.VERIFIED)

# Statuses a ticket review may set as its outcome
REVIEW_FINAL_STATUSES = (
    TicketStatus.COMPLETED,
    TicketStatus.FAILED,
    TicketStatus.VERIFIED,
    TicketStatus.VERIFICATION_FAILED,
)
