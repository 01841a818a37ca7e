"""
Ticket Pydantic schemas for API request/response handling.

This module provides:
- Ticket creation, partial update and review schemas
- List filter parameters
- List and detail response schemas
"""

import uuid
from datetime import datetime

from pydantic import Field

from src.models.enums import Priority, TicketStatus
from src.schemas.attachment import AttachmentCreate, AttachmentResponse
from src.schemas.comment import ActivityLogResponse, CommentResponse
from src.schemas.common import CamelModel, SortField, SortOrder
from src.schemas.user import UserSummary

# Literal accepted in assigneeIds to match tickets nobody has claimed
UNASSIGNED = "UNASSIGNED"


class RoleSummary(CamelModel):
    id: uuid.UUID
    name: str


class TicketCreate(CamelModel):
    """Schema for opening a ticket. Title and description are required."""

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    role_id: uuid.UUID | None = None
    assignee_id: uuid.UUID | None = None
    report_ids: list[str] = Field(default_factory=list)
    attachments: list[AttachmentCreate] = Field(default_factory=list)


class TicketUpdate(CamelModel):
    """Partial update: only fields present in the request are applied."""

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    status: TicketStatus | None = None
    priority: Priority | None = None
    role_id: uuid.UUID | None = None
    assignee_id: uuid.UUID | None = None
    report_ids: list[str] | None = None


class TicketReviewCreate(CamelModel):
    content: str | None = None
    final_status: TicketStatus | None = None
    attachments: list[AttachmentCreate] = Field(default_factory=list)


class TicketFilterParams(CamelModel):
    """
    Filters of the ticket list.

    ``assignee_ids`` holds user ids as strings plus, optionally, the literal
    ``UNASSIGNED``.
    """

    status: list[TicketStatus] = Field(default_factory=list)
    priority: list[Priority] = Field(default_factory=list)
    assignee_ids: list[str] = Field(default_factory=list)
    role_ids: list[uuid.UUID] = Field(default_factory=list)
    creator_ids: list[uuid.UUID] = Field(default_factory=list)
    location_ids: list[uuid.UUID] = Field(default_factory=list)
    search: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sort_field: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


class TicketListItem(CamelModel):
    id: str
    title: str
    status: TicketStatus
    priority: Priority
    creator: UserSummary
    assignee: UserSummary | None = None
    role: RoleSummary | None = None
    created_at: datetime
    updated_at: datetime


class TicketReviewResponse(CamelModel):
    id: uuid.UUID
    content: str
    creator: UserSummary
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    created_at: datetime


class TicketResponse(TicketListItem):
    """Full ticket with reviews, discussion, files, history and report links."""

    description: str
    reviews: list[TicketReviewResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    activity_logs: list[ActivityLogResponse] = Field(default_factory=list)
    report_ids: list[str] = Field(default_factory=list)
