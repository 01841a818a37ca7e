"""
Report Pydantic schemas for API request/response handling.

This module provides:
- Report creation and partial update schemas
- List filter parameters
- List and detail response schemas
- The public feed item
"""

import uuid
from datetime import datetime

from pydantic import EmailStr, Field

from src.models.enums import Priority, ReportStatus
from src.schemas.attachment import AttachmentCreate, AttachmentResponse
from src.schemas.comment import ActivityLogResponse, CommentResponse
from src.schemas.common import CamelModel, SortField, SortOrder
from src.schemas.reference import CategorySummary, LocationSummary
from src.schemas.user import UserSummary


class ReportCreate(CamelModel):
    """
    Schema for filing a report.

    ``title`` is optional here so that a missing title answers with the
    same "title is required" error as a blank one.
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    assignee_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    location_id: uuid.UUID | None = None
    contact_phone: str | None = Field(default=None, max_length=50)
    contact_email: EmailStr | None = None
    attachments: list[AttachmentCreate] = Field(default_factory=list)
    ticket_ids: list[str] = Field(default_factory=list)


class ReportUpdate(CamelModel):
    """Partial update: only fields present in the request are applied."""

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    status: ReportStatus | None = None
    priority: Priority | None = None
    assignee_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    location_id: uuid.UUID | None = None
    contact_phone: str | None = Field(default=None, max_length=50)
    contact_email: EmailStr | None = None
    ticket_ids: list[str] | None = None


class ReportFilterParams(CamelModel):
    """Filters of the report list."""

    status: list[ReportStatus] = Field(default_factory=list)
    priority: list[Priority] = Field(default_factory=list)
    category_ids: list[uuid.UUID] = Field(default_factory=list)
    assignee_id: uuid.UUID | None = None
    creator_id: uuid.UUID | None = None
    location_ids: list[uuid.UUID] = Field(default_factory=list)
    search: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sort_field: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


class ReportListItem(CamelModel):
    id: str
    title: str
    status: ReportStatus
    priority: Priority
    creator: UserSummary
    assignee: UserSummary | None = None
    category: CategorySummary | None = None
    location: LocationSummary | None = None
    created_at: datetime
    updated_at: datetime


class ReportResponse(ReportListItem):
    """Full report with its discussion, files, history and ticket links."""

    description: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    comments: list[CommentResponse] = Field(default_factory=list)
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    activity_logs: list[ActivityLogResponse] = Field(default_factory=list)
    ticket_ids: list[str] = Field(default_factory=list)


class PublicReport(CamelModel):
    """Report as shown in the anonymous feed: no people, no contact details."""

    id: str
    title: str
    description: str | None = None
    location: LocationSummary | None = None
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    created_at: datetime
