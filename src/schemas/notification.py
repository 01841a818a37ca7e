"""
Notification schemas.
"""

import uuid
from datetime import datetime

from pydantic import Field

from src.models.enums import ParentType
from src.schemas.common import CamelModel


class NotificationCreate(CamelModel):
    user_id: uuid.UUID | None = None
    title: str | None = Field(default=None, max_length=255)
    message: str | None = None
    related_id: str | None = Field(default=None, max_length=50)
    related_type: ParentType | None = None


class NotificationResponse(CamelModel):
    id: uuid.UUID
    title: str
    message: str
    is_read: bool
    related_id: str | None = None
    related_type: ParentType | None = None
    created_at: datetime


class NotificationList(CamelModel):
    items: list[NotificationResponse]
    unread_count: int


class ReadAllResult(CamelModel):
    updated: int
