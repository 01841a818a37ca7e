"""
Comment and activity log schemas.
"""

import uuid
from datetime import datetime

from src.models.enums import ParentType
from src.schemas.common import CamelModel
from src.schemas.user import UserSummary


class CommentCreate(CamelModel):
    # Optional so that a missing value answers "content is required"
    content: str | None = None


class CommentResponse(CamelModel):
    id: uuid.UUID
    content: str
    user: UserSummary
    created_at: datetime


class ActivityLogResponse(CamelModel):
    id: uuid.UUID
    content: str
    user: UserSummary | None = None
    parent_id: str
    parent_type: ParentType
    created_at: datetime
