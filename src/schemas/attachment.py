"""
Attachment schemas shared by reports, tickets and ticket reviews.
"""

import uuid
from datetime import datetime

from pydantic import Field

from src.schemas.common import CamelModel


class AttachmentCreate(CamelModel):
    """Metadata of a file already uploaded to object storage."""

    filename: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=1024)
    file_type: str | None = Field(default=None, max_length=100)
    file_size: int | None = Field(default=None, ge=0)


class AttachmentResponse(CamelModel):
    id: uuid.UUID
    filename: str
    url: str
    file_type: str | None = None
    file_size: int | None = None
    created_at: datetime
