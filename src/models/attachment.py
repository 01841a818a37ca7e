"""
Attachment model: metadata of a file uploaded to object storage.

The upload itself goes straight to object storage through a signed URL;
only the resulting URL and file facts are stored here.
"""

import uuid
from typing import Optional

from sqlalchemy import Enum, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.enums import AttachmentParentType
from src.models.mixins import TimestampMixin


class Attachment(Base, TimestampMixin):
    """
    File attached to a report, a ticket or a ticket review.

    parent_id holds the report/ticket id or the review UUID as text.
    """

    __tablename__ = "attachments"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    parent_id: Mapped[str] = mapped_column(String(50), nullable=False)
    parent_type: Mapped[AttachmentParentType] = mapped_column(
        Enum(AttachmentParentType, name="attachment_parent_type_enum"),
        nullable=False,
    )
    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_attachments_parent", "parent_type", "parent_id"),
    )
