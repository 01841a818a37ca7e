"""
SavedView model: a named, persisted filter preset for a list screen.

Invariants enforced by the database:
- (user_id, name, view_type) is unique
- at most one row per (user_id, view_type) has is_default = true, via the
  partial unique index ``uq_saved_views_default_per_type``
"""

import uuid
from typing import Any

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.enums import SavedViewType
from src.models.mixins import TimestampMixin

DEFAULT_VIEW_INDEX = "uq_saved_views_default_per_type"
VIEW_NAME_CONSTRAINT = "uq_saved_views_user_name_type"


class SavedView(Base, TimestampMixin):
    """
    Filter preset owned by one user.

    Attributes:
        user_id: Owner
        name: Label shown in the view picker
        view_type: REPORT or TICKET
        filters: Canonical filter object (see services.view_filters)
        is_default: Applied automatically when the list screen opens
    """

    __tablename__ = "saved_views"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    view_type: Mapped[SavedViewType] = mapped_column(
        Enum(SavedViewType, name="saved_view_type_enum"),
        nullable=False,
    )
    filters: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", "view_type", name=VIEW_NAME_CONSTRAINT),
        Index(
            DEFAULT_VIEW_INDEX,
            "user_id",
            "view_type",
            unique=True,
            postgresql_where=text("is_default"),
        ),
    )

    def __repr__(self) -> str:
        return f"SavedView(id={self.id}, name={self.name}, view_type={self.view_type})"
