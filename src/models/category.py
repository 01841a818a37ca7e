"""
Category model: a three-level tree used to classify reports.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.mixins import TimestampMixin

MAX_CATEGORY_LEVEL = 3
CATEGORY_NAME_CONSTRAINT = "uq_categories_name_parent"


class Category(Base, TimestampMixin):
    """
    Node of the category tree.

    Attributes:
        name: Label, unique among siblings
        parent_id: Parent node, NULL for top-level categories
        level: Depth, 1 for top-level nodes, at most MAX_CATEGORY_LEVEL
        sort_order: Position among siblings
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("name", "parent_id", name=CATEGORY_NAME_CONSTRAINT),
    )
