"""
Location model: the places a report can be filed against.
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.mixins import TimestampMixin

LOCATION_NAME_CONSTRAINT = "uq_locations_name"


class Location(Base, TimestampMixin):
    """Reportable place, ordered by sort_order in pickers."""

    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
