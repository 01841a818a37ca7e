"""
Saved view schemas.

Filters are accepted as any JSON object and stored in canonical form.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from src.models.enums import SavedViewType
from src.schemas.common import CamelModel


class SavedViewCreate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    view_type: SavedViewType
    filters: dict[str, Any] | None = None
    is_default: bool = False


class SavedViewUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    filters: dict[str, Any] | None = None
    is_default: bool | None = None


class SavedViewResponse(CamelModel):
    id: uuid.UUID
    name: str
    view_type: SavedViewType
    filters: dict[str, Any]
    is_default: bool
    created_at: datetime
    updated_at: datetime
