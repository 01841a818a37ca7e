"""
Category and location schemas.
"""

import uuid

from pydantic import Field

from src.schemas.common import CamelModel


class CategorySummary(CamelModel):
    id: uuid.UUID
    name: str
    level: int


class CategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    parent_id: uuid.UUID | None = None
    level: int
    sort_order: int


class CategoryTreeNode(CategoryResponse):
    children: list["CategoryTreeNode"] = Field(default_factory=list)


class CategoryCreate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    parent_id: uuid.UUID | None = None


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=100)


class SortOrderItem(CamelModel):
    id: uuid.UUID
    sort_order: int = Field(ge=0)


class LocationSummary(CamelModel):
    id: uuid.UUID
    name: str


class LocationResponse(CamelModel):
    id: uuid.UUID
    name: str
    is_active: bool
    sort_order: int


class LocationCreate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    is_active: bool = True


class LocationUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    is_active: bool | None = None
