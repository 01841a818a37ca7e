"""
Common Pydantic schemas for API request/response handling.

This module provides:
- The camelCase base model every API schema derives from
- Pagination parameters and metadata
- Sorting parameters
- The success envelope wrappers
"""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.config import settings

# Type variable for generic responses
DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """
    Base schema using camelCase on the wire and snake_case in Python.

    ``populate_by_name`` lets services build schemas with field names while
    clients send and receive aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SortOrder(str, Enum):
    """
    Sort direction for list queries.

    Values:
        ASC: Ascending order (A-Z, 0-9, oldest first)
        DESC: Descending order (Z-A, 9-0, newest first)
    """

    ASC = "asc"
    DESC = "desc"


class SortField(str, Enum):
    """Sortable columns shared by the report and ticket lists."""

    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"
    PRIORITY = "priority"
    STATUS = "status"


class SearchResult(BaseModel, Generic[DataT]):
    """
    Internal search result container.

    Used for service-to-route communication. Not exposed directly to API.
    Routes convert this to PaginatedResponse for HTTP responses.
    """

    items: list[DataT]
    total: int

    model_config = ConfigDict(from_attributes=True, arbitrary_types_allowed=True)


class PaginationParams(CamelModel):
    """
    Query parameters for paginated list endpoints.

    Attributes:
        page: Page number (1-indexed)
        page_size: Number of items per page (capped by MAX_PAGE_SIZE)
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=20,
        ge=1,
        le=settings.max_page_size,
        description="Number of items per page",
    )

    @property
    def offset(self) -> int:
        """
        SQL OFFSET for the page.

        Example:
            >>> PaginationParams(page=2, page_size=20).offset
            20
        """
        return (self.page - 1) * self.page_size

    @staticmethod
    def calculate_total_pages(total: int, page_size: int) -> int:
        """
        Total pages for ``total`` items (0 if no items).

        Example:
            >>> PaginationParams.calculate_total_pages(95, 20)
            5
        """
        return (total + page_size - 1) // page_size if total > 0 else 0


class PaginationMeta(CamelModel):
    """Metadata for paginated responses."""

    total: int = Field(description="Total number of items")
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Number of items per page")
    total_pages: int = Field(description="Total number of pages")

    @classmethod
    def build(cls, total: int, pagination: PaginationParams) -> "PaginationMeta":
        return cls(
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=PaginationParams.calculate_total_pages(total, pagination.page_size),
        )


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Success envelope: ``{"success": true, "data": ...}``.

    Errors use the matching failure envelope rendered by core.handlers.
    """

    success: bool = True
    data: DataT


class PaginatedResponse(BaseModel, Generic[DataT]):
    """Success envelope for list endpoints, with pagination metadata."""

    success: bool = True
    data: list[DataT]
    meta: PaginationMeta


class MessageData(CamelModel):
    """Payload of endpoints that only acknowledge an action."""

    message: str
