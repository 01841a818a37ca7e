"""
Anonymous API routes.

This module provides:
- GET /api/public/reports - Reports of the public categories (lost and
  found by default) with their location and photos
"""

import logging
import uuid
from enum import Enum

from fastapi import APIRouter, Query, Request

from src.api.dependencies import ReportServiceDep
from src.core.config import settings
from src.core.rate_limit import limiter
from src.schemas.common import PaginatedResponse, PaginationMeta, PaginationParams, SortOrder
from src.schemas.report import PublicReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["Public"])


class PublicSortField(str, Enum):
    CREATED_AT = "createdAt"
    ID = "id"
    LOCATION = "location"


@router.get(
    "/reports",
    response_model=PaginatedResponse[PublicReport],
    summary="Public report feed",
    description="""
    Reports filed under the public categories, newest first by default.
    No authentication; creator and assignee are never included.

    **Rate Limit:** Configurable via RATE_LIMIT_PUBLIC (default: 60/minute)
    """,
)
@limiter.limit(settings.rate_limit_public)
async def list_public_reports(
    request: Request,
    report_service: ReportServiceDep,
    location_ids: list[uuid.UUID] = Query([], alias="locationIds"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=settings.max_page_size, alias="pageSize"),
    sort_field: PublicSortField = Query(PublicSortField.CREATED_AT, alias="sortField"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> PaginatedResponse[PublicReport]:
    pagination = PaginationParams(page=page, page_size=page_size)
    reports, total = await report_service.list_public_reports(
        pagination,
        location_ids=location_ids,
        sort_field=sort_field.value,
        sort_order=sort_order.value,
    )
    return PaginatedResponse(data=reports, meta=PaginationMeta.build(total, pagination))
