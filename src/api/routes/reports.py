"""
Report API routes.

This module provides:
- GET/POST /api/reports - List (filtered, sorted, paginated) and file reports
- POST /api/reports/export - The filtered list as an xlsx workbook
- GET/PUT/DELETE /api/reports/{report_id}
- GET/POST /api/reports/{report_id}/comments
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    AuthContext,
    Pagination,
    ReportServiceDep,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.models.enums import Priority, ReportStatus
from src.schemas.comment import CommentCreate, CommentResponse
from src.schemas.common import (
    ApiResponse,
    MessageData,
    PaginatedResponse,
    PaginationMeta,
    SortField,
    SortOrder,
)
from src.schemas.report import (
    ReportCreate,
    ReportFilterParams,
    ReportListItem,
    ReportResponse,
    ReportUpdate,
)
from src.services.spreadsheet import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

can_view = require_permissions(P.VIEW_REPORTS, P.VIEW_ALL_REPORTS)


def report_filters(
    status: list[ReportStatus] = Query([], description="Status filter (repeatable)"),
    priority: list[Priority] = Query([], description="Priority filter (repeatable)"),
    category_ids: list[uuid.UUID] = Query(
        [], alias="categoryIds", description="Categories; descendants are included"
    ),
    assignee_id: uuid.UUID | None = Query(None, alias="assigneeId"),
    creator_id: uuid.UUID | None = Query(None, alias="creatorId"),
    location_ids: list[uuid.UUID] = Query([], alias="locationIds"),
    search: str | None = Query(None, description="Match title, description or location"),
    start_date: datetime | None = Query(None, alias="startDate", description="Created at or after"),
    end_date: datetime | None = Query(None, alias="endDate", description="Created at or before"),
    sort_field: SortField = Query(SortField.CREATED_AT, alias="sortField"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> ReportFilterParams:
    return ReportFilterParams(
        status=status,
        priority=priority,
        category_ids=category_ids,
        assignee_id=assignee_id,
        creator_id=creator_id,
        location_ids=location_ids,
        search=search,
        start_date=start_date,
        end_date=end_date,
        sort_field=sort_field,
        sort_order=sort_order,
    )


@router.get("", response_model=PaginatedResponse[ReportListItem], summary="List reports")
async def list_reports(
    report_service: ReportServiceDep,
    pagination: Pagination,
    filters: ReportFilterParams = Depends(report_filters),
    auth: AuthContext = Depends(can_view),
) -> PaginatedResponse[ReportListItem]:
    reports, total = await report_service.list_reports(filters, pagination)
    return PaginatedResponse(
        data=[ReportListItem.model_validate(report) for report in reports],
        meta=PaginationMeta.build(total, pagination),
    )


@router.post("/export", summary="Export reports to Excel")
async def export_reports(
    filters: ReportFilterParams,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(require_permissions(P.EXPORT_REPORTS)),
) -> Response:
    content = await report_service.export_reports(filters, auth.user)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=reports.xlsx"},
    )


@router.post(
    "",
    response_model=ApiResponse[ReportResponse],
    status_code=status.HTTP_201_CREATED,
    summary="File a report",
)
async def create_report(
    data: ReportCreate,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(require_permissions(P.CREATE_REPORTS)),
) -> ApiResponse[ReportResponse]:
    """
    The report id is a sequential ``R<yymmdd><nnnnn>``; status starts UNCONFIRMED.

    Raises:
        400: Missing title, unknown assignee or ticket
    """
    report = await report_service.create_report(data, auth.user)
    return ApiResponse(data=await report_service.get_report(report.id))


@router.get("/{report_id}", response_model=ApiResponse[ReportResponse], summary="Get a report")
async def get_report(
    report_id: str,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(can_view),
) -> ApiResponse[ReportResponse]:
    return ApiResponse(data=await report_service.get_report(report_id))


@router.put("/{report_id}", response_model=ApiResponse[ReportResponse], summary="Update a report")
async def update_report(
    report_id: str,
    data: ReportUpdate,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(
        require_permissions(P.EDIT_REPORTS, P.PROCESS_REPORTS, P.REVIEW_REPORTS)
    ),
) -> ApiResponse[ReportResponse]:
    report = await report_service.update_report(report_id, data, auth.user)
    return ApiResponse(data=await report_service.get_report(report.id))


@router.delete(
    "/{report_id}",
    response_model=ApiResponse[MessageData],
    summary="Delete a report",
)
async def delete_report(
    report_id: str,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(require_permissions(P.DELETE_REPORTS)),
) -> ApiResponse[MessageData]:
    await report_service.delete_report(report_id, auth.user)
    return ApiResponse(data=MessageData(message=f"Report {report_id} deleted"))


@router.get(
    "/{report_id}/comments",
    response_model=ApiResponse[list[CommentResponse]],
    summary="List report comments",
)
async def list_comments(
    report_id: str,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(require_permissions(P.VIEW_REPORTS)),
) -> ApiResponse[list[CommentResponse]]:
    comments = await report_service.list_comments(report_id)
    return ApiResponse(data=[CommentResponse.model_validate(c) for c in comments])


@router.post(
    "/{report_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a report",
)
async def add_comment(
    report_id: str,
    data: CommentCreate,
    report_service: ReportServiceDep,
    auth: AuthContext = Depends(require_permissions(P.VIEW_REPORTS)),
) -> ApiResponse[CommentResponse]:
    """Notifies the creator, the assignee and earlier commenters, except the author."""
    comment = await report_service.add_comment(report_id, data.content, auth.user)
    return ApiResponse(data=CommentResponse.model_validate(comment))
