"""
Ticket API routes.

Callers without ``view_all_tickets`` only see tickets assigned to them and
PENDING tickets dispatched to one of their roles; anything else answers 404.
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    AuthContext,
    Pagination,
    TicketServiceDep,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.models.enums import Priority, TicketStatus
from src.schemas.comment import CommentCreate, CommentResponse
from src.schemas.common import (
    ApiResponse,
    MessageData,
    PaginatedResponse,
    PaginationMeta,
    SortField,
    SortOrder,
)
from src.schemas.ticket import (
    TicketCreate,
    TicketFilterParams,
    TicketListItem,
    TicketResponse,
    TicketReviewCreate,
    TicketReviewResponse,
    TicketUpdate,
)
from src.services.spreadsheet import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["Tickets"])

can_view = require_permissions(P.VIEW_TICKETS, P.VIEW_ALL_TICKETS)


def ticket_filters(
    status: list[TicketStatus] = Query([], description="Status filter (repeatable)"),
    priority: list[Priority] = Query([], description="Priority filter (repeatable)"),
    assignee_ids: list[str] = Query(
        [], alias="assigneeIds", description="User ids, or UNASSIGNED for unclaimed tickets"
    ),
    role_ids: list[uuid.UUID] = Query([], alias="roleIds"),
    creator_ids: list[uuid.UUID] = Query([], alias="creatorIds"),
    location_ids: list[uuid.UUID] = Query(
        [], alias="locationIds", description="Matched through linked reports"
    ),
    search: str | None = Query(None),
    start_date: datetime | None = Query(None, alias="startDate", description="Created at or after"),
    end_date: datetime | None = Query(None, alias="endDate", description="Created at or before"),
    sort_field: SortField = Query(SortField.CREATED_AT, alias="sortField"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> TicketFilterParams:
    return TicketFilterParams(
        status=status,
        priority=priority,
        assignee_ids=assignee_ids,
        role_ids=role_ids,
        creator_ids=creator_ids,
        location_ids=location_ids,
        search=search,
        start_date=start_date,
        end_date=end_date,
        sort_field=sort_field,
        sort_order=sort_order,
    )


@router.get("", response_model=PaginatedResponse[TicketListItem], summary="List tickets")
async def list_tickets(
    ticket_service: TicketServiceDep,
    pagination: Pagination,
    filters: TicketFilterParams = Depends(ticket_filters),
    auth: AuthContext = Depends(can_view),
) -> PaginatedResponse[TicketListItem]:
    tickets, total = await ticket_service.list_tickets(
        filters, pagination, auth.user, auth.permissions
    )
    return PaginatedResponse(
        data=[TicketListItem.model_validate(ticket) for ticket in tickets],
        meta=PaginationMeta.build(total, pagination),
    )


@router.post("/export", summary="Export tickets to Excel")
async def export_tickets(
    filters: TicketFilterParams,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.EXPORT_TICKETS)),
) -> Response:
    """
    Every ticket matching the list filters the caller can see, unpaginated.
    The body takes the same fields as the list query string.
    """
    content = await ticket_service.export_tickets(filters, auth.user, auth.permissions)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=tickets.xlsx"},
    )


@router.post(
    "",
    response_model=ApiResponse[TicketListItem],
    status_code=status.HTTP_201_CREATED,
    summary="Open a ticket",
)
async def create_ticket(
    data: TicketCreate,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.CREATE_TICKETS)),
) -> ApiResponse[TicketListItem]:
    """
    The ticket id is a sequential ``W<yymmdd><nnnnn>``. Every member of the
    target role is notified.

    Raises:
        400: Missing title or description, unknown role, user or report
    """
    ticket = await ticket_service.create_ticket(data, auth.user)
    return ApiResponse(data=TicketListItem.model_validate(ticket))


@router.get("/{ticket_id}", response_model=ApiResponse[TicketResponse], summary="Get a ticket")
async def get_ticket(
    ticket_id: str,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(can_view),
) -> ApiResponse[TicketResponse]:
    return ApiResponse(
        data=await ticket_service.get_ticket(ticket_id, auth.user, auth.permissions)
    )


@router.put("/{ticket_id}", response_model=ApiResponse[TicketListItem], summary="Update a ticket")
async def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(
        require_permissions(
            P.EDIT_TICKETS, P.ASSIGN_TICKETS, P.COMPLETE_TICKETS, P.VERIFY_TICKETS
        )
    ),
) -> ApiResponse[TicketListItem]:
    ticket = await ticket_service.update_ticket(ticket_id, data, auth.user, auth.permissions)
    return ApiResponse(data=TicketListItem.model_validate(ticket))


@router.delete(
    "/{ticket_id}",
    response_model=ApiResponse[MessageData],
    summary="Delete a ticket",
)
async def delete_ticket(
    ticket_id: str,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.DELETE_TICKETS)),
) -> ApiResponse[MessageData]:
    await ticket_service.delete_ticket(ticket_id, auth.user)
    return ApiResponse(data=MessageData(message=f"Ticket {ticket_id} deleted"))


@router.post(
    "/{ticket_id}/claim",
    response_model=ApiResponse[TicketListItem],
    summary="Claim a pending ticket",
)
async def claim_ticket(
    ticket_id: str,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.CLAIM_TICKETS)),
) -> ApiResponse[TicketListItem]:
    """
    Raises:
        409: The ticket is not PENDING or already has an assignee
    """
    ticket = await ticket_service.claim_ticket(ticket_id, auth.user, auth.permissions)
    return ApiResponse(data=TicketListItem.model_validate(ticket))


@router.post(
    "/{ticket_id}/reviews",
    response_model=ApiResponse[TicketReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Submit a work review",
)
async def add_review(
    ticket_id: str,
    data: TicketReviewCreate,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.COMPLETE_TICKETS, P.VERIFY_TICKETS)),
) -> ApiResponse[TicketReviewResponse]:
    review = await ticket_service.add_review(ticket_id, data, auth.user, auth.permissions)
    return ApiResponse(data=TicketReviewResponse.model_validate(review))


@router.get(
    "/{ticket_id}/comments",
    response_model=ApiResponse[list[CommentResponse]],
    summary="List ticket comments",
)
async def list_comments(
    ticket_id: str,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.VIEW_TICKETS)),
) -> ApiResponse[list[CommentResponse]]:
    comments = await ticket_service.list_comments(ticket_id, auth.user, auth.permissions)
    return ApiResponse(data=[CommentResponse.model_validate(c) for c in comments])


@router.post(
    "/{ticket_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a ticket",
)
async def add_comment(
    ticket_id: str,
    data: CommentCreate,
    ticket_service: TicketServiceDep,
    auth: AuthContext = Depends(require_permissions(P.VIEW_TICKETS)),
) -> ApiResponse[CommentResponse]:
    comment = await ticket_service.add_comment(
        ticket_id, data.content, auth.user, auth.permissions
    )
    return ApiResponse(data=CommentResponse.model_validate(comment))
