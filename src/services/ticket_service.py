"""
Ticket service for the ticket lifecycle.

This module provides:
- Visibility-scoped ticket listing and lookup
- Ticket creation with dispatch notifications to every member of the role
- Partial updates, claims and reviews with notifications and history
- Ticket comments and deletion
"""

import logging
import uuid
from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.db_errors import translate_integrity_error
from src.core.permissions import PermissionName
from src.exceptions import ConflictError, NotFoundError, RequiredFieldError, ValidationError
from src.models.comment import Comment
from src.models.enums import (
    REVIEW_FINAL_STATUSES,
    AttachmentParentType,
    ParentType,
    TicketStatus,
)
from src.models.ticket import Ticket, TicketReview
from src.models.user import User
from src.repositories.report_repository import ReportRepository
from src.repositories.role_repository import RoleRepository
from src.repositories.ticket_repository import TicketRepository, visible_to
from src.repositories.user_repository import UserRepository
from src.schemas.attachment import AttachmentResponse
from src.schemas.comment import ActivityLogResponse, CommentResponse
from src.schemas.common import PaginationParams
from src.schemas.ticket import (
    UNASSIGNED,
    TicketCreate,
    TicketFilterParams,
    TicketResponse,
    TicketReviewCreate,
    TicketReviewResponse,
    TicketUpdate,
)
from src.services.activity_log_service import ActivityLogService
from src.services.attachment_service import AttachmentService
from src.services.comment_service import CommentService
from src.services.id_service import IdService
from src.services.notification_service import NotificationService
from src.services.spreadsheet import Column, build_workbook, display_name

logger = logging.getLogger(__name__)

TICKET_EXPORT_COLUMNS = (
    Column("ID", 15),
    Column("Title", 30),
    Column("Description", 50),
    Column("Status", 15),
    Column("Priority", 15),
    Column("Location", 20),
    Column("Role", 20),
    Column("Assignee", 20),
    Column("Creator", 20),
    Column("Created", 25),
    Column("Updated", 25),
)


def visibility_for(
    user: User, permissions: set[str]
) -> ColumnElement[bool] | None:
    """
    Visibility clause for the caller, or None when they may see every ticket.
    """
    if PermissionName.VIEW_ALL_TICKETS.value in permissions:
        return None
    return visible_to(user.id, user.role_ids)


class TicketService:
    """
    Service class for ticket operations.

    Every mutating method commits once at the end; notifications and
    activity logs are part of the same transaction as the change.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ticket_repo = TicketRepository(session)
        self.report_repo = ReportRepository(session)
        self.role_repo = RoleRepository(session)
        self.user_repo = UserRepository(session)
        self.id_service = IdService(session)
        self.notification_service = NotificationService(session)
        self.activity_service = ActivityLogService(session)
        self.attachment_service = AttachmentService(session)
        self.comment_service = CommentService(session)

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e) from e

    async def _get_or_404(
        self, ticket_id: str, visibility: ColumnElement[bool] | None = None
    ) -> Ticket:
        ticket = await self.ticket_repo.get_visible(ticket_id, visibility)
        if ticket is None:
            raise NotFoundError("Ticket", message=f"Ticket {ticket_id} not found")
        return ticket

    async def _check_references(
        self,
        assignee_id: uuid.UUID | None = None,
        role_id: uuid.UUID | None = None,
        report_ids: list[str] | None = None,
    ) -> None:
        if assignee_id is not None and not await self.user_repo.exists(assignee_id):
            raise ValidationError(
                "Assignee does not exist",
                error_code="INVALID_REFERENCE",
                details={"assigneeId": str(assignee_id)},
            )
        if role_id is not None and not await self.role_repo.exists(role_id):
            raise ValidationError(
                "Role does not exist",
                error_code="INVALID_REFERENCE",
                details={"roleId": str(role_id)},
            )
        if report_ids:
            found = {r.id for r in await self.report_repo.get_by_ids(report_ids)}
            missing = set(report_ids) - found
            if missing:
                raise ValidationError(
                    "Unknown report ids",
                    error_code="INVALID_REFERENCE",
                    details={"reportIds": sorted(missing)},
                )

    async def _notify_creator_of_status(self, ticket: Ticket) -> None:
        await self.notification_service.create(
            ticket.creator_id,
            title="Ticket status updated",
            message=f"Ticket {ticket.id} is now {ticket.status.value}",
            related_id=ticket.id,
            related_type=ParentType.TICKET,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def _search_filters(
        filters: TicketFilterParams, current_user: User, permissions: set[str]
    ) -> dict[str, Any]:
        include_unassigned = False
        assignee_ids: list[uuid.UUID] = []
        for raw in filters.assignee_ids:
            if raw.upper() == UNASSIGNED:
                include_unassigned = True
                continue
            try:
                assignee_ids.append(uuid.UUID(raw))
            except ValueError:
                raise ValidationError(
                    f"Invalid assignee id: {raw}", error_code="VALIDATION_ERROR"
                ) from None

        return {
            "sort_field": filters.sort_field.value,
            "sort_order": filters.sort_order.value,
            "visibility": visibility_for(current_user, permissions),
            "statuses": filters.status or None,
            "priorities": filters.priority or None,
            "assignee_ids": assignee_ids or None,
            "include_unassigned": include_unassigned,
            "role_ids": filters.role_ids or None,
            "creator_ids": filters.creator_ids or None,
            "location_ids": filters.location_ids or None,
            "search": filters.search,
            "created_from": filters.start_date,
            "created_to": filters.end_date,
        }

    async def list_tickets(
        self,
        filters: TicketFilterParams,
        pagination: PaginationParams,
        current_user: User,
        permissions: set[str],
    ) -> tuple[list[Ticket], int]:
        """
        Search the tickets visible to the caller.

        ``assigneeIds`` may contain ``UNASSIGNED`` to match unclaimed tickets.

        Raises:
            ValidationError: If an assignee id is neither a UUID nor UNASSIGNED
        """
        return await self.ticket_repo.search_tickets(
            offset=pagination.offset,
            limit=pagination.page_size,
            **self._search_filters(filters, current_user, permissions),
        )

    async def export_tickets(
        self, filters: TicketFilterParams, current_user: User, permissions: set[str]
    ) -> bytes:
        """
        Every ticket matching the list filters, as an xlsx workbook.

        Visibility applies as in the list. The location column lists the
        locations of the linked reports.
        """
        tickets, total = await self.ticket_repo.search_tickets(
            limit=None, **self._search_filters(filters, current_user, permissions)
        )
        locations = await self.ticket_repo.linked_location_names(t.id for t in tickets)

        def row(ticket: Ticket) -> list[Any]:
            return [
                ticket.id,
                ticket.title,
                ticket.description,
                ticket.status,
                ticket.priority,
                ", ".join(locations.get(ticket.id, [])),
                ticket.role.name if ticket.role else None,
                display_name(ticket.assignee),
                display_name(ticket.creator),
                ticket.created_at,
                ticket.updated_at,
            ]

        content = build_workbook("Tickets", TICKET_EXPORT_COLUMNS, (row(t) for t in tickets))
        logger.info(f"User {current_user.id} exported {total} tickets")
        return content

    async def get_ticket(
        self, ticket_id: str, current_user: User, permissions: set[str]
    ) -> TicketResponse:
        """Ticket with reviews, comments, attachments, history and linked reports."""
        ticket = await self._get_or_404(ticket_id, visibility_for(current_user, permissions))

        reviews = await self.ticket_repo.list_reviews(ticket.id)
        review_files = await self.attachment_service.list_for(
            AttachmentParentType.TICKET_REVIEW, [r.id for r in reviews]
        )
        files_by_review: dict[str, list[AttachmentResponse]] = {}
        for attachment in review_files:
            files_by_review.setdefault(attachment.parent_id, []).append(
                AttachmentResponse.model_validate(attachment)
            )

        comments = await self.comment_service.list_comments(ParentType.TICKET, ticket.id)
        attachments = await self.attachment_service.list_for(
            AttachmentParentType.TICKET, [ticket.id]
        )
        history = await self.activity_service.list_for_parent(ParentType.TICKET, ticket.id)

        return TicketResponse.model_validate(ticket).model_copy(
            update={
                "reviews": [
                    TicketReviewResponse.model_validate(r).model_copy(
                        update={"attachments": files_by_review.get(str(r.id), [])}
                    )
                    for r in reviews
                ],
                "comments": [CommentResponse.model_validate(c) for c in comments],
                "attachments": [AttachmentResponse.model_validate(a) for a in attachments],
                "activity_logs": [ActivityLogResponse.model_validate(h) for h in history],
                "report_ids": await self.ticket_repo.get_report_ids(ticket.id),
            }
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create_ticket(self, data: TicketCreate, current_user: User) -> Ticket:
        """
        Open a ticket and dispatch it to a role.

        Every user holding the role is notified.

        Raises:
            RequiredFieldError: If title or description is missing
            ValidationError: If a referenced role, user or report does not exist
        """
        title = (data.title or "").strip()
        description = (data.description or "").strip()
        missing = [name for name, value in (("title", title), ("description", description)) if not value]
        if missing:
            raise RequiredFieldError(*missing)
        await self._check_references(data.assignee_id, data.role_id, data.report_ids)

        ticket_id = await self.id_service.generate_id("W")
        ticket = Ticket(
            id=ticket_id,
            title=title,
            description=description,
            status=TicketStatus.IN_PROGRESS if data.assignee_id else TicketStatus.PENDING,
            priority=data.priority,
            creator_id=current_user.id,
            assignee_id=data.assignee_id,
            role_id=data.role_id,
        )
        ticket = await self.ticket_repo.add(ticket)

        await self.activity_service.record(
            ParentType.TICKET, ticket.id, "Ticket created", user_id=current_user.id
        )
        await self.attachment_service.attach(
            AttachmentParentType.TICKET, ticket.id, data.attachments, current_user.id
        )
        if data.report_ids:
            await self.ticket_repo.replace_report_links(ticket.id, data.report_ids)

        if ticket.role_id:
            members = await self.user_repo.get_user_ids_with_role(ticket.role_id)
            await self.notification_service.notify_many(
                members,
                title="New ticket for your team",
                message=f"Ticket {ticket.id} \"{ticket.title}\" is waiting to be claimed",
                related_id=ticket.id,
                related_type=ParentType.TICKET,
            )
        if ticket.assignee_id:
            await self.notification_service.create(
                ticket.assignee_id,
                title="Ticket assigned to you",
                message=f"Ticket {ticket.id} \"{ticket.title}\" was assigned to you",
                related_id=ticket.id,
                related_type=ParentType.TICKET,
            )

        await self._commit()

        logger.info(f"Ticket {ticket.id} created by {current_user.id} for role {ticket.role_id}")
        return ticket

    async def update_ticket(
        self,
        ticket_id: str,
        data: TicketUpdate,
        current_user: User,
        permissions: set[str],
    ) -> Ticket:
        """
        Partially update a ticket.

        A status change notifies the creator; an assignee change notifies the
        new assignee. Both are recorded in the ticket's history.
        """
        ticket = await self._get_or_404(ticket_id, visibility_for(current_user, permissions))
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)

        for field in ("title", "description"):
            if field in changes:
                changes[field] = (changes[field] or "").strip()
                if not changes[field]:
                    raise RequiredFieldError(field)
        report_ids = changes.pop("report_ids", None)
        await self._check_references(
            changes.get("assignee_id"), changes.get("role_id"), report_ids
        )

        old_status = ticket.status
        old_assignee = ticket.assignee_id
        for field, value in changes.items():
            setattr(ticket, field, value)

        ticket = await self.ticket_repo.update(ticket)
        if report_ids is not None:
            await self.ticket_repo.replace_report_links(ticket.id, report_ids)

        if ticket.status != old_status:
            await self.activity_service.record(
                ParentType.TICKET,
                ticket.id,
                f"Status changed from {old_status.value} to {ticket.status.value}",
                user_id=current_user.id,
            )
            await self._notify_creator_of_status(ticket)

        if ticket.assignee_id != old_assignee:
            assignee_label = (
                ticket.assignee.name or ticket.assignee.email if ticket.assignee else "nobody"
            )
            await self.activity_service.record(
                ParentType.TICKET, ticket.id, f"Assigned to {assignee_label}", user_id=current_user.id
            )
            if ticket.assignee_id:
                await self.notification_service.create(
                    ticket.assignee_id,
                    title="Ticket assigned to you",
                    message=f"Ticket {ticket.id} \"{ticket.title}\" was assigned to you",
                    related_id=ticket.id,
                    related_type=ParentType.TICKET,
                )

        await self._commit()

        logger.info(f"Ticket {ticket.id} updated by {current_user.id}: {sorted(changes)}")
        return ticket

    async def claim_ticket(
        self, ticket_id: str, current_user: User, permissions: set[str]
    ) -> Ticket:
        """
        Claim a pending, unassigned ticket for the caller.

        Raises:
            NotFoundError: If the ticket is not visible to the caller
            ConflictError: If the ticket is not PENDING or already assigned
        """
        ticket = await self._get_or_404(ticket_id, visibility_for(current_user, permissions))
        if ticket.status != TicketStatus.PENDING or ticket.assignee_id is not None:
            logger.warning(
                f"User {current_user.id} tried to claim ticket {ticket.id} "
                f"(status={ticket.status.value}, assignee={ticket.assignee_id})"
            )
            raise ConflictError("Ticket is not available to claim")

        if not await self.ticket_repo.claim(ticket.id, current_user.id):
            logger.warning(f"User {current_user.id} lost the race to claim ticket {ticket.id}")
            raise ConflictError("Ticket is not available to claim")

        # mirror the row written by the conditional update
        ticket.status = TicketStatus.IN_PROGRESS
        ticket.assignee_id = current_user.id

        await self.activity_service.record(
            ParentType.TICKET,
            ticket.id,
            f"Claimed by {current_user.name or current_user.email}",
            user_id=current_user.id,
        )
        await self.notification_service.create(
            current_user.id,
            title="Ticket claimed",
            message=f"You claimed ticket {ticket.id} \"{ticket.title}\"",
            related_id=ticket.id,
            related_type=ParentType.TICKET,
        )
        await self._commit()

        logger.info(f"Ticket {ticket.id} claimed by {current_user.id}")
        return ticket

    async def add_review(
        self,
        ticket_id: str,
        data: TicketReviewCreate,
        current_user: User,
        permissions: set[str],
    ) -> TicketReview:
        """
        Submit a work review, optionally closing the ticket with a final status.

        Raises:
            RequiredFieldError: If content is missing
            ValidationError: If final_status is not a closing status
        """
        ticket = await self._get_or_404(ticket_id, visibility_for(current_user, permissions))
        content = (data.content or "").strip()
        if not content:
            raise RequiredFieldError("content")
        if data.final_status is not None and data.final_status not in REVIEW_FINAL_STATUSES:
            raise ValidationError(
                "finalStatus must be COMPLETED, FAILED, VERIFIED or VERIFICATION_FAILED",
                error_code="VALIDATION_ERROR",
            )

        review = await self.ticket_repo.add_review(
            TicketReview(ticket_id=ticket.id, creator_id=current_user.id, content=content)
        )
        await self.attachment_service.attach(
            AttachmentParentType.TICKET_REVIEW, review.id, data.attachments, current_user.id
        )

        entry = "Review submitted"
        if data.final_status is not None and data.final_status != ticket.status:
            entry = f"Review submitted, status changed from {ticket.status.value} to {data.final_status.value}"
            ticket.status = data.final_status
            ticket = await self.ticket_repo.update(ticket)

        await self.activity_service.record(
            ParentType.TICKET, ticket.id, entry, user_id=current_user.id
        )
        await self.notification_service.create(
            ticket.creator_id,
            title="Ticket reviewed",
            message=f"A review was submitted for ticket {ticket.id} ({ticket.status.value})",
            related_id=ticket.id,
            related_type=ParentType.TICKET,
        )
        await self._commit()

        logger.info(f"Review {review.id} added to ticket {ticket.id} by {current_user.id}")
        return review

    async def delete_ticket(self, ticket_id: str, current_user: User) -> None:
        """Delete a ticket after its comments, notifications, files, history and links."""
        ticket = await self._get_or_404(ticket_id)

        reviews = await self.ticket_repo.list_reviews(ticket.id)
        await self.attachment_service.delete_for(
            AttachmentParentType.TICKET_REVIEW, [r.id for r in reviews]
        )
        await self.attachment_service.delete_for(AttachmentParentType.TICKET, [ticket.id])
        await self.comment_service.comment_repo.delete_for_parent(ParentType.TICKET, ticket.id)
        await self.notification_service.notification_repo.delete_for_related(
            ParentType.TICKET, ticket.id
        )
        await self.activity_service.activity_repo.delete_for_parent(ParentType.TICKET, ticket.id)
        await self.ticket_repo.replace_report_links(ticket.id, [])
        await self.ticket_repo.delete(ticket)
        await self.session.commit()

        logger.info(f"Ticket {ticket_id} deleted by {current_user.id}")

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def list_comments(
        self, ticket_id: str, current_user: User, permissions: set[str]
    ) -> list[Comment]:
        await self._get_or_404(ticket_id, visibility_for(current_user, permissions))
        return await self.comment_service.list_comments(ParentType.TICKET, ticket_id)

    async def add_comment(
        self,
        ticket_id: str,
        content: str | None,
        current_user: User,
        permissions: set[str],
    ) -> Comment:
        ticket = await self._get_or_404(ticket_id, visibility_for(current_user, permissions))
        comment = await self.comment_service.add_comment(
            ParentType.TICKET, ticket, current_user, content
        )
        await self.session.commit()
        return comment
