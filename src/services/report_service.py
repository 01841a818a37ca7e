"""
Report service for the report lifecycle.

This module provides:
- Filtered report listing with category subtree expansion, its xlsx export
  and the anonymous feed of public categories
- Report creation with sequential ids, attachments, ticket links and the
  assignee notification
- Partial updates with change notifications and history entries
- Deletion of a report together with everything hanging off it
- Report comments
"""

import logging
import uuid
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.db_errors import translate_integrity_error
from src.exceptions import NotFoundError, RequiredFieldError, ValidationError
from src.models.comment import Comment
from src.models.enums import AttachmentParentType, ParentType, ReportStatus
from src.models.report import Report
from src.models.user import User
from src.repositories.category_repository import CategoryRepository
from src.repositories.report_repository import ReportRepository
from src.repositories.ticket_repository import TicketRepository
from src.repositories.user_repository import UserRepository
from src.schemas.attachment import AttachmentResponse
from src.schemas.comment import ActivityLogResponse, CommentResponse
from src.schemas.common import PaginationParams
from src.schemas.report import (
    PublicReport,
    ReportCreate,
    ReportFilterParams,
    ReportResponse,
    ReportUpdate,
)
from src.services.activity_log_service import ActivityLogService
from src.services.attachment_service import AttachmentService
from src.services.comment_service import CommentService
from src.services.id_service import IdService
from src.services.notification_service import NotificationService
from src.services.spreadsheet import Column, build_workbook, display_name

logger = logging.getLogger(__name__)

REPORT_EXPORT_COLUMNS = (
    Column("ID", 15),
    Column("Title", 30),
    Column("Description", 50),
    Column("Status", 15),
    Column("Priority", 15),
    Column("Category", 20),
    Column("Location", 20),
    Column("Creator", 20),
    Column("Assignee", 20),
    Column("Created", 20),
    Column("Updated", 20),
)


class ReportService:
    """
    Service class for report operations.

    Every mutating method commits once at the end; notifications and
    activity logs are part of the same transaction as the change.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.report_repo = ReportRepository(session)
        self.ticket_repo = TicketRepository(session)
        self.category_repo = CategoryRepository(session)
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

    async def _get_or_404(self, report_id: str) -> Report:
        report = await self.report_repo.get_by_id(report_id)
        if report is None:
            raise NotFoundError("Report", message=f"Report {report_id} not found")
        return report

    async def _check_assignee(self, assignee_id) -> None:
        if assignee_id is not None and not await self.user_repo.exists(assignee_id):
            raise ValidationError(
                "Assignee does not exist",
                error_code="INVALID_REFERENCE",
                details={"assigneeId": str(assignee_id)},
            )

    async def _check_tickets(self, ticket_ids: list[str]) -> None:
        missing = set(ticket_ids) - await self.ticket_repo.existing_ids(ticket_ids)
        if missing:
            raise ValidationError(
                "Unknown ticket ids",
                error_code="INVALID_REFERENCE",
                details={"ticketIds": sorted(missing)},
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def _search_filters(self, filters: ReportFilterParams) -> dict[str, Any]:
        category_ids = None
        if filters.category_ids:
            category_ids = await self.category_repo.get_descendant_ids(filters.category_ids)

        return {
            "sort_field": filters.sort_field.value,
            "sort_order": filters.sort_order.value,
            "statuses": filters.status or None,
            "priorities": filters.priority or None,
            "category_ids": category_ids,
            "assignee_id": filters.assignee_id,
            "creator_id": filters.creator_id,
            "location_ids": filters.location_ids or None,
            "search": filters.search,
            "created_from": filters.start_date,
            "created_to": filters.end_date,
        }

    async def list_reports(
        self,
        filters: ReportFilterParams,
        pagination: PaginationParams,
    ) -> tuple[list[Report], int]:
        """
        Search reports.

        A category filter matches the given categories and every category
        below them.
        """
        return await self.report_repo.search_reports(
            offset=pagination.offset,
            limit=pagination.page_size,
            **await self._search_filters(filters),
        )

    async def export_reports(self, filters: ReportFilterParams, current_user: User) -> bytes:
        """Every report matching the list filters, as an xlsx workbook."""
        reports, total = await self.report_repo.search_reports(
            limit=None, **await self._search_filters(filters)
        )

        rows = (
            [
                report.id,
                report.title,
                report.description,
                report.status,
                report.priority,
                report.category.name if report.category else None,
                report.location.name if report.location else None,
                display_name(report.creator),
                display_name(report.assignee),
                report.created_at,
                report.updated_at,
            ]
            for report in reports
        )
        content = build_workbook("Reports", REPORT_EXPORT_COLUMNS, rows)
        logger.info(f"User {current_user.id} exported {total} reports")
        return content

    async def list_public_reports(
        self,
        pagination: PaginationParams,
        location_ids: list[uuid.UUID] | None = None,
        sort_field: str = "createdAt",
        sort_order: str = "desc",
    ) -> tuple[list[PublicReport], int]:
        """
        Reports filed under the public categories, with their attachments.

        The public categories are named by ``PUBLIC_REPORT_CATEGORIES`` and
        include their subcategories. With none of them configured or present
        the feed is empty.
        """
        roots = await self.category_repo.ids_by_names(settings.public_report_category_names)
        if not roots:
            return [], 0
        category_ids = await self.category_repo.get_descendant_ids(roots)

        reports, total = await self.report_repo.search_public(
            category_ids,
            location_ids=location_ids or None,
            offset=pagination.offset,
            limit=pagination.page_size,
            sort_field=sort_field,
            sort_order=sort_order,
        )

        files: dict[str, list[AttachmentResponse]] = {}
        for attachment in await self.attachment_service.list_for(
            AttachmentParentType.REPORT, [r.id for r in reports]
        ):
            files.setdefault(attachment.parent_id, []).append(
                AttachmentResponse.model_validate(attachment)
            )

        items = [
            PublicReport.model_validate(report).model_copy(
                update={"attachments": files.get(report.id, [])}
            )
            for report in reports
        ]
        return items, total

    async def get_report(self, report_id: str) -> ReportResponse:
        """Report with comments, attachments, history and linked ticket ids."""
        report = await self._get_or_404(report_id)

        comments = await self.comment_service.list_comments(ParentType.REPORT, report.id)
        attachments = await self.attachment_service.list_for(
            AttachmentParentType.REPORT, [report.id]
        )
        history = await self.activity_service.list_for_parent(ParentType.REPORT, report.id)

        return ReportResponse.model_validate(report).model_copy(
            update={
                "comments": [CommentResponse.model_validate(c) for c in comments],
                "attachments": [AttachmentResponse.model_validate(a) for a in attachments],
                "activity_logs": [ActivityLogResponse.model_validate(h) for h in history],
                "ticket_ids": await self.report_repo.get_ticket_ids(report.id),
            }
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create_report(self, data: ReportCreate, current_user: User) -> Report:
        """
        File a new report.

        Raises:
            RequiredFieldError: If title is missing or blank
            ValidationError: If the assignee or a linked ticket does not exist
        """
        title = (data.title or "").strip()
        if not title:
            raise RequiredFieldError("title")
        await self._check_assignee(data.assignee_id)
        await self._check_tickets(data.ticket_ids)

        report_id = await self.id_service.generate_id("R")
        report = Report(
            id=report_id,
            title=title,
            description=data.description,
            status=ReportStatus.UNCONFIRMED,
            priority=data.priority,
            creator_id=current_user.id,
            assignee_id=data.assignee_id,
            category_id=data.category_id,
            location_id=data.location_id,
            contact_phone=data.contact_phone,
            contact_email=data.contact_email,
        )
        try:
            report = await self.report_repo.add(report)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e) from e

        await self.activity_service.record(
            ParentType.REPORT, report.id, "Report created", user_id=current_user.id
        )
        await self.attachment_service.attach(
            AttachmentParentType.REPORT, report.id, data.attachments, current_user.id
        )
        if data.ticket_ids:
            await self.report_repo.replace_ticket_links(report.id, data.ticket_ids)
        if report.assignee_id:
            await self.notification_service.create(
                report.assignee_id,
                title="New report assigned",
                message=f"Report {report.id} \"{report.title}\" was assigned to you",
                related_id=report.id,
                related_type=ParentType.REPORT,
            )

        await self._commit()

        logger.info(f"Report {report.id} created by {current_user.id}")
        return report

    async def update_report(
        self, report_id: str, data: ReportUpdate, current_user: User
    ) -> Report:
        """
        Partially update a report.

        An assignee change notifies the new assignee; a status change
        notifies the creator. Both are recorded in the report's history.
        """
        report = await self._get_or_404(report_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)

        if "title" in changes:
            changes["title"] = (changes["title"] or "").strip()
            if not changes["title"]:
                raise RequiredFieldError("title")
        ticket_ids = changes.pop("ticket_ids", None)
        if ticket_ids is not None:
            await self._check_tickets(ticket_ids)

        old_status = report.status
        old_assignee = report.assignee_id
        if "assignee_id" in changes:
            await self._check_assignee(changes["assignee_id"])

        for field, value in changes.items():
            setattr(report, field, value)

        try:
            report = await self.report_repo.update(report)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e) from e

        if ticket_ids is not None:
            await self.report_repo.replace_ticket_links(report.id, ticket_ids)

        if report.status != old_status:
            await self.activity_service.record(
                ParentType.REPORT,
                report.id,
                f"Status changed from {old_status.value} to {report.status.value}",
                user_id=current_user.id,
            )
            await self.notification_service.create(
                report.creator_id,
                title="Report status updated",
                message=f"Report {report.id} is now {report.status.value}",
                related_id=report.id,
                related_type=ParentType.REPORT,
            )

        if report.assignee_id != old_assignee:
            assignee_label = (
                report.assignee.name or report.assignee.email if report.assignee else "nobody"
            )
            await self.activity_service.record(
                ParentType.REPORT,
                report.id,
                f"Assigned to {assignee_label}",
                user_id=current_user.id,
            )
            if report.assignee_id:
                await self.notification_service.create(
                    report.assignee_id,
                    title="Report assigned to you",
                    message=f"Report {report.id} \"{report.title}\" was assigned to you",
                    related_id=report.id,
                    related_type=ParentType.REPORT,
                )

        await self._commit()

        logger.info(f"Report {report.id} updated by {current_user.id}: {sorted(changes)}")
        return report

    async def delete_report(self, report_id: str, current_user: User) -> None:
        """Delete a report after its comments, notifications, files, history and links."""
        report = await self._get_or_404(report_id)

        await self.comment_service.comment_repo.delete_for_parent(ParentType.REPORT, report.id)
        await self.notification_service.notification_repo.delete_for_related(
            ParentType.REPORT, report.id
        )
        await self.attachment_service.delete_for(AttachmentParentType.REPORT, [report.id])
        await self.activity_service.activity_repo.delete_for_parent(ParentType.REPORT, report.id)
        await self.report_repo.replace_ticket_links(report.id, [])
        await self.report_repo.delete(report)
        await self.session.commit()

        logger.info(f"Report {report_id} deleted by {current_user.id}")

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def list_comments(self, report_id: str) -> list[Comment]:
        await self._get_or_404(report_id)
        return await self.comment_service.list_comments(ParentType.REPORT, report_id)

    async def add_comment(
        self, report_id: str, content: str | None, current_user: User
    ) -> Comment:
        report = await self._get_or_404(report_id)
        comment = await self.comment_service.add_comment(
            ParentType.REPORT, report, current_user, content
        )
        await self.session.commit()
        return comment
