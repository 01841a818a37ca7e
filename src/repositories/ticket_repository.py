"""
Ticket repository for ticket-specific database operations.

Besides the list query this module owns the visibility rule applied to
callers without ``view_all_tickets``: a ticket is visible when it is
assigned to the caller, or when it is still PENDING and dispatched to one
of the caller's roles.
"""

import uuid
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import ColumnElement, Select, and_, delete, false, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.enums import Priority, TicketStatus
from src.models.location import Location
from src.models.report import Report, ReportTicket
from src.models.ticket import Ticket, TicketReview
from src.repositories.base import BaseRepository

TICKET_SORT_COLUMNS = {
    "createdAt": Ticket.created_at,
    "updatedAt": Ticket.updated_at,
    "title": Ticket.title,
    "priority": Ticket.priority,
    "status": Ticket.status,
}


def visible_to(user_id: uuid.UUID, role_ids: Iterable[uuid.UUID]) -> ColumnElement[bool]:
    """
    Visibility clause for a caller without ``view_all_tickets``.

    Example:
        query = select(Ticket).where(visible_to(user.id, user.role_ids))
    """
    role_ids = list(role_ids)
    role_clause = (
        and_(Ticket.role_id.in_(role_ids), Ticket.status == TicketStatus.PENDING)
        if role_ids
        else false()
    )
    return or_(Ticket.assignee_id == user_id, role_clause)


class TicketRepository(BaseRepository[Ticket]):
    """
    Repository for Ticket and TicketReview operations.

    Extends BaseRepository with:
    - Filtered, sorted and paginated search scoped by visibility
    - Dashboard counters
    - Report-ticket link maintenance from the ticket side
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Ticket, session)

    @staticmethod
    def _apply_filters(
        query: Select,
        visibility: ColumnElement[bool] | None = None,
        statuses: list[TicketStatus] | None = None,
        priorities: list[Priority] | None = None,
        assignee_ids: list[uuid.UUID] | None = None,
        include_unassigned: bool = False,
        role_ids: list[uuid.UUID] | None = None,
        creator_ids: list[uuid.UUID] | None = None,
        location_ids: list[uuid.UUID] | None = None,
        search: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> Select:
        if visibility is not None:
            query = query.where(visibility)
        if statuses:
            query = query.where(Ticket.status.in_(statuses))
        if priorities:
            query = query.where(Ticket.priority.in_(priorities))
        if assignee_ids or include_unassigned:
            clauses = []
            if assignee_ids:
                clauses.append(Ticket.assignee_id.in_(assignee_ids))
            if include_unassigned:
                clauses.append(Ticket.assignee_id.is_(None))
            query = query.where(or_(*clauses))
        if role_ids:
            query = query.where(Ticket.role_id.in_(role_ids))
        if creator_ids:
            query = query.where(Ticket.creator_id.in_(creator_ids))
        if location_ids:
            linked = (
                select(ReportTicket.ticket_id)
                .join(Report, Report.id == ReportTicket.report_id)
                .where(Report.location_id.in_(location_ids))
            )
            query = query.where(Ticket.id.in_(linked))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(Ticket.title.ilike(pattern), Ticket.description.ilike(pattern))
            )
        if created_from is not None:
            query = query.where(Ticket.created_at >= created_from)
        if created_to is not None:
            query = query.where(Ticket.created_at <= created_to)
        return query

    async def search_tickets(
        self,
        offset: int = 0,
        limit: int | None = 20,
        sort_field: str = "createdAt",
        sort_order: str = "desc",
        **filters: Any,
    ) -> tuple[list[Ticket], int]:
        """
        Search tickets with filters, sorting and pagination.

        ``limit=None`` returns every match.

        Returns:
            Tuple of (tickets for the page, total matching tickets)
        """
        count_query = self._apply_filters(select(func.count(Ticket.id)), **filters)
        total = (await self.session.execute(count_query)).scalar_one()

        order_col = TICKET_SORT_COLUMNS.get(sort_field, Ticket.created_at)
        query = self._apply_filters(select(Ticket), **filters)
        query = query.order_by(order_col.asc() if sort_order == "asc" else order_col.desc())
        query = query.order_by(Ticket.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_visible(
        self, ticket_id: str, visibility: ColumnElement[bool] | None
    ) -> Ticket | None:
        query = select(Ticket).where(Ticket.id == ticket_id)
        if visibility is not None:
            query = query.where(visibility)
        return (await self.session.execute(query)).scalar_one_or_none()

    async def claim(self, ticket_id: str, user_id: uuid.UUID) -> bool:
        """
        Assign a pending, unassigned ticket to ``user_id``.

        A single conditional UPDATE, so of two concurrent claimers only one
        gets a row back.

        Returns:
            True if this call claimed the ticket
        """
        result = await self.session.execute(
            update(Ticket)
            .where(
                Ticket.id == ticket_id,
                Ticket.status == TicketStatus.PENDING,
                Ticket.assignee_id.is_(None),
            )
            .values(status=TicketStatus.IN_PROGRESS, assignee_id=user_id)
            .returning(Ticket.id)
        )
        return result.scalar_one_or_none() is not None

    async def count_tickets(
        self,
        visibility: ColumnElement[bool] | None = None,
        statuses: Iterable[TicketStatus] | None = None,
        priority: Priority | None = None,
        updated_since: datetime | None = None,
    ) -> int:
        """Count tickets for dashboard metrics."""
        query = select(func.count(Ticket.id))
        if visibility is not None:
            query = query.where(visibility)
        if statuses is not None:
            query = query.where(Ticket.status.in_(list(statuses)))
        if priority is not None:
            query = query.where(Ticket.priority == priority)
        if updated_since is not None:
            query = query.where(Ticket.updated_at >= updated_since)
        return (await self.session.execute(query)).scalar_one()

    async def recent(
        self, visibility: ColumnElement[bool] | None = None, limit: int = 5
    ) -> list[Ticket]:
        query = select(Ticket)
        if visibility is not None:
            query = query.where(visibility)
        query = query.order_by(Ticket.created_at.desc()).limit(limit)
        return list((await self.session.execute(query)).scalars().all())

    async def existing_ids(self, ticket_ids: Iterable[str]) -> set[str]:
        ids = list(ticket_ids)
        if not ids:
            return set()
        result = await self.session.execute(select(Ticket.id).where(Ticket.id.in_(ids)))
        return set(result.scalars().all())

    async def get_report_ids(self, ticket_id: str) -> list[str]:
        result = await self.session.execute(
            select(ReportTicket.report_id)
            .where(ReportTicket.ticket_id == ticket_id)
            .order_by(ReportTicket.report_id)
        )
        return list(result.scalars().all())

    async def linked_location_names(self, ticket_ids: Iterable[str]) -> dict[str, list[str]]:
        """
        Distinct location names of the reports linked to each ticket.

        Tickets without a located report are absent from the mapping.
        """
        ids = list(ticket_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(ReportTicket.ticket_id, Location.name)
            .join(Report, Report.id == ReportTicket.report_id)
            .join(Location, Location.id == Report.location_id)
            .where(ReportTicket.ticket_id.in_(ids))
            .distinct()
            .order_by(ReportTicket.ticket_id, Location.name)
        )
        names: dict[str, list[str]] = {}
        for ticket_id, location_name in result.all():
            names.setdefault(ticket_id, []).append(location_name)
        return names

    async def replace_report_links(self, ticket_id: str, report_ids: Iterable[str]) -> None:
        """Replace every report link of a ticket."""
        await self.session.execute(delete(ReportTicket).where(ReportTicket.ticket_id == ticket_id))
        self.session.add_all(
            ReportTicket(report_id=report_id, ticket_id=ticket_id)
            for report_id in dict.fromkeys(report_ids)
        )
        await self.session.flush()

    # Reviews

    async def add_review(self, review: TicketReview) -> TicketReview:
        self.session.add(review)
        await self.session.flush()
        await self.session.refresh(review)
        return review

    async def list_reviews(self, ticket_id: str) -> list[TicketReview]:
        result = await self.session.execute(
            select(TicketReview)
            .where(TicketReview.ticket_id == ticket_id)
            .order_by(TicketReview.created_at)
        )
        return list(result.scalars().all())
