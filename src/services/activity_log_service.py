"""
Activity log service: the visible history of reports and tickets.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.activity_log import ActivityLog
from src.models.enums import ParentType
from src.repositories.activity_log_repository import ActivityLogRepository


class ActivityLogService:
    """Records and lists history entries. Writes never commit."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activity_repo = ActivityLogRepository(session)

    async def record(
        self,
        parent_type: ParentType,
        parent_id: str,
        content: str,
        user_id: uuid.UUID | None = None,
    ) -> ActivityLog:
        """
        Append an entry to a work item's history.

        Example:
            await activity_service.record(
                ParentType.TICKET, ticket.id, "Ticket claimed", user_id=user.id
            )
        """
        return await self.activity_repo.add(
            ActivityLog(
                parent_type=parent_type,
                parent_id=parent_id,
                content=content,
                user_id=user_id,
            )
        )

    async def list_for_parent(self, parent_type: ParentType, parent_id: str) -> list[ActivityLog]:
        return await self.activity_repo.list_for_parent(parent_type, parent_id)
