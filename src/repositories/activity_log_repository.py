"""
ActivityLog repository.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.activity_log import ActivityLog
from src.models.enums import ParentType
from src.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog]):
    """Repository for ActivityLog model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityLog, session)

    async def list_for_parent(self, parent_type: ParentType, parent_id: str) -> list[ActivityLog]:
        """History of a work item, oldest first."""
        result = await self.session.execute(
            select(ActivityLog)
            .where(ActivityLog.parent_type == parent_type, ActivityLog.parent_id == parent_id)
            .order_by(ActivityLog.created_at)
        )
        return list(result.scalars().all())

    async def delete_for_parent(self, parent_type: ParentType, parent_id: str) -> None:
        await self.session.execute(
            delete(ActivityLog).where(
                ActivityLog.parent_type == parent_type, ActivityLog.parent_id == parent_id
            )
        )
