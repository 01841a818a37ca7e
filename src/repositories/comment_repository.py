"""
Comment repository for report and ticket discussions.
"""

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.comment import Comment
from src.models.enums import ParentType
from src.repositories.base import BaseRepository


def _parent_column(parent_type: ParentType):
    return Comment.report_id if parent_type == ParentType.REPORT else Comment.ticket_id


class CommentRepository(BaseRepository[Comment]):
    """Repository for Comment model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Comment, session)

    async def list_for_parent(self, parent_type: ParentType, parent_id: str) -> list[Comment]:
        """Comments of a report or ticket, oldest first."""
        result = await self.session.execute(
            select(Comment)
            .where(_parent_column(parent_type) == parent_id)
            .order_by(Comment.created_at)
        )
        return list(result.scalars().all())

    async def get_commenter_ids(
        self, parent_type: ParentType, parent_id: str
    ) -> set[uuid.UUID]:
        """Distinct authors of earlier comments on a work item."""
        result = await self.session.execute(
            select(Comment.user_id).where(_parent_column(parent_type) == parent_id).distinct()
        )
        return set(result.scalars().all())

    async def delete_for_parent(self, parent_type: ParentType, parent_id: str) -> None:
        await self.session.execute(
            delete(Comment).where(_parent_column(parent_type) == parent_id)
        )
