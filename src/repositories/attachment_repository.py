"""
Attachment repository.

Attachments reference their parent by (parent_type, parent_id) without a
foreign key, so deleting a work item must delete its attachments here.
"""

from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.attachment import Attachment
from src.models.enums import AttachmentParentType
from src.repositories.base import BaseRepository


class AttachmentRepository(BaseRepository[Attachment]):
    """Repository for Attachment model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Attachment, session)

    async def list_for_parent(
        self, parent_type: AttachmentParentType, parent_ids: Iterable[str]
    ) -> list[Attachment]:
        ids = [str(pid) for pid in parent_ids]
        if not ids:
            return []
        result = await self.session.execute(
            select(Attachment)
            .where(Attachment.parent_type == parent_type, Attachment.parent_id.in_(ids))
            .order_by(Attachment.created_at)
        )
        return list(result.scalars().all())

    async def delete_for_parent(
        self, parent_type: AttachmentParentType, parent_ids: Iterable[str]
    ) -> None:
        ids = [str(pid) for pid in parent_ids]
        if not ids:
            return
        await self.session.execute(
            delete(Attachment).where(
                Attachment.parent_type == parent_type, Attachment.parent_id.in_(ids)
            )
        )
