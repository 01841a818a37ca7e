"""
Attachment service: records metadata of files uploaded to object storage.
"""

import uuid
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.attachment import Attachment
from src.models.enums import AttachmentParentType
from src.repositories.attachment_repository import AttachmentRepository
from src.schemas.attachment import AttachmentCreate


class AttachmentService:
    """Service class for attachment metadata. Writes never commit."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.attachment_repo = AttachmentRepository(session)

    async def attach(
        self,
        parent_type: AttachmentParentType,
        parent_id: str | uuid.UUID,
        files: Iterable[AttachmentCreate],
        created_by_id: uuid.UUID | None = None,
    ) -> list[Attachment]:
        attachments = [
            Attachment(
                filename=f.filename,
                url=f.url,
                file_type=f.file_type,
                file_size=f.file_size,
                parent_type=parent_type,
                parent_id=str(parent_id),
                created_by_id=created_by_id,
            )
            for f in files
        ]
        if not attachments:
            return []
        return await self.attachment_repo.add_all(attachments)

    async def list_for(
        self, parent_type: AttachmentParentType, parent_ids: Iterable[str | uuid.UUID]
    ) -> list[Attachment]:
        return await self.attachment_repo.list_for_parent(parent_type, [str(p) for p in parent_ids])

    async def delete_for(
        self, parent_type: AttachmentParentType, parent_ids: Iterable[str | uuid.UUID]
    ) -> None:
        await self.attachment_repo.delete_for_parent(parent_type, [str(p) for p in parent_ids])
