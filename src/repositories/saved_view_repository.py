"""
SavedView repository.

Every lookup is scoped to the owning user, so a view id belonging to
someone else behaves exactly like a missing one.
"""

import uuid
from typing import AsyncIterator

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.enums import SavedViewType
from src.models.saved_view import SavedView
from src.repositories.base import BaseRepository


class SavedViewRepository(BaseRepository[SavedView]):
    """Repository for SavedView model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(SavedView, session)

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        view_type: SavedViewType | None = None,
    ) -> list[SavedView]:
        query = select(SavedView).where(SavedView.user_id == user_id)
        if view_type is not None:
            query = query.where(SavedView.view_type == view_type)
        query = query.order_by(SavedView.view_type, SavedView.name)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_owned(self, view_id: uuid.UUID, user_id: uuid.UUID) -> SavedView | None:
        result = await self.session.execute(
            select(SavedView).where(SavedView.id == view_id, SavedView.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def name_taken(
        self,
        user_id: uuid.UUID,
        name: str,
        view_type: SavedViewType,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        query = select(SavedView.id).where(
            SavedView.user_id == user_id,
            SavedView.name == name,
            SavedView.view_type == view_type,
        )
        if exclude_id is not None:
            query = query.where(SavedView.id != exclude_id)

        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def swap_default(
        self,
        user_id: uuid.UUID,
        view_type: SavedViewType,
        view_id: uuid.UUID | None,
    ) -> None:
        """
        Make ``view_id`` the only default of (user, view_type).

        The old default is cleared before the new one is set; both statements
        run in the caller's transaction, so other sessions never observe the
        gap. Passing None clears the default entirely.
        """
        clear = update(SavedView).where(
            SavedView.user_id == user_id,
            SavedView.view_type == view_type,
            SavedView.is_default.is_(True),
        )
        if view_id is not None:
            clear = clear.where(SavedView.id != view_id)
        await self.session.execute(
            clear.values(is_default=False).execution_options(synchronize_session=False)
        )

        if view_id is not None:
            await self.session.execute(
                update(SavedView)
                .where(SavedView.id == view_id, SavedView.user_id == user_id)
                .values(is_default=True)
                .execution_options(synchronize_session=False)
            )
        await self.session.flush()

    async def iter_all(self, batch_size: int = 500) -> AsyncIterator[SavedView]:
        """Stream every saved view, for bulk filter migration."""
        result = await self.session.stream_scalars(
            select(SavedView).order_by(SavedView.created_at).execution_options(yield_per=batch_size)
        )
        async for view in result:
            yield view
