"""
User repository for user-specific database operations.

This module provides database operations for the User model,
extending the base repository with user-specific queries.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.user import User, UserRole
from src.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    Repository for User model operations.

    Extends BaseRepository with user-specific queries:
    - Email lookups for authentication
    - Search with pagination for the admin user list
    - Membership lookups used for ticket dispatch notifications
    """

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get a live user by email (case-insensitive).

        Example:
            user = await user_repo.get_by_email("alice@example.com")
        """
        query = select(User).where(func.lower(User.email) == email.strip().lower())
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_id: uuid.UUID | None = None) -> bool:
        """True if a live user other than ``exclude_id`` owns the email."""
        query = select(User.id).where(func.lower(User.email) == email.strip().lower())
        query = self._apply_soft_delete_filter(query)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)

        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def update_last_login(self, user: User) -> None:
        """Stamp the user's last successful login."""
        user.last_login_at = datetime.now(UTC)
        await self.session.flush()

    def _search_query(self, query: Select, search: str | None) -> Select:
        query = self._apply_soft_delete_filter(query)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(User.email.ilike(pattern), User.name.ilike(pattern)))
        return query

    async def filter_users(
        self,
        search: str | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[list[User], int]:
        """
        Search users by email or name with pagination.

        Returns:
            Tuple of (users for the page, total matching users)

        Example:
            users, total = await user_repo.filter_users(search="smith", limit=20)
        """
        count_query = self._search_query(select(func.count()).select_from(User), search)
        total = (await self.session.execute(count_query)).scalar_one()

        query = self._search_query(select(User), search)
        query = query.order_by(User.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)

        return list(result.scalars().all()), total

    async def get_user_ids_with_role(self, role_id: uuid.UUID) -> list[uuid.UUID]:
        """Ids of every live user holding the role, primary or additional."""
        query = (
            select(UserRole.user_id)
            .join(User, User.id == UserRole.user_id)
            .where(UserRole.role_id == role_id, User.deleted_at.is_(None))
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
