"""
Role and Permission repositories for role-based access control.

This module provides database operations for Role, Permission and the two
link tables (RolePermission, UserRole). Replacement operations delete and
re-insert inside the caller's transaction; the service commits.
"""

import uuid
from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.user import Permission, Role, RolePermission, User, UserRole
from src.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    """Repository for the persisted copy of the permission catalog."""

    def __init__(self, session: AsyncSession):
        super().__init__(Permission, session)

    async def get_by_names(self, names: Iterable[str]) -> list[Permission]:
        names = list(names)
        if not names:
            return []
        result = await self.session.execute(
            select(Permission).where(Permission.name.in_(names))
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Permission]:
        result = await self.session.execute(select(Permission).order_by(Permission.name))
        return list(result.scalars().all())


class RoleRepository(BaseRepository[Role]):
    """
    Repository for Role model operations.

    Extends BaseRepository with:
    - Role name lookups
    - Permission resolution for a role or a user
    - Atomic replacement of a role's grants and of a user's roles
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Role, session)

    async def get_by_name(self, name: str) -> Role | None:
        """
        Get role by name (case-insensitive).

        Example:
            admin_role = await role_repo.get_by_name("ADMIN")
        """
        result = await self.session.execute(
            select(Role).where(func.upper(Role.name) == name.strip().upper())
        )
        return result.scalar_one_or_none()

    async def list_roles(self) -> list[Role]:
        """All roles ordered by name."""
        result = await self.session.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def get_permission_names_for_role(self, role_name: str) -> set[str]:
        """
        Permission names granted by a role.

        Returns an empty set for an unknown role.
        """
        query = (
            select(Permission.name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(func.upper(Role.name) == role_name.strip().upper())
        )
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def get_user_permission_names(self, user_id: uuid.UUID) -> set[str]:
        """
        Union of permission names across every role the user holds.

        Example:
            permissions = await role_repo.get_user_permission_names(user.id)
            if "manage_roles" not in permissions:
                raise InsufficientPermissionsError(["manage_roles"])
        """
        query = (
            select(Permission.name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
            .distinct()
        )
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def get_user_roles(self, user_id: uuid.UUID) -> list[UserRole]:
        """Role links of a user, primary first."""
        query = (
            select(UserRole)
            .where(UserRole.user_id == user_id)
            .order_by(UserRole.is_primary.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def replace_role_permissions(
        self, role_id: uuid.UUID, permission_ids: Iterable[uuid.UUID]
    ) -> None:
        """Delete every grant of the role, then insert the given ones."""
        await self.session.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
        self.session.add_all(
            RolePermission(role_id=role_id, permission_id=pid) for pid in set(permission_ids)
        )
        await self.session.flush()

    async def replace_user_roles(
        self,
        user_id: uuid.UUID,
        primary_role_id: uuid.UUID,
        additional_role_ids: Iterable[uuid.UUID],
    ) -> None:
        """
        Delete every role link of the user, then insert the new set.

        Exactly one inserted row is primary. Additional ids equal to the
        primary id are ignored.
        """
        await self.session.execute(delete(UserRole).where(UserRole.user_id == user_id))

        links = [UserRole(user_id=user_id, role_id=primary_role_id, is_primary=True)]
        for role_id in dict.fromkeys(additional_role_ids):
            if role_id != primary_role_id:
                links.append(UserRole(user_id=user_id, role_id=role_id, is_primary=False))

        self.session.add_all(links)
        await self.session.flush()

    async def count_users_with_role(self, role_id: uuid.UUID) -> int:
        query = (
            select(func.count())
            .select_from(UserRole)
            .join(User, User.id == UserRole.user_id)
            .where(UserRole.role_id == role_id, User.deleted_at.is_(None))
        )
        result = await self.session.execute(query)
        return result.scalar_one()
