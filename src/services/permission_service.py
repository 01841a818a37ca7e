"""
Role-permission store.

This module is the single source of truth for which permissions a role
grants and which roles a user holds. There is no in-process cache: every
read goes to the database, so a change made here is visible to the very
next authorization check.

Usage:
    permission_service = PermissionService(session)
    await permission_service.set_permissions_for_role(
        "STAFF", ["view_tickets", "claim_tickets"], actor_id=admin.id
    )
"""

import logging
import uuid
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.permissions import (
    ALL_PERMISSIONS,
    DEFAULT_ROLE_PERMISSIONS,
    PERMISSION_DESCRIPTIONS,
    ROLE_DESCRIPTIONS,
    default_permissions_for,
    normalize_permission,
    unknown_permissions,
)
from src.exceptions import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    UnknownPermissionError,
    ValidationError,
)
from src.models.audit_log import AuditAction
from src.models.user import Permission, Role, User
from src.repositories.role_repository import PermissionRepository, RoleRepository
from src.repositories.user_repository import UserRepository
from src.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class PermissionService:
    """
    Service for roles, their permission grants and user role assignment.

    Every mutating method runs inside the session's transaction and commits
    once at the end, so a failure leaves the previous state untouched.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.role_repo = RoleRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.user_repo = UserRepository(session)
        self.audit_service = AuditService(session)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_permissions_for_role(self, role_name: str) -> set[str]:
        """Permission names granted by a role; empty for an unknown role."""
        return await self.role_repo.get_permission_names_for_role(role_name)

    async def get_effective_permissions(self, user_id: uuid.UUID) -> set[str]:
        """Union of permissions over every role the user holds."""
        return await self.role_repo.get_user_permission_names(user_id)

    async def list_roles(self) -> list[Role]:
        return await self.role_repo.list_roles()

    async def list_permissions(self) -> list[Permission]:
        return await self.permission_repo.list_all()

    async def get_role(self, role_name: str) -> Role:
        role = await self.role_repo.get_by_name(role_name)
        if role is None:
            raise NotFoundError("Role", message=f"Role {role_name} not found")
        return role

    # -------------------------------------------------------------------------
    # Role grants
    # -------------------------------------------------------------------------

    async def _resolve_permissions(self, names: Iterable[str]) -> list[Permission]:
        """Catalog rows for ``names``; raises before any write if one is unknown."""
        wanted = {normalize_permission(n) for n in names}
        unknown = unknown_permissions(wanted)
        if unknown:
            raise UnknownPermissionError(unknown)

        permissions = await self.permission_repo.get_by_names(wanted)
        missing = wanted - {p.name for p in permissions}
        if missing:
            # In the catalog but never seeded: add the rows on the fly
            for name in sorted(missing):
                permissions.append(
                    await self.permission_repo.add(
                        Permission(name=name, description=PERMISSION_DESCRIPTIONS.get(name))
                    )
                )
        return permissions

    async def _replace_grants(self, role: Role, names: Iterable[str]) -> tuple[set[str], set[str]]:
        permissions = await self._resolve_permissions(names)
        before = await self.role_repo.get_permission_names_for_role(role.name)

        await self.role_repo.replace_role_permissions(role.id, [p.id for p in permissions])
        await self.session.refresh(role, ["role_permissions"])

        after = {p.name for p in permissions}
        return after - before, before - after

    async def _audit_grant_change(
        self,
        role: Role,
        granted: set[str],
        revoked: set[str],
        actor_id: uuid.UUID | None,
        request_id: str | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> None:
        if granted:
            await self.audit_service.log_event(
                user_id=actor_id,
                action=AuditAction.PERMISSION_GRANT,
                entity_type="role",
                entity_id=role.id,
                new_values={"role": role.name, "granted": sorted(granted)},
                description=f"Granted {len(granted)} permission(s) to role {role.name}",
                ip_address=ip_address,
                user_agent=user_agent,
                request_id=request_id,
            )
        if revoked:
            await self.audit_service.log_event(
                user_id=actor_id,
                action=AuditAction.PERMISSION_REVOKE,
                entity_type="role",
                entity_id=role.id,
                old_values={"role": role.name, "revoked": sorted(revoked)},
                description=f"Revoked {len(revoked)} permission(s) from role {role.name}",
                ip_address=ip_address,
                user_agent=user_agent,
                request_id=request_id,
            )

    async def set_permissions_for_role(
        self,
        role_name: str,
        permission_names: Iterable[str],
        actor_id: uuid.UUID | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> set[str]:
        """
        Replace the full permission set of a role.

        Raises:
            UnknownPermissionError: If any name is not in the catalog
                (nothing is changed)
            NotFoundError: If the role does not exist

        Returns:
            The role's permission names after the change
        """
        names = list(permission_names)
        unknown = unknown_permissions(names)
        if unknown:
            logger.warning(f"Rejected unknown permissions for role {role_name}: {sorted(unknown)}")
            raise UnknownPermissionError(unknown)

        role = await self.get_role(role_name)
        granted, revoked = await self._replace_grants(role, names)
        await self._audit_grant_change(
            role, granted, revoked, actor_id, request_id, ip_address, user_agent
        )
        await self.session.commit()

        logger.info(
            f"Permissions of role {role.name} replaced by {actor_id}: "
            f"+{sorted(granted)} -{sorted(revoked)}"
        )
        return role.permission_names

    async def reset_role_to_default(
        self,
        role_name: str,
        actor_id: uuid.UUID | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> set[str]:
        """
        Restore a role's default permission set.

        Roles without a default mapping reset to the empty set.
        """
        role = await self.get_role(role_name)
        granted, revoked = await self._replace_grants(role, default_permissions_for(role.name))

        await self.audit_service.log_event(
            user_id=actor_id,
            action=AuditAction.ROLE_RESET,
            entity_type="role",
            entity_id=role.id,
            old_values={"revoked": sorted(revoked)},
            new_values={"granted": sorted(granted)},
            description=f"Role {role.name} reset to defaults",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"Role {role.name} reset to default permissions by {actor_id}")
        return role.permission_names

    # -------------------------------------------------------------------------
    # Role CRUD
    # -------------------------------------------------------------------------

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        permissions: Iterable[str] = (),
        actor_id: uuid.UUID | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Role:
        """
        Create a role with an initial permission set.

        Raises:
            ValidationError: If the name is blank
            AlreadyExistsError: If a role with that name exists
            UnknownPermissionError: If a permission is not in the catalog
        """
        name = (name or "").strip().upper()
        if not name:
            raise ValidationError("Role name is required", error_code="REQUIRED_FIELD")
        if await self.role_repo.get_by_name(name) is not None:
            logger.warning(f"Role {name} already exists")
            raise AlreadyExistsError("Role", message=f"Role {name} already exists")

        permission_rows = await self._resolve_permissions(permissions)

        role = await self.role_repo.add(Role(name=name, description=description))
        await self.role_repo.replace_role_permissions(role.id, [p.id for p in permission_rows])
        await self.session.refresh(role, ["role_permissions"])

        await self.audit_service.log_event(
            user_id=actor_id,
            action=AuditAction.ROLE_CREATE,
            entity_type="role",
            entity_id=role.id,
            new_values={"name": name, "permissions": sorted(role.permission_names)},
            description=f"Role {name} created",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"Role {name} created by {actor_id}")
        return role

    async def update_role(
        self,
        role_name: str,
        description: str | None = None,
        permissions: Iterable[str] | None = None,
        actor_id: uuid.UUID | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Role:
        """Update a role's description and, when given, its permission set."""
        role = await self.get_role(role_name)
        old_description = role.description

        if permissions is not None:
            granted, revoked = await self._replace_grants(role, permissions)
            await self._audit_grant_change(
                role, granted, revoked, actor_id, request_id, ip_address, user_agent
            )
        if description is not None:
            role.description = description
            role = await self.role_repo.update(role)

        await self.audit_service.log_event(
            user_id=actor_id,
            action=AuditAction.ROLE_UPDATE,
            entity_type="role",
            entity_id=role.id,
            old_values={"description": old_description},
            new_values={"description": role.description},
            description=f"Role {role.name} updated",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"Role {role.name} updated by {actor_id}")
        return role

    async def delete_role(
        self,
        role_name: str,
        actor_id: uuid.UUID | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Delete a role.

        Raises:
            NotFoundError: If the role does not exist
            ConflictError: If any live user still holds the role
        """
        role = await self.get_role(role_name)

        holders = await self.role_repo.count_users_with_role(role.id)
        if holders:
            logger.warning(f"Refused to delete role {role.name}: held by {holders} user(s)")
            raise ConflictError(
                f"Role {role.name} is still assigned to {holders} user(s)",
                details={"users": holders},
            )

        await self.audit_service.log_event(
            user_id=actor_id,
            action=AuditAction.ROLE_DELETE,
            entity_type="role",
            entity_id=role.id,
            old_values={"name": role.name, "permissions": sorted(role.permission_names)},
            description=f"Role {role.name} deleted",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.role_repo.delete(role)
        await self.session.commit()

        logger.info(f"Role {role_name} deleted by {actor_id}")

    # -------------------------------------------------------------------------
    # User role assignment
    # -------------------------------------------------------------------------

    async def replace_user_roles(
        self,
        user_id: uuid.UUID,
        primary_role_id: uuid.UUID,
        additional_role_ids: Iterable[uuid.UUID] = (),
        actor_id: uuid.UUID | None = None,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        commit: bool = True,
    ) -> User:
        """
        Replace every role a user holds.

        Exactly one link is primary, and the primary role's name is mirrored
        into the deprecated ``User.role`` column.

        Raises:
            NotFoundError: If the user or any role does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")

        additional = [rid for rid in dict.fromkeys(additional_role_ids) if rid != primary_role_id]
        roles = await self.role_repo.get_by_ids([primary_role_id, *additional])
        by_id = {role.id: role for role in roles}
        missing = [str(rid) for rid in [primary_role_id, *additional] if rid not in by_id]
        if missing:
            raise NotFoundError("Role", details={"role_ids": missing})

        old_roles = {
            "role": user.primary_role_name,
            "additional_roles": user.additional_role_names,
        }

        await self.role_repo.replace_user_roles(user.id, primary_role_id, additional)
        user.role = by_id[primary_role_id].name
        await self.session.flush()
        await self.session.refresh(user, ["user_roles"])

        await self.audit_service.log_event(
            user_id=actor_id,
            action=AuditAction.ROLE_ASSIGN,
            entity_type="user",
            entity_id=user.id,
            old_values=old_roles,
            new_values={
                "role": user.role,
                "additional_roles": sorted(by_id[rid].name for rid in additional),
            },
            description=f"Roles of user {user.email} replaced",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        if commit:
            await self.session.commit()

        logger.info(f"Roles of user {user.id} replaced by {actor_id}: primary={user.role}")
        return user

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    async def ensure_catalog(self) -> dict[str, int]:
        """
        Idempotently seed catalog permissions and the default roles.

        Existing roles keep their current grants; only roles missing from the
        database are created with their default permission set.

        Returns:
            Counts of created permissions and roles
        """
        existing = {p.name: p for p in await self.permission_repo.list_all()}
        created_permissions = 0
        for name in sorted(ALL_PERMISSIONS - existing.keys()):
            existing[name] = await self.permission_repo.add(
                Permission(name=name, description=PERMISSION_DESCRIPTIONS.get(name))
            )
            created_permissions += 1

        created_roles = 0
        for role_name, defaults in DEFAULT_ROLE_PERMISSIONS.items():
            if await self.role_repo.get_by_name(role_name) is not None:
                continue
            role = await self.role_repo.add(
                Role(name=role_name, description=ROLE_DESCRIPTIONS.get(role_name))
            )
            await self.role_repo.replace_role_permissions(
                role.id, [existing[name].id for name in defaults]
            )
            created_roles += 1

        await self.session.commit()

        logger.info(
            f"Permission catalog seeded: {created_permissions} permission(s), "
            f"{created_roles} role(s) created"
        )
        return {"permissions": created_permissions, "roles": created_roles}
