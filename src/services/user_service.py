"""
User management service for CRUD operations and role assignment.

This module provides:
- List users with search and pagination
- Create users with a role set
- Update user profile and roles
- Soft delete users (email suffixed so the address can be reused)
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.security import hash_password
from src.exceptions import AlreadyExistsError, NotFoundError, ValidationError
from src.models.audit_log import AuditAction
from src.models.user import Role, User
from src.repositories.role_repository import RoleRepository
from src.repositories.user_repository import UserRepository
from src.schemas.common import PaginationParams
from src.schemas.user import UserCreate, UserRolesResponse, UserUpdate
from src.services.audit_service import AuditService
from src.services.auth_service import check_password_strength
from src.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class UserService:
    """
    Service class for user management operations.

    Permission checks happen in the route guard; this service assumes the
    caller is allowed to perform the operation.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.permission_service = PermissionService(session)
        self.audit_service = AuditService(session)

    async def _get_or_404(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            logger.warning(f"User {user_id} not found")
            raise NotFoundError("User")
        return user

    async def _resolve_roles(
        self, primary: str | None, additional: list[str] | None
    ) -> tuple[Role, list[Role]]:
        """Look up roles by name; unknown names are a 400."""
        names = [primary or settings.default_role, *(additional or [])]
        roles: list[Role] = []
        unknown: list[str] = []
        for name in names:
            role = await self.role_repo.get_by_name(name)
            if role is None:
                unknown.append(name)
            else:
                roles.append(role)
        if unknown:
            raise ValidationError(
                "Unknown role(s)", error_code="UNKNOWN_ROLE", details={"roles": unknown}
            )
        return roles[0], roles[1:]

    async def list_users(
        self, pagination: PaginationParams, search: str | None = None
    ) -> tuple[list[User], int]:
        """Live users matching ``search`` (email or name), newest first."""
        return await self.user_repo.filter_users(
            search=search, offset=pagination.offset, limit=pagination.page_size
        )

    async def get_user(self, user_id: uuid.UUID) -> User:
        return await self._get_or_404(user_id)

    async def create_user(
        self,
        data: UserCreate,
        current_user: User,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> User:
        """
        Create a user with a primary role and optional additional roles.

        Raises:
            AlreadyExistsError: If the email is in use
            WeakPasswordError: If the password fails the policy
            ValidationError: If a role name is unknown
        """
        check_password_strength(data.password)
        if await self.user_repo.email_exists(data.email):
            raise AlreadyExistsError("User with this email")
        primary, additional = await self._resolve_roles(data.role, data.additional_roles)

        user = await self.user_repo.add(
            User(
                email=data.email.lower(),
                name=data.name,
                password_hash=hash_password(data.password),
            )
        )
        user = await self.permission_service.replace_user_roles(
            user.id,
            primary.id,
            [role.id for role in additional],
            actor_id=current_user.id,
            request_id=request_id,
            ip_address=ip_address,
            user_agent=user_agent,
            commit=False,
        )
        await self.audit_service.log_event(
            user_id=current_user.id,
            action=AuditAction.CREATE,
            entity_type="user",
            entity_id=user.id,
            new_values={"email": user.email, "name": user.name, "role": user.role},
            description=f"User {user.email} created",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"User {user.id} created by {current_user.id}")
        return user

    async def update_user(
        self,
        user_id: uuid.UUID,
        data: UserUpdate,
        current_user: User,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> User:
        """
        Partially update a user; role fields replace the whole role set.

        Raises:
            NotFoundError: If the user does not exist
            AlreadyExistsError: If the new email is in use
        """
        user = await self._get_or_404(user_id)
        changes = data.model_dump(exclude_unset=True)
        old_values: dict[str, Any] = {"email": user.email, "name": user.name}

        if changes.get("email") and changes["email"].lower() != user.email.lower():
            if await self.user_repo.email_exists(changes["email"], exclude_id=user.id):
                logger.warning(f"Email {changes['email']} already in use")
                raise AlreadyExistsError("User with this email")
            user.email = changes["email"].lower()
        if changes.get("name"):
            user.name = changes["name"].strip()

        if "role" in changes or "additional_roles" in changes:
            primary, additional = await self._resolve_roles(
                changes.get("role") or user.primary_role_name,
                changes["additional_roles"]
                if changes.get("additional_roles") is not None
                else user.additional_role_names,
            )
            await self.permission_service.replace_user_roles(
                user.id,
                primary.id,
                [role.id for role in additional],
                actor_id=current_user.id,
                request_id=request_id,
                ip_address=ip_address,
                user_agent=user_agent,
                commit=False,
            )

        user = await self.user_repo.update(user)
        await self.audit_service.log_event(
            user_id=current_user.id,
            action=AuditAction.UPDATE,
            entity_type="user",
            entity_id=user.id,
            old_values=old_values,
            new_values={"email": user.email, "name": user.name},
            description=f"User {user.email} updated",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"User {user_id} updated by {current_user.id}")
        return user

    async def delete_user(
        self,
        user_id: uuid.UUID,
        current_user: User,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Soft delete a user.

        The email gets a ``.deleted.<timestamp>`` suffix so the address can be
        registered again; the row stays for authorship of past work.
        """
        user = await self._get_or_404(user_id)
        if user.id == current_user.id:
            raise ValidationError("You cannot delete your own account", error_code="SELF_DELETE")

        old_email = user.email
        user.email = f"{user.email}.deleted.{int(datetime.now(UTC).timestamp())}"
        await self.user_repo.soft_delete(user)

        await self.audit_service.log_event(
            user_id=current_user.id,
            action=AuditAction.DELETE,
            entity_type="user",
            entity_id=user.id,
            old_values={"email": old_email},
            description=f"User {old_email} deleted",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"User {user_id} soft deleted by {current_user.id}")

    async def get_user_roles(self, user_id: uuid.UUID) -> UserRolesResponse:
        user = await self._get_or_404(user_id)
        permissions = await self.permission_service.get_effective_permissions(user.id)
        return UserRolesResponse(
            role=user.primary_role_name,
            additional_roles=user.additional_role_names,
            permissions=sorted(permissions),
        )

    async def set_user_roles(
        self,
        user_id: uuid.UUID,
        role: str,
        additional_roles: list[str],
        current_user: User,
        request_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> UserRolesResponse:
        user = await self._get_or_404(user_id)
        primary, additional = await self._resolve_roles(role, additional_roles)

        await self.permission_service.replace_user_roles(
            user.id,
            primary.id,
            [r.id for r in additional],
            actor_id=current_user.id,
            request_id=request_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return await self.get_user_roles(user.id)
