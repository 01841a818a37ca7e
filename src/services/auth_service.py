"""
Authentication service for user registration, login and password changes.

This module provides:
- User registration with email/password (USER role as primary)
- User login with JWT access token generation
- Identity lookup with effective permissions
- Password change with current password verification
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.security import (
    create_access_token,
    hash_password,
    validate_password_strength,
    verify_password,
)
from src.exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    InvalidCredentialsError,
    InternalError,
    ValidationError,
    WeakPasswordError,
)
from src.models.audit_log import AuditAction
from src.models.user import User
from src.repositories.role_repository import RoleRepository
from src.repositories.user_repository import UserRepository
from src.schemas.auth import AuthUser, RegisterRequest, TokenResponse
from src.services.audit_service import AuditService
from src.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


def check_password_strength(password: str) -> None:
    """Raise WeakPasswordError unless the password meets the policy."""
    is_valid, error_message = validate_password_strength(password)
    if not is_valid:
        raise WeakPasswordError(error_message)


class AuthService:
    """
    Service class for authentication operations.

    This service handles:
    - User registration
    - Login and token generation
    - Password changes
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.permission_service = PermissionService(session)
        self.audit_service = AuditService(session)

    async def build_identity(self, user: User) -> AuthUser:
        """Identity with permissions resolved from the role store."""
        permissions = await self.permission_service.get_effective_permissions(user.id)
        return AuthUser(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.primary_role_name,
            additional_roles=user.additional_role_names,
            permissions=sorted(permissions),
        )

    def _issue_token(self, identity: AuthUser) -> TokenResponse:
        token = create_access_token(
            {
                "sub": str(identity.id),
                "email": identity.email,
                "name": identity.name,
                "role": identity.role,
                "additionalRoles": identity.additional_roles,
                "permissions": identity.permissions,
            }
        )
        return TokenResponse(token=token, user=identity)

    async def register(
        self,
        data: RegisterRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
    ) -> TokenResponse:
        """
        Register a new user with the default role as primary.

        Raises:
            AlreadyExistsError: If the email is registered
            WeakPasswordError: If the password fails the policy
        """
        check_password_strength(data.password)

        if await self.user_repo.email_exists(data.email):
            logger.warning(f"Registration failed: email {data.email} already registered")
            raise AlreadyExistsError("User with this email")

        default_role = await self.role_repo.get_by_name(settings.default_role)
        if default_role is None:
            logger.error(f"Default role {settings.default_role} is missing; run seed-permissions")
            raise InternalError("Default role is not configured")

        user = await self.user_repo.add(
            User(
                email=data.email.lower(),
                name=data.name.strip(),
                password_hash=hash_password(data.password),
            )
        )
        user = await self.permission_service.replace_user_roles(
            user.id,
            default_role.id,
            actor_id=user.id,
            request_id=request_id,
            ip_address=ip_address,
            user_agent=user_agent,
            commit=False,
        )
        await self.audit_service.log_event(
            user_id=user.id,
            action=AuditAction.REGISTER,
            entity_type="user",
            entity_id=user.id,
            new_values={"email": user.email, "name": user.name},
            description="User registered",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"User registered: {user.id} ({user.email})")
        return self._issue_token(await self.build_identity(user))

    async def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
    ) -> TokenResponse:
        """
        Authenticate with email and password.

        Deleted users are invisible to the lookup, so they fail exactly like
        an unknown email.

        Raises:
            InvalidCredentialsError: If the email or password is wrong
        """
        user = await self.user_repo.get_by_email(email)

        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Login failed for {email}")
            await self.audit_service.log_login(
                user_id=user.id if user else None,
                ip_address=ip_address,
                user_agent=user_agent,
                request_id=request_id,
                success=False,
                error_message="Invalid credentials",
            )
            await self.session.commit()
            raise InvalidCredentialsError()

        await self.user_repo.update_last_login(user)
        await self.audit_service.log_login(
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"User logged in: {user.id}")
        return self._issue_token(await self.build_identity(user))

    async def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
    ) -> None:
        """
        Change the caller's password.

        Raises:
            ValidationError: If the current password is wrong
            WeakPasswordError: If the new password fails the policy
        """
        if user.deleted_at is not None:
            raise AuthenticationError("User not found")

        if not verify_password(current_password, user.password_hash):
            logger.warning(f"Password change failed for {user.id}: wrong current password")
            await self.audit_service.log_password_change(
                user_id=user.id,
                ip_address=ip_address,
                user_agent=user_agent,
                request_id=request_id,
                success=False,
                error_message="Current password is incorrect",
            )
            await self.session.commit()
            raise ValidationError(
                "Current password is incorrect", error_code="INVALID_CURRENT_PASSWORD"
            )

        check_password_strength(new_password)

        user.password_hash = hash_password(new_password)
        await self.user_repo.update(user)
        await self.audit_service.log_password_change(
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        await self.session.commit()

        logger.info(f"Password changed for user {user.id}")
