"""
Unit tests for AuthService.

All tests are fully mocked - no database or external dependencies.
"""

from unittest.mock import AsyncMock, patch

import pytest

from src.core.security import decode_token
from src.exceptions import (
    AlreadyExistsError,
    InternalError,
    InvalidCredentialsError,
    ValidationError,
    WeakPasswordError,
)
from src.models.audit_log import AuditAction
from src.schemas.auth import RegisterRequest
from src.services.auth_service import AuthService

MODULE = "src.services.auth_service"


@pytest.fixture
def mock_session():
    """Create a mock AsyncSession."""
    return AsyncMock()


@pytest.fixture
def mock_user_repo():
    repo = AsyncMock()
    repo.add.side_effect = lambda user: user
    repo.email_exists.return_value = False
    return repo


@pytest.fixture
def mock_role_repo():
    return AsyncMock()


@pytest.fixture
def mock_permission_service():
    service = AsyncMock()
    service.get_effective_permissions.return_value = {"create_reports", "view_reports"}
    return service


@pytest.fixture
def mock_audit_service():
    return AsyncMock()


@pytest.fixture
def auth_service(
    mock_session, mock_user_repo, mock_role_repo, mock_permission_service, mock_audit_service
):
    """Create AuthService with mocked dependencies."""
    with (
        patch(f"{MODULE}.UserRepository", return_value=mock_user_repo),
        patch(f"{MODULE}.RoleRepository", return_value=mock_role_repo),
        patch(f"{MODULE}.PermissionService", return_value=mock_permission_service),
        patch(f"{MODULE}.AuditService", return_value=mock_audit_service),
    ):
        service = AuthService(mock_session)
    return service


class TestRegister:
    """Test the register method."""

    @pytest.mark.asyncio
    async def test_register_success(
        self,
        auth_service,
        mock_role_repo,
        mock_permission_service,
        mock_audit_service,
        mock_session,
        regular_user,
        role_factory,
    ):
        """New accounts get the default role and a token carrying permissions."""
        default_role = role_factory("USER")
        mock_role_repo.get_by_name.return_value = default_role
        mock_permission_service.replace_user_roles.return_value = regular_user

        response = await auth_service.register(
            RegisterRequest(email="New@Example.com", password="SecurePass1", name=" New ")
        )

        created = mock_permission_service.replace_user_roles.call_args
        assert created.args[1] == default_role.id
        assert created.kwargs["commit"] is False
        assert mock_audit_service.log_event.call_args.kwargs["action"] == AuditAction.REGISTER
        mock_session.commit.assert_awaited_once()

        assert response.user.id == regular_user.id
        assert response.user.role == "USER"
        assert response.user.permissions == ["create_reports", "view_reports"]
        claims = decode_token(response.token)
        assert claims["sub"] == str(regular_user.id)
        assert claims["permissions"] == ["create_reports", "view_reports"]

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service, mock_user_repo, mock_session):
        mock_user_repo.email_exists.return_value = True

        with pytest.raises(AlreadyExistsError):
            await auth_service.register(
                RegisterRequest(email="taken@example.com", password="SecurePass1", name="Taken")
            )

        mock_user_repo.add.assert_not_called()
        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_weak_password(self, auth_service, mock_user_repo):
        with pytest.raises(WeakPasswordError):
            await auth_service.register(
                RegisterRequest(email="new@example.com", password="short", name="New")
            )

        mock_user_repo.email_exists.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_without_seeded_default_role(
        self, auth_service, mock_role_repo, mock_user_repo
    ):
        mock_role_repo.get_by_name.return_value = None

        with pytest.raises(InternalError):
            await auth_service.register(
                RegisterRequest(email="new@example.com", password="SecurePass1", name="New")
            )

        mock_user_repo.add.assert_not_called()


class TestLogin:
    """Test the login method."""

    @pytest.mark.asyncio
    async def test_login_success(
        self, auth_service, mock_user_repo, mock_audit_service, mock_session, regular_user
    ):
        mock_user_repo.get_by_email.return_value = regular_user

        response = await auth_service.login(regular_user.email, "TestPass123", ip_address="1.2.3.4")

        mock_user_repo.update_last_login.assert_awaited_once_with(regular_user)
        assert mock_audit_service.log_login.call_args.kwargs["user_id"] == regular_user.id
        assert response.user.email == regular_user.email
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_wrong_password_is_audited(
        self, auth_service, mock_user_repo, mock_audit_service, mock_session, regular_user
    ):
        """The failed attempt is committed even though the request fails."""
        mock_user_repo.get_by_email.return_value = regular_user

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(regular_user.email, "WrongPass999")

        kwargs = mock_audit_service.log_login.call_args.kwargs
        assert kwargs["success"] is False
        assert kwargs["user_id"] == regular_user.id
        mock_session.commit.assert_awaited_once()
        mock_user_repo.update_last_login.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service, mock_user_repo, mock_audit_service):
        mock_user_repo.get_by_email.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("ghost@example.com", "TestPass123")

        assert mock_audit_service.log_login.call_args.kwargs["user_id"] is None


class TestChangePassword:
    """Test the change_password method."""

    @pytest.mark.asyncio
    async def test_wrong_current_password(
        self, auth_service, mock_user_repo, mock_audit_service, mock_session, regular_user
    ):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.change_password(regular_user, "WrongPass999", "NewPass456")

        assert exc_info.value.error_code == "INVALID_CURRENT_PASSWORD"
        assert mock_audit_service.log_password_change.call_args.kwargs["success"] is False
        mock_user_repo.update.assert_not_called()
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_weak_new_password(self, auth_service, mock_user_repo, regular_user):
        with pytest.raises(WeakPasswordError):
            await auth_service.change_password(regular_user, "TestPass123", "weak")

        mock_user_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_change_password_success(
        self, auth_service, mock_user_repo, mock_session, regular_user
    ):
        old_hash = regular_user.password_hash

        await auth_service.change_password(regular_user, "TestPass123", "NewPass456")

        assert regular_user.password_hash != old_hash
        mock_user_repo.update.assert_awaited_once_with(regular_user)
        mock_session.commit.assert_awaited_once()
