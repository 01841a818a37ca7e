"""
Unit tests for UserService.

All tests are fully mocked - no database or external dependencies.
"""

from unittest.mock import AsyncMock, patch

import pytest

from src.exceptions import AlreadyExistsError, NotFoundError, ValidationError
from src.models.audit_log import AuditAction
from src.schemas.common import PaginationParams
from src.schemas.user import UserCreate, UserUpdate
from src.services.user_service import UserService

MODULE = "src.services.user_service"


@pytest.fixture
def mock_session():
    """Create a mock AsyncSession."""
    return AsyncMock()


@pytest.fixture
def mock_user_repo():
    repo = AsyncMock()
    repo.add.side_effect = lambda user: user
    repo.update.side_effect = lambda user: user
    repo.email_exists.return_value = False
    return repo


@pytest.fixture
def mock_role_repo(role_factory):
    repo = AsyncMock()
    known = {"USER", "STAFF", "ADMIN", "MAINTENANCE_WORKER"}
    repo.get_by_name.side_effect = lambda name: role_factory(name) if name in known else None
    return repo


@pytest.fixture
def mock_permission_service():
    return AsyncMock()


@pytest.fixture
def mock_audit_service():
    return AsyncMock()


@pytest.fixture
def user_service(
    mock_session, mock_user_repo, mock_role_repo, mock_permission_service, mock_audit_service
):
    """Create UserService with mocked dependencies."""
    with (
        patch(f"{MODULE}.UserRepository", return_value=mock_user_repo),
        patch(f"{MODULE}.RoleRepository", return_value=mock_role_repo),
        patch(f"{MODULE}.PermissionService", return_value=mock_permission_service),
        patch(f"{MODULE}.AuditService", return_value=mock_audit_service),
    ):
        service = UserService(mock_session)
    return service


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_create_with_roles(
        self,
        user_service,
        mock_permission_service,
        mock_audit_service,
        mock_session,
        admin_user_model,
        user_factory,
    ):
        created = user_factory(email="worker@example.com", role="STAFF")
        mock_permission_service.replace_user_roles.return_value = created

        user = await user_service.create_user(
            UserCreate(
                email="Worker@Example.com",
                name="Worker",
                password="SecurePass1",
                role="STAFF",
                additional_roles=["MAINTENANCE_WORKER"],
            ),
            admin_user_model,
        )

        assert user is created
        call = mock_permission_service.replace_user_roles.call_args
        assert len(call.args[2]) == 1
        assert call.kwargs["commit"] is False
        assert call.kwargs["actor_id"] == admin_user_model.id
        assert mock_audit_service.log_event.call_args.kwargs["action"] == AuditAction.CREATE
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_role_is_rejected(
        self, user_service, mock_user_repo, admin_user_model
    ):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.create_user(
                UserCreate(
                    email="x@example.com",
                    name="X",
                    password="SecurePass1",
                    role="STAFF",
                    additional_roles=["PILOT"],
                ),
                admin_user_model,
            )

        assert exc_info.value.error_code == "UNKNOWN_ROLE"
        assert exc_info.value.details == {"roles": ["PILOT"]}
        mock_user_repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_email(self, user_service, mock_user_repo, admin_user_model):
        mock_user_repo.email_exists.return_value = True

        with pytest.raises(AlreadyExistsError):
            await user_service.create_user(
                UserCreate(email="x@example.com", name="X", password="SecurePass1"),
                admin_user_model,
            )


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_email_taken(self, user_service, mock_user_repo, regular_user, admin_user_model):
        mock_user_repo.get_by_id.return_value = regular_user
        mock_user_repo.email_exists.return_value = True

        with pytest.raises(AlreadyExistsError):
            await user_service.update_user(
                regular_user.id, UserUpdate(email="other@example.com"), admin_user_model
            )

    @pytest.mark.asyncio
    async def test_profile_only_keeps_roles(
        self, user_service, mock_user_repo, mock_permission_service, regular_user, admin_user_model
    ):
        mock_user_repo.get_by_id.return_value = regular_user

        user = await user_service.update_user(
            regular_user.id, UserUpdate(name="Renamed"), admin_user_model
        )

        assert user.name == "Renamed"
        mock_permission_service.replace_user_roles.assert_not_called()

    @pytest.mark.asyncio
    async def test_primary_role_change_keeps_additional(
        self,
        user_service,
        mock_user_repo,
        mock_role_repo,
        mock_permission_service,
        admin_user_model,
        user_factory,
    ):
        user = user_factory(role="USER", additional_roles=("MAINTENANCE_WORKER",))
        mock_user_repo.get_by_id.return_value = user

        await user_service.update_user(user.id, UserUpdate(role="STAFF"), admin_user_model)

        looked_up = [c.args[0] for c in mock_role_repo.get_by_name.call_args_list]
        assert looked_up == ["STAFF", "MAINTENANCE_WORKER"]
        mock_permission_service.replace_user_roles.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service, mock_user_repo, admin_user_model):
        mock_user_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await user_service.get_user(admin_user_model.id)


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, user_service, mock_user_repo, admin_user_model):
        mock_user_repo.get_by_id.return_value = admin_user_model

        with pytest.raises(ValidationError) as exc_info:
            await user_service.delete_user(admin_user_model.id, admin_user_model)

        assert exc_info.value.error_code == "SELF_DELETE"
        mock_user_repo.soft_delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_email_freed_for_reuse(
        self, user_service, mock_user_repo, mock_audit_service, mock_session, regular_user,
        admin_user_model,
    ):
        mock_user_repo.get_by_id.return_value = regular_user

        await user_service.delete_user(regular_user.id, admin_user_model)

        assert regular_user.email.startswith("user@example.com.deleted.")
        mock_user_repo.soft_delete.assert_awaited_once_with(regular_user)
        old_values = mock_audit_service.log_event.call_args.kwargs["old_values"]
        assert old_values == {"email": "user@example.com"}
        mock_session.commit.assert_awaited_once()


class TestListUsers:
    @pytest.mark.asyncio
    async def test_search_and_pagination(self, user_service, mock_user_repo):
        mock_user_repo.filter_users.return_value = ([], 0)

        await user_service.list_users(PaginationParams(page=3, page_size=5), search="ann")

        mock_user_repo.filter_users.assert_awaited_once_with(search="ann", offset=10, limit=5)
