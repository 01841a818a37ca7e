"""
Unit tests for authentication and the permission guard.

Tests cover:
- Bearer token extraction and validation (get_current_user)
- OR semantics of require_permissions
- Permissions re-read on every call
- Store failures surfacing as 500
"""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError as PydanticValidationError

from src.api.dependencies import (
    AuthContext,
    get_current_user,
    pagination_params,
    request_context,
    require_permissions,
)
from src.core.config import settings
from src.core.permissions import PermissionName as P
from src.core.security import create_access_token
from src.exceptions import (
    AuthenticationError,
    InsufficientPermissionsError,
    InternalError,
    InvalidTokenError,
)
from src.schemas.common import PaginationParams


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.fixture
def mock_request() -> MagicMock:
    request = MagicMock()
    request.method = "GET"
    request.url.path = "/api/tickets"
    request.state = MagicMock()
    return request


@pytest.fixture
def mock_user_repo():
    repo = AsyncMock()
    with patch("src.api.dependencies.UserRepository", return_value=repo):
        yield repo


@pytest.fixture
def mock_permission_service():
    service = AsyncMock()
    with patch("src.api.dependencies.PermissionService", return_value=service):
        yield service


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_missing_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(credentials=None, db=AsyncMock())

        assert exc_info.value.status_code == 401
        assert not isinstance(exc_info.value, InvalidTokenError)

    @pytest.mark.asyncio
    async def test_malformed_token(self, mock_user_repo):
        with pytest.raises(InvalidTokenError):
            await get_current_user(credentials=bearer("not-a-jwt"), db=AsyncMock())

        mock_user_repo.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_token(self, mock_user_repo, regular_user):
        token = create_access_token(
            {"sub": str(regular_user.id)}, expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(InvalidTokenError):
            await get_current_user(credentials=bearer(token), db=AsyncMock())

    @pytest.mark.asyncio
    async def test_non_uuid_subject(self, mock_user_repo):
        token = create_access_token({"sub": "user_123"})

        with pytest.raises(InvalidTokenError):
            await get_current_user(credentials=bearer(token), db=AsyncMock())

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_user_repo):
        mock_user_repo.get_by_id.return_value = None
        token = create_access_token({"sub": str(uuid.uuid4())})

        with pytest.raises(InvalidTokenError):
            await get_current_user(credentials=bearer(token), db=AsyncMock())

    @pytest.mark.asyncio
    async def test_deleted_user(self, mock_user_repo, regular_user):
        regular_user.deleted_at = datetime.now(UTC)
        mock_user_repo.get_by_id.return_value = regular_user
        token = create_access_token({"sub": str(regular_user.id)})

        with pytest.raises(InvalidTokenError):
            await get_current_user(credentials=bearer(token), db=AsyncMock())

    @pytest.mark.asyncio
    async def test_valid_token(self, mock_user_repo, regular_user):
        mock_user_repo.get_by_id.return_value = regular_user
        token = create_access_token({"sub": str(regular_user.id)})

        user = await get_current_user(credentials=bearer(token), db=AsyncMock())

        assert user is regular_user
        mock_user_repo.get_by_id.assert_called_once_with(regular_user.id)


class TestRequirePermissions:
    def test_needs_at_least_one_permission(self):
        with pytest.raises(ValueError):
            require_permissions()

    @pytest.mark.asyncio
    async def test_any_required_permission_admits(
        self, mock_request, mock_permission_service, regular_user
    ):
        mock_permission_service.get_effective_permissions.return_value = {"view_tickets"}
        guard = require_permissions(P.VIEW_TICKETS, P.VIEW_ALL_TICKETS)

        auth = await guard(mock_request, current_user=regular_user, db=AsyncMock())

        assert isinstance(auth, AuthContext)
        assert auth.user is regular_user
        assert auth.permissions == {"view_tickets"}
        assert auth.roles == ["USER"]
        assert mock_request.state.user is regular_user
        assert mock_request.state.permissions == {"view_tickets"}

    @pytest.mark.asyncio
    async def test_lacking_every_permission_is_forbidden(
        self, mock_request, mock_permission_service, regular_user
    ):
        mock_permission_service.get_effective_permissions.return_value = {"create_reports"}
        guard = require_permissions(P.MANAGE_ROLES, P.ASSIGN_PERMISSIONS)

        with pytest.raises(InsufficientPermissionsError) as exc_info:
            await guard(mock_request, current_user=regular_user, db=AsyncMock())

        assert exc_info.value.status_code == 403
        assert exc_info.value.details["required"] == ["assign_permissions", "manage_roles"]

    @pytest.mark.asyncio
    async def test_permissions_are_re_read_each_call(
        self, mock_request, mock_permission_service, regular_user
    ):
        """A revoke is visible to the next request without a new token."""
        mock_permission_service.get_effective_permissions.side_effect = [
            {"view_users"},
            set(),
        ]
        guard = require_permissions("view_users")

        await guard(mock_request, current_user=regular_user, db=AsyncMock())
        with pytest.raises(InsufficientPermissionsError):
            await guard(mock_request, current_user=regular_user, db=AsyncMock())

        assert mock_permission_service.get_effective_permissions.await_count == 2

    @pytest.mark.asyncio
    async def test_store_failure_is_internal_error(
        self, mock_request, mock_permission_service, regular_user
    ):
        mock_permission_service.get_effective_permissions.side_effect = ConnectionError("db down")
        guard = require_permissions(P.VIEW_TICKETS)

        with pytest.raises(InternalError) as exc_info:
            await guard(mock_request, current_user=regular_user, db=AsyncMock())

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_string_names_are_normalized(
        self, mock_request, mock_permission_service, regular_user
    ):
        mock_permission_service.get_effective_permissions.return_value = {"manage_locations"}
        guard = require_permissions("MANAGE_LOCATIONS")

        auth = await guard(mock_request, current_user=regular_user, db=AsyncMock())

        assert auth.has(P.MANAGE_LOCATIONS)
        assert not auth.has(P.MANAGE_CATEGORIES)


class TestRequestHelpers:
    def test_request_context(self):
        request = MagicMock()
        request.state.request_id = "req-1"
        request.client.host = "10.0.0.1"
        request.headers = {"user-agent": "pytest"}

        meta = request_context(request)

        assert meta.as_kwargs() == {
            "request_id": "req-1",
            "ip_address": "10.0.0.1",
            "user_agent": "pytest",
        }

    def test_pagination_params(self):
        params = pagination_params(page=3, page_size=10)

        assert params.page == 3
        assert params.page_size == 10
        assert params.offset == 20

    def test_page_size_capped_by_setting(self):
        at_limit = pagination_params(page=1, page_size=settings.max_page_size)
        assert at_limit.page_size == settings.max_page_size

        with pytest.raises(PydanticValidationError):
            PaginationParams(page=1, page_size=settings.max_page_size + 1)
