"""
Authentication API routes.

This module provides REST endpoints for:
- User registration
- User login
- Current identity with effective permissions
"""

import logging

from fastapi import APIRouter, Request, status

from src.api.dependencies import AuthServiceDep, ClientMeta, CurrentUser
from src.core.config import settings
from src.core.rate_limit import limiter
from src.schemas.auth import AuthUser, LoginRequest, RegisterRequest, TokenResponse
from src.schemas.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=ApiResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Register a new account with email, password and display name.

    **Password Requirements:**
    - Minimum 8 characters
    - At least 1 letter
    - At least 1 digit

    The account gets the default role (USER) as its primary role.

    **Rate Limit:** Configurable via RATE_LIMIT_REGISTER (default: 3/hour)
    """,
)
@limiter.limit(settings.rate_limit_register)
async def register(
    request: Request,
    data: RegisterRequest,
    auth_service: AuthServiceDep,
    meta: ClientMeta,
) -> ApiResponse[TokenResponse]:
    """
    Raises:
        409: Email already registered
        400: Password doesn't meet requirements
    """
    return ApiResponse(data=await auth_service.register(data, **meta.as_kwargs()))


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    summary="Login with email and password",
    description="""
    Authenticate and receive an access token together with the identity it
    was issued for (roles and effective permissions).

    **Rate Limit:** Configurable via RATE_LIMIT_LOGIN (default: 5/15minute)
    """,
)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    credentials: LoginRequest,
    auth_service: AuthServiceDep,
    meta: ClientMeta,
) -> ApiResponse[TokenResponse]:
    tokens = await auth_service.login(
        email=credentials.email,
        password=credentials.password,
        **meta.as_kwargs(),
    )
    return ApiResponse(data=tokens)


@router.get(
    "/me",
    response_model=ApiResponse[AuthUser],
    summary="Current identity",
)
async def me(current_user: CurrentUser, auth_service: AuthServiceDep) -> ApiResponse[AuthUser]:
    """Permissions are resolved from the role store, not from the token."""
    return ApiResponse(data=await auth_service.build_identity(current_user))
