"""
User Pydantic schemas for API request/response handling.

This module provides:
- User creation and update schemas
- User response schemas
- Password change and role assignment schemas
"""

import uuid
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from src.schemas.common import CamelModel


class UserCreate(CamelModel):
    """
    Schema for an administrator creating a user.

    ``role`` names the primary role; ``additional_roles`` the others.
    Password strength is checked by the service so that a weak password
    reports the same 400 as change-password does.
    """

    email: EmailStr = Field(description="User's email address")
    name: str = Field(min_length=1, max_length=255, description="Display name")
    password: str = Field(description="Initial password")
    role: str | None = Field(default=None, description="Primary role name (default USER)")
    additional_roles: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value


class UserUpdate(CamelModel):
    """
    Schema for updating user information.

    All fields are optional to support partial updates. When ``role`` or
    ``additional_roles`` is sent, the whole role set is replaced.
    """

    email: EmailStr | None = Field(default=None, description="New email address")
    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: str | None = Field(default=None, description="New primary role name")
    additional_roles: list[str] | None = Field(default=None)


class UserRolesUpdate(CamelModel):
    """Replacement role set for a user."""

    role: str = Field(description="Primary role name")
    additional_roles: list[str] = Field(default_factory=list)


class UserRolesResponse(CamelModel):
    role: str | None
    additional_roles: list[str]
    permissions: list[str]


class UserPasswordChange(CamelModel):
    """Password change request; the current password is required."""

    current_password: str = Field(description="Current password")
    new_password: str = Field(description="New password")


class UserResponse(CamelModel):
    """User as returned by the API. Never includes the password hash."""

    id: uuid.UUID
    email: str
    name: str | None = None
    role: str | None = Field(default=None, description="Primary role name")
    additional_roles: list[str] = Field(default_factory=list)
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.primary_role_name,
            additional_roles=user.additional_role_names,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserSummary(CamelModel):
    """Compact user reference embedded in reports, tickets and comments."""

    id: uuid.UUID
    name: str | None = None
    email: str


class UserFilterParams(CamelModel):
    search: str | None = Field(default=None, description="Match email or name")
