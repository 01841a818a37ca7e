"""
Authentication Pydantic schemas.

This module provides:
- Registration and login request schemas
- Token and identity response schemas
"""

import uuid

from pydantic import EmailStr, Field

from src.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr = Field(description="User's email address")
    password: str = Field(description="Password (min 8 characters, a letter and a digit)")
    name: str = Field(min_length=1, max_length=255, description="Display name")


class LoginRequest(CamelModel):
    """
    Schema for login request.

    Example:
        {"email": "user@example.com", "password": "secret123"}
    """

    email: EmailStr = Field(description="User's email address")
    password: str = Field(min_length=1, description="User's password")


class AuthUser(CamelModel):
    """Identity returned by login and /me, with effective permissions."""

    id: uuid.UUID
    email: str
    name: str | None = None
    role: str | None = None
    additional_roles: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)


class TokenResponse(CamelModel):
    """Access token plus the identity it was issued for."""

    token: str
    token_type: str = "bearer"
    user: AuthUser
