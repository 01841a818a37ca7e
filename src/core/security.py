"""
Security utilities for authentication.

This module provides:
- Password hashing with Argon2id
- Password strength validation
- JWT access token generation and validation
"""

import logging
import re
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)
from jose import JWTError, jwt

from src.core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Password Hashing with Argon2id
# =============================================================================

pwd_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    return pwd_hasher.hash(password)


def verify_password(password: str, hashed_password: str | None) -> bool:
    """
    Verify a password against an Argon2id hash.

    Accounts created through single sign-on carry no password hash and
    never verify.

    Example:
        >>> hashed = hash_password("my_password")
        >>> verify_password("my_password", hashed)
        True
        >>> verify_password("my_password", None)
        False
    """
    if not hashed_password:
        return False
    try:
        pwd_hasher.verify(hashed_password, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """
    Validate password strength against security requirements.

    Requirements:
    - Minimum 8 characters
    - At least 1 letter
    - At least 1 digit

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_password_strength("short1")
        (False, "Password must be at least 8 characters long")
        >>> validate_password_strength("longenough1")
        (True, None)
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    if not re.search(r"[A-Za-z]", password):
        return False, "Password must contain at least one letter"

    if not re.search(r"\d", password):
        return False, "Password must contain at least one digit"

    return True, None


# =============================================================================
# JWT Token Management
# =============================================================================
# The access token carries the caller's roles and permissions as issued at
# login so clients can render without another round trip. Authorization never
# trusts those claims: the guard re-resolves permissions from the database.
# =============================================================================

ALGORITHM = "HS256"

TOKEN_TYPE_ACCESS = "access"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode. Must contain 'sub' (the user id as string).
        expires_delta: Optional custom lifetime. Defaults to
            settings.access_token_expire_minutes.

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token({"sub": str(user.id), "role": "ADMIN"})
    """
    to_encode = data.copy()
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode.update(
        {
            "exp": expire,
            "iat": now,
            "type": TOKEN_TYPE_ACCESS,
            "jti": str(uuid.uuid4()),
        }
    )

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Verifies signature, expiration and format.

    Raises:
        JWTError: If token is invalid, expired, or malformed
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise


def verify_token_type(token_data: dict[str, Any], expected_type: str) -> bool:
    """Verify that a token is of the expected type."""
    return token_data.get("type") == expected_type
