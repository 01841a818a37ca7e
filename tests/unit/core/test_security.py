"""
Unit tests for security utilities (password hashing, JWT access tokens).

All tests are fully mocked - no database or external dependencies.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from jose import JWTError, jwt

from src.core import security
from src.core.config import settings


class TestPasswordHashing:
    """Test password hashing with Argon2id."""

    def test_hash_password_returns_argon2id(self):
        hashed = security.hash_password("TestPassword123")

        assert isinstance(hashed, str)
        assert hashed.startswith("$argon2id$")

    def test_hash_password_different_for_same_password(self):
        """Hashing the same password twice produces different hashes (salt)."""
        assert security.hash_password("TestPassword123") != security.hash_password(
            "TestPassword123"
        )

    def test_verify_password_correct_password(self):
        hashed = security.hash_password("TestPassword123")

        assert security.verify_password("TestPassword123", hashed) is True

    def test_verify_password_incorrect_password(self):
        hashed = security.hash_password("TestPassword123")

        assert security.verify_password("WrongPassword123", hashed) is False

    def test_verify_password_invalid_hash(self):
        assert security.verify_password("password", "invalid_hash") is False

    def test_verify_password_without_hash(self):
        """Single sign-on accounts have no hash and never verify."""
        assert security.verify_password("TestPassword123", None) is False
        assert security.verify_password("TestPassword123", "") is False


class TestPasswordStrengthValidation:
    """Test the password policy."""

    def test_validate_strong_password(self):
        assert security.validate_password_strength("longenough1") == (True, None)

    def test_validate_too_short_password(self):
        is_valid, error = security.validate_password_strength("short1")

        assert is_valid is False
        assert "8 characters" in error

    def test_validate_no_letter(self):
        is_valid, error = security.validate_password_strength("12345678")

        assert is_valid is False
        assert "letter" in error

    def test_validate_no_digit(self):
        is_valid, error = security.validate_password_strength("abcdefgh")

        assert is_valid is False
        assert "digit" in error


class TestJWTAccessToken:
    """Test JWT access token creation."""

    def test_create_access_token_structure(self):
        token = security.create_access_token({"sub": "user_123"})

        payload = security.decode_token(token)

        assert payload["sub"] == "user_123"
        assert payload["type"] == security.TOKEN_TYPE_ACCESS
        assert "jti" in payload
        assert "exp" in payload
        assert "iat" in payload

    def test_create_access_token_default_expiration(self):
        """Default lifetime comes from settings.access_token_expire_minutes."""
        lifetime = timedelta(minutes=settings.access_token_expire_minutes)
        before_creation = datetime.now(UTC)
        token = security.create_access_token({"sub": "user_123"})
        after_creation = datetime.now(UTC)

        payload = security.decode_token(token)

        # JWT timestamps are in seconds
        exp_time = datetime.fromtimestamp(payload["exp"], tz=UTC)
        assert (
            before_creation + lifetime - timedelta(seconds=1)
            <= exp_time
            <= after_creation + lifetime + timedelta(seconds=1)
        )

    def test_create_access_token_custom_expiration(self):
        custom_delta = timedelta(hours=2)
        before_creation = datetime.now(UTC)
        token = security.create_access_token({"sub": "user_123"}, expires_delta=custom_delta)
        after_creation = datetime.now(UTC)

        payload = security.decode_token(token)

        exp_time = datetime.fromtimestamp(payload["exp"], tz=UTC)
        assert (
            before_creation + custom_delta - timedelta(seconds=1)
            <= exp_time
            <= after_creation + custom_delta + timedelta(seconds=1)
        )

    def test_create_access_token_includes_unique_jti(self):
        payload1 = security.decode_token(security.create_access_token({"sub": "user_123"}))
        payload2 = security.decode_token(security.create_access_token({"sub": "user_123"}))

        assert payload1["jti"] != payload2["jti"]

    def test_create_access_token_preserves_identity_claims(self):
        token = security.create_access_token(
            {
                "sub": "user_123",
                "role": "STAFF",
                "additionalRoles": ["MAINTENANCE_WORKER"],
                "permissions": ["view_tickets", "claim_tickets"],
            }
        )

        payload = security.decode_token(token)

        assert payload["role"] == "STAFF"
        assert payload["additionalRoles"] == ["MAINTENANCE_WORKER"]
        assert payload["permissions"] == ["view_tickets", "claim_tickets"]


class TestDecodeToken:
    """Test JWT token decoding and validation."""

    def test_decode_expired_token_raises_error(self):
        token = security.create_access_token({"sub": "user_123"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            security.decode_token(token)

    def test_decode_token_signed_with_other_key_raises_error(self):
        token = jwt.encode(
            {"sub": "user_123", "type": "access"},
            "another-secret-key-that-is-long-enough!",
            algorithm=security.ALGORITHM,
        )

        with pytest.raises(JWTError):
            security.decode_token(token)

    @patch("src.core.security.jwt.decode")
    @patch("src.core.security.logger")
    def test_decode_logs_jwt_errors(self, mock_logger, mock_decode):
        mock_decode.side_effect = JWTError("Token expired")

        with pytest.raises(JWTError):
            security.decode_token("expired_token")

        mock_logger.warning.assert_called_once()
        assert "JWT decode error" in str(mock_logger.warning.call_args)


class TestVerifyTokenType:
    """Test token type verification."""

    def test_verify_access_token_type(self):
        assert security.verify_token_type({"type": "access"}, "access") is True
        assert security.verify_token_type({"type": "refresh"}, "access") is False

    def test_verify_missing_type_returns_false(self):
        assert security.verify_token_type({}, "access") is False
