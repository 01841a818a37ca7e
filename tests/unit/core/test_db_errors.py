"""
Unit tests for IntegrityError translation.
"""

from sqlalchemy.exc import IntegrityError

from src.core.db_errors import constraint_name, translate_integrity_error
from src.exceptions import ConflictError, InternalError, ValidationError


class FakeDriverError(Exception):
    """Stands in for the asyncpg error carried by IntegrityError.orig."""

    def __init__(self, message: str, sqlstate: str | None, constraint: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.constraint_name = constraint


def integrity_error(message: str, sqlstate: str | None, constraint: str | None = None):
    return IntegrityError("INSERT ...", {}, FakeDriverError(message, sqlstate, constraint))


class TestConstraintName:
    def test_from_driver_attribute(self):
        exc = integrity_error("boom", "23505", "uq_locations_name")
        assert constraint_name(exc) == "uq_locations_name"

    def test_parsed_from_message(self):
        exc = integrity_error(
            'duplicate key value violates unique constraint "uq_saved_views_user_name_type"',
            "23505",
        )
        assert constraint_name(exc) == "uq_saved_views_user_name_type"


class TestTranslateIntegrityError:
    def test_unique_violation_uses_constraint_message(self):
        exc = integrity_error("dup", "23505", "uq_saved_views_default_per_type")

        error = translate_integrity_error(
            exc, {"uq_saved_views_default_per_type": "Only one default view is allowed"}
        )

        assert isinstance(error, ConflictError)
        assert error.status_code == 409
        assert error.message == "Only one default view is allowed"

    def test_unique_violation_default_message(self):
        error = translate_integrity_error(integrity_error("dup", "23505", "uq_other"))

        assert isinstance(error, ConflictError)
        assert error.message == "Resource already exists"

    def test_foreign_key_violation_is_400(self):
        error = translate_integrity_error(
            integrity_error("fk", "23503", "fk_reports_location_id_locations")
        )

        assert isinstance(error, ValidationError)
        assert error.error_code == "INVALID_REFERENCE"

    def test_not_null_violation_is_400(self):
        error = translate_integrity_error(integrity_error("null", "23502"))

        assert isinstance(error, ValidationError)
        assert error.error_code == "REQUIRED_FIELD"

    def test_other_violation_is_internal(self):
        error = translate_integrity_error(integrity_error("check", "23514"))

        assert isinstance(error, InternalError)
