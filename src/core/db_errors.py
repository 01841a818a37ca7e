"""
Translation of database constraint violations into domain errors.

asyncpg reports the violated constraint by name. Services pass a mapping of
constraint name to user-facing message, so a duplicate category name and a
second default view surface as different 409 messages.
"""

import logging
import re

from sqlalchemy.exc import IntegrityError

from src.exceptions import AppException, ConflictError, InternalError, ValidationError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"

_CONSTRAINT_RE = re.compile(r'constraint "([^"]+)"')


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    cause = getattr(orig, "__cause__", None)
    for candidate in (orig, cause):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def constraint_name(exc: IntegrityError) -> str | None:
    """Name of the violated constraint, if the driver reports one."""
    orig = exc.orig
    cause = getattr(orig, "__cause__", None)
    for candidate in (cause, orig):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    match = _CONSTRAINT_RE.search(str(orig))
    return match.group(1) if match else None


def is_unique_violation(exc: IntegrityError) -> bool:
    return _sqlstate(exc) == UNIQUE_VIOLATION or "duplicate key" in str(exc.orig)


def translate_integrity_error(
    exc: IntegrityError,
    messages: dict[str, str] | None = None,
    default_conflict: str = "Resource already exists",
) -> AppException:
    """
    Map an IntegrityError to the AppException the API should answer with.

    Args:
        exc: Error raised by flush/commit
        messages: constraint name -> message for unique violations
        default_conflict: message for unique violations not in ``messages``

    Returns:
        ConflictError (409) for unique violations, ValidationError (400) for
        dangling references or missing values, InternalError otherwise

    Example:
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise translate_integrity_error(
                e, {"uq_locations_name": "Location name already exists"}
            ) from e
    """
    name = constraint_name(exc)
    code = _sqlstate(exc)

    if is_unique_violation(exc):
        message = (messages or {}).get(name or "", default_conflict)
        logger.warning(f"Unique violation on {name}: {message}")
        return ConflictError(message, details={"constraint": name} if name else None)

    if code == FOREIGN_KEY_VIOLATION:
        logger.warning(f"Foreign key violation on {name}")
        return ValidationError(
            "Referenced record does not exist",
            error_code="INVALID_REFERENCE",
            details={"constraint": name} if name else None,
        )

    if code == NOT_NULL_VIOLATION:
        return ValidationError("A required value is missing", error_code="REQUIRED_FIELD")

    logger.error(f"Unhandled integrity error: {exc.orig}")
    return InternalError("Database integrity error")
