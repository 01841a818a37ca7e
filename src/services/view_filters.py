"""
Saved-view filter reconciliation.

Saved views persist the filter object of a list screen. Older clients wrote
report filters under legacy keys (``searchTerm``, ``statusFilter``, ...);
the reconciler rewrites any stored or incoming filter object into the
canonical key set so that list queries only ever see one vocabulary.

Example:
    >>> reconcile_filters({"searchTerm": "leak", "statusFilter": ["PENDING"]},
    ...                   SavedViewType.REPORT)
    ReconcileResult(filters={'search': 'leak', 'status': ['PENDING']}, migrated=True)
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from src.exceptions import ValidationError
from src.models.enums import SavedViewType

CANONICAL_KEYS: tuple[str, ...] = (
    "search",
    "status",
    "priority",
    "creatorIds",
    "assigneeIds",
    "locationIds",
    "categoryIds",
    "roleIds",
    "dateRange",
    "sortField",
    "sortOrder",
)

# Source key -> canonical key, per list screen
LEGACY_KEY_MAP: dict[SavedViewType, dict[str, str]] = {
    SavedViewType.REPORT: {
        "searchTerm": "search",
        "statusFilter": "status",
        "priorityFilter": "priority",
        "creatorFilter": "creatorIds",
        "locationFilter": "locationIds",
        "categoryFilter": "categoryIds",
        "dateRange": "dateRange",
        "sortField": "sortField",
        "sortOrder": "sortOrder",
    },
    SavedViewType.TICKET: {
        key: key
        for key in (
            "search",
            "status",
            "priority",
            "creatorIds",
            "assigneeIds",
            "locationIds",
            "roleIds",
            "dateRange",
            "sortField",
            "sortOrder",
        )
    },
}


@dataclass(frozen=True)
class ReconcileResult:
    """Canonical filters plus whether any key had to be renamed."""

    filters: dict[str, Any] = field(default_factory=dict)
    migrated: bool = False


def reconcile_filters(
    filters: Mapping[str, Any] | None,
    view_type: SavedViewType,
    preserve_unknown: bool = False,
) -> ReconcileResult:
    """
    Rewrite a filter object into canonical keys.

    Mapped keys move to their canonical name. Unmapped keys survive only
    when they already are canonical, or when ``preserve_unknown`` is set.
    Reconciling an already reconciled object returns it unchanged with
    ``migrated=False``.

    When a legacy key and its canonical twin are both present, the canonical
    value wins.

    Raises:
        ValidationError: If filters is not a JSON object
    """
    if filters is None:
        filters = {}
    if not isinstance(filters, Mapping):
        raise ValidationError(
            message="Filters must be an object",
            error_code="INVALID_FILTERS",
            details={"type": type(filters).__name__},
        )

    mapping = LEGACY_KEY_MAP[SavedViewType(view_type)]
    result: dict[str, Any] = {}
    migrated = False

    for key, value in filters.items():
        target = mapping.get(key)
        if target is None:
            if key in CANONICAL_KEYS or preserve_unknown:
                result[key] = value
            continue

        if target != key:
            migrated = True
            if target in filters:
                continue
        result[target] = value

    return ReconcileResult(filters=result, migrated=migrated)
