"""
Unit tests for saved-view filter reconciliation.
"""

import pytest

from src.exceptions import ValidationError
from src.models.enums import SavedViewType
from src.services.view_filters import CANONICAL_KEYS, reconcile_filters


class TestReportFilters:
    def test_legacy_keys_are_renamed(self):
        result = reconcile_filters(
            {
                "searchTerm": "leak",
                "statusFilter": ["UNCONFIRMED"],
                "priorityFilter": ["HIGH"],
                "creatorFilter": ["u1"],
                "locationFilter": ["l1"],
                "categoryFilter": ["c1"],
            },
            SavedViewType.REPORT,
        )

        assert result.migrated is True
        assert result.filters == {
            "search": "leak",
            "status": ["UNCONFIRMED"],
            "priority": ["HIGH"],
            "creatorIds": ["u1"],
            "locationIds": ["l1"],
            "categoryIds": ["c1"],
        }

    def test_canonical_value_wins_over_legacy_twin(self):
        result = reconcile_filters(
            {"searchTerm": "old", "search": "new"}, SavedViewType.REPORT
        )

        assert result.filters == {"search": "new"}
        assert result.migrated is True

    def test_sort_and_date_range_pass_through(self):
        filters = {
            "sortField": "createdAt",
            "sortOrder": "asc",
            "dateRange": {"from": "2026-01-01"},
        }

        result = reconcile_filters(filters, SavedViewType.REPORT)

        assert result.filters == filters
        assert result.migrated is False


class TestTicketFilters:
    def test_canonical_filters_unchanged(self):
        filters = {"status": ["PENDING"], "assigneeIds": ["UNASSIGNED"], "roleIds": ["r1"]}

        result = reconcile_filters(filters, SavedViewType.TICKET)

        assert result.filters == filters
        assert result.migrated is False

    def test_accepts_plain_string_view_type(self):
        result = reconcile_filters({"search": "pump"}, "TICKET")

        assert result.filters == {"search": "pump"}


class TestUnknownKeys:
    def test_dropped_by_default(self):
        result = reconcile_filters({"search": "x", "colour": "red"}, SavedViewType.TICKET)

        assert result.filters == {"search": "x"}

    def test_kept_when_preserving(self):
        result = reconcile_filters(
            {"search": "x", "colour": "red"}, SavedViewType.TICKET, preserve_unknown=True
        )

        assert result.filters == {"search": "x", "colour": "red"}

    def test_canonical_key_foreign_to_screen_is_kept(self):
        """``categoryIds`` has no ticket mapping but is still canonical."""
        result = reconcile_filters({"categoryIds": ["c1"]}, SavedViewType.TICKET)

        assert result.filters == {"categoryIds": ["c1"]}


class TestIdempotence:
    @pytest.mark.parametrize("view_type", list(SavedViewType))
    def test_second_pass_is_a_no_op(self, view_type):
        first = reconcile_filters(
            {"searchTerm": "a", "statusFilter": ["X"], "status": ["Y"], "junk": 1}, view_type
        )
        second = reconcile_filters(first.filters, view_type)

        assert second.filters == first.filters
        assert second.migrated is False
        assert set(second.filters) <= set(CANONICAL_KEYS)

    def test_none_is_empty(self):
        result = reconcile_filters(None, SavedViewType.REPORT)

        assert result.filters == {}
        assert result.migrated is False


class TestMalformedFilters:
    @pytest.mark.parametrize("filters", ["legacy-string", ["searchTerm"], 42])
    def test_non_object_is_rejected(self, filters):
        with pytest.raises(ValidationError) as exc_info:
            reconcile_filters(filters, SavedViewType.REPORT)

        assert exc_info.value.error_code == "INVALID_FILTERS"
