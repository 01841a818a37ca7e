"""
Unit tests for the xlsx export builder.
"""

from datetime import UTC, datetime
from io import BytesIO
from types import SimpleNamespace

import pytest
from openpyxl import load_workbook

from src.models.enums import ReportStatus, TicketStatus
from src.services.spreadsheet import (
    MISSING,
    Column,
    build_workbook,
    cell_text,
    display_name,
)


class TestCellText:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, MISSING),
            ("", MISSING),
            (TicketStatus.IN_PROGRESS, "In Progress"),
            (ReportStatus.UNCONFIRMED, "Unconfirmed"),
            (datetime(2026, 10, 19, 7, 5, 3, tzinfo=UTC), "2026-10-19 07:05:03"),
            (42, "42"),
            ("Leaking pipe", "Leaking pipe"),
        ],
    )
    def test_rendering(self, value, expected):
        assert cell_text(value) == expected

    def test_display_name_falls_back_to_email(self):
        assert display_name(SimpleNamespace(name="Sam", email="sam@example.com")) == "Sam"
        assert display_name(SimpleNamespace(name=None, email="sam@example.com")) == "sam@example.com"
        assert display_name(None) is None


class TestBuildWorkbook:
    def test_header_row_and_values(self):
        columns = [Column("ID", 15), Column("Title", 30)]

        content = build_workbook("Tickets", columns, [["W26101900001", None]])

        sheet = load_workbook(BytesIO(content)).active
        assert sheet.title == "Tickets"
        assert sheet["A1"].value == "ID"
        assert sheet["A1"].font.bold
        assert sheet["B2"].value == MISSING
        assert sheet.column_dimensions["B"].width == 30
        assert sheet.freeze_panes == "A2"
