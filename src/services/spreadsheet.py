"""
Excel workbook builder for list exports.

Exports are a single worksheet: a bold header row followed by one row per
item. Cell values are plain strings so the file opens the same in every
spreadsheet application.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from io import BytesIO
from typing import Any, Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MISSING = "N/A"


@dataclass(frozen=True)
class Column:
    header: str
    width: int


def cell_text(value: Any) -> str:
    """
    Render a value for a cell.

    Example:
        >>> cell_text(TicketStatus.IN_PROGRESS)
        'In Progress'
    """
    if value is None or value == "":
        return MISSING
    if isinstance(value, Enum):
        return str(value.value).replace("_", " ").title()
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    return str(value)


def display_name(user: Any) -> str | None:
    """Name of a related user, falling back to the email."""
    if user is None:
        return None
    return user.name or user.email


def build_workbook(
    sheet_title: str,
    columns: Sequence[Column],
    rows: Iterable[Sequence[Any]],
) -> bytes:
    """
    Build an xlsx file in memory.

    Args:
        sheet_title: Worksheet name
        columns: Header text and width per column
        rows: Row values in column order, rendered with ``cell_text``

    Returns:
        The workbook as bytes
    """
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title

    worksheet.append([column.header for column in columns])
    for cell in worksheet[1]:
        cell.font = Font(bold=True)
    for index, column in enumerate(columns, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = column.width
    worksheet.freeze_panes = "A2"

    for row in rows:
        worksheet.append([cell_text(value) for value in row])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
