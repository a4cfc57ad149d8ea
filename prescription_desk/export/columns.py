"""
Export column layout shared by the spreadsheet and PDF encoders.

Column order (stable):

    Registration Number | Patient Name | Age | Gender | Room Number | Department |
    Type | Mobile Number | Address | Aadhar Number | Created Date

Registration numbers are zero-padded to 6 digits, gender is capitalised, dates are
`18 Oct 2026` in the local timezone, and missing optional values render as "N/A".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Callable, Iterable, List, Optional, Union

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from prescription_desk.domain.models import Record
from prescription_desk.filters import local_zone

PLACEHOLDER = "N/A"
DATE_FORMAT = "%d %b %Y"

Cell = Union[str, int]


@dataclass(frozen=True)
class ExportColumn:
    header: str
    width: int
    value: Callable[[Record, tzinfo], Cell]


def _optional(value: Optional[str]) -> str:
    return value if value else PLACEHOLDER


EXPORT_COLUMNS: List[ExportColumn] = [
    ExportColumn("Registration Number", 18, lambda r, tz: r.display_number),
    ExportColumn("Patient Name", 25, lambda r, tz: r.name),
    ExportColumn("Age", 8, lambda r, tz: r.age),
    ExportColumn("Gender", 10, lambda r, tz: r.gender.value.capitalize()),
    ExportColumn("Room Number", 12, lambda r, tz: _optional(r.room_number)),
    ExportColumn("Department", 20, lambda r, tz: r.department),
    ExportColumn("Type", 10, lambda r, tz: r.type.value),
    ExportColumn("Mobile Number", 15, lambda r, tz: _optional(r.mobile_number)),
    ExportColumn("Address", 35, lambda r, tz: _optional(r.address)),
    ExportColumn("Aadhar Number", 18, lambda r, tz: _optional(r.aadhar_number)),
    ExportColumn("Created Date", 15, lambda r, tz: format_date(r, tz)),
]

HEADERS: List[str] = [column.header for column in EXPORT_COLUMNS]


def format_date(record: Record, tz: tzinfo) -> str:
    created = record.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=tz)
    return created.astimezone(tz).strftime(DATE_FORMAT)


def _printable(value: Cell) -> Cell:
    """Drop control characters a worksheet cannot hold."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def tabulate(records: Iterable[Record], tz: Optional[tzinfo] = None) -> List[List[Cell]]:
    """Map records to data rows (no header) in EXPORT_COLUMNS order, keeping input order."""
    zone = tz or local_zone()
    return [
        [_printable(column.value(record, zone)) for column in EXPORT_COLUMNS]
        for record in records
    ]


__all__ = [
    "DATE_FORMAT",
    "EXPORT_COLUMNS",
    "HEADERS",
    "PLACEHOLDER",
    "ExportColumn",
    "format_date",
    "tabulate",
]
