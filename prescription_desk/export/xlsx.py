from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from io import BytesIO
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from prescription_desk.domain.models import Record
from prescription_desk.export.columns import EXPORT_COLUMNS, HEADERS, tabulate

SHEET_TITLE = "Prescriptions"
HEADER_FILL = PatternFill(start_color="2563EB", end_color="2563EB", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")


def encode_xlsx(
    records: Sequence[Record],
    generated_at: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> bytes:
    """
    Encode records as a single-sheet workbook: one header row, then one row per record.

    `generated_at` only stamps the workbook properties; cell content depends on the
    records alone.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(HEADERS)
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for row in tabulate(records, tz):
        ws.append(row)
        # text is data, never a formula
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str):
                cell.data_type = "s"

    for index, column in enumerate(EXPORT_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(index)].width = column.width
    ws.freeze_panes = "A2"

    if generated_at is not None:
        if generated_at.tzinfo is not None:
            generated_at = generated_at.astimezone(timezone.utc).replace(tzinfo=None)
        wb.properties.created = generated_at

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


__all__ = ["SHEET_TITLE", "encode_xlsx"]
