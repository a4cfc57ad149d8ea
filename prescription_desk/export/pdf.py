from __future__ import annotations

from datetime import datetime, tzinfo
from io import BytesIO
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from prescription_desk.domain.models import Record
from prescription_desk.export.columns import EXPORT_COLUMNS, HEADERS, tabulate
from prescription_desk.filters import local_zone

PAGE_SIZE = landscape(A4)
MARGIN = 15 * mm
BRAND_BLUE = colors.HexColor("#2563EB")
ALT_ROW = colors.HexColor("#F8FAFC")

_styles = getSampleStyleSheet()
TITLE_STYLE = ParagraphStyle(
    "ReportTitle", parent=_styles["Heading1"], fontSize=18, textColor=BRAND_BLUE, spaceAfter=4
)
META_STYLE = ParagraphStyle(
    "ReportMeta", parent=_styles["Normal"], fontSize=10, textColor=colors.HexColor("#6B7280")
)
HEAD_CELL = ParagraphStyle(
    "HeadCell", parent=_styles["Normal"], fontName="Helvetica-Bold", fontSize=8,
    textColor=colors.white, alignment=1, leading=10,
)
BODY_CELL = ParagraphStyle("BodyCell", parent=_styles["Normal"], fontSize=7.5, leading=9)


def _column_widths() -> List[float]:
    available = PAGE_SIZE[0] - 2 * MARGIN
    total = sum(column.width for column in EXPORT_COLUMNS)
    return [available * column.width / total for column in EXPORT_COLUMNS]


def build_table(records: Sequence[Record], tz: Optional[tzinfo] = None) -> Table:
    """Header row plus one row per record, same cells and order as the spreadsheet."""
    data = [[Paragraph(escape(header), HEAD_CELL) for header in HEADERS]]
    for row in tabulate(records, tz):
        data.append([Paragraph(escape(str(cell)), BODY_CELL) for cell in row])

    table = Table(data, colWidths=_column_widths(), repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), BRAND_BLUE),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#CBD5E1")),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ALT_ROW]),
                ("TOPPADDING", (0, 0), (-1, -1), 2),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
            ]
        )
    )
    return table


def build_story(
    records: Sequence[Record],
    generated_at: datetime,
    title: str,
    tz: Optional[tzinfo] = None,
) -> List[Flowable]:
    zone = tz or local_zone()
    stamp = generated_at.astimezone(zone) if generated_at.tzinfo else generated_at
    return [
        Paragraph(escape(title), TITLE_STYLE),
        Paragraph(f"Generated on: {stamp.strftime('%d/%m/%Y')}", META_STYLE),
        Paragraph(f"Total Records: {len(records)}", META_STYLE),
        Spacer(1, 6 * mm),
        build_table(records, zone),
    ]


def _page_footer(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(colors.HexColor("#6B7280"))
    canvas.drawRightString(PAGE_SIZE[0] - MARGIN, MARGIN / 2, f"Page {doc.page}")
    canvas.restoreState()


def encode_pdf(
    records: Sequence[Record],
    generated_at: Optional[datetime] = None,
    title: str = "Hospital Prescriptions Report",
    tz: Optional[tzinfo] = None,
) -> bytes:
    """
    Render records as a landscape A4 report with a banner (title, generation date,
    record count) and a table that repeats its header row on every page.
    """
    zone = tz or local_zone()
    generated_at = generated_at or datetime.now(zone)
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=PAGE_SIZE,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=title,
    )
    doc.build(
        build_story(records, generated_at, title, zone),
        onFirstPage=_page_footer,
        onLaterPages=_page_footer,
    )
    return buffer.getvalue()


__all__ = ["build_story", "build_table", "encode_pdf"]
