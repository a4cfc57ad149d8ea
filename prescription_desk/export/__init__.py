"""
Export encoders for the prescription desk.

Exports always receive the full filtered record set, never just the visible page.
Encoding happens entirely in memory before anything touches the sink, so a failed
export leaves no partial file behind and no caller state changed.

Files are named `<entity>_<YYYY-MM-DD>.<ext>`, the date being the local date of
generation; a second export on the same day overwrites the first.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from prescription_desk.config import get_settings
from prescription_desk.domain.models import Record
from prescription_desk.errors import EncodingError
from prescription_desk.export.columns import EXPORT_COLUMNS, HEADERS, PLACEHOLDER, tabulate
from prescription_desk.export.pdf import encode_pdf
from prescription_desk.export.xlsx import encode_xlsx
from prescription_desk.filters import local_zone
from prescription_desk.utils.logging import get_logger

log = get_logger(__name__)


class ExportFormat(str, Enum):
    XLSX = "xlsx"
    PDF = "pdf"


def export_filename(fmt: ExportFormat, generated_at: datetime, entity: Optional[str] = None) -> str:
    entity = entity or get_settings().export_entity
    return f"{entity}_{generated_at.date().isoformat()}.{ExportFormat(fmt).value}"


def encode(
    records: Sequence[Record],
    fmt: ExportFormat,
    generated_at: datetime,
    tz: Optional[tzinfo] = None,
) -> bytes:
    """Encode records in the given format, raising EncodingError on any failure."""
    fmt = ExportFormat(fmt)
    try:
        if fmt is ExportFormat.XLSX:
            return encode_xlsx(records, generated_at=generated_at, tz=tz)
        return encode_pdf(
            records, generated_at=generated_at, title=get_settings().report_title, tz=tz
        )
    except Exception as exc:  # noqa: BLE001 - every encoder failure maps to one error type
        log.exception(f"[EXPORT FAILED] {fmt.value}", extra={"format": fmt.value, "rows": len(records)})
        raise EncodingError(f"Could not encode {fmt.value.upper()} export: {exc}") from exc


def write_export(
    records: Sequence[Record],
    fmt: ExportFormat,
    out_dir: Path | str | None = None,
    generated_at: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Path:
    """
    Encode `records` and write them to `out_dir` (defaults to settings.export_dir).

    Returns
    -------
    Path
        Location of the written file.

    Raises
    ------
    EncodingError
        If encoding fails or the file cannot be written.
    """
    zone = tz or local_zone()
    generated_at = generated_at or datetime.now(zone)
    if generated_at.tzinfo is not None:
        generated_at = generated_at.astimezone(zone)
    payload = encode(records, fmt, generated_at, zone)

    directory = Path(out_dir or get_settings().export_dir)
    path = directory / export_filename(ExportFormat(fmt), generated_at)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
    except OSError as exc:
        log.error("Export write failed", extra={"path": str(path), "error": str(exc)})
        raise EncodingError(f"Could not write {path}: {exc}") from exc

    log.info(
        "Export written",
        extra={"format": ExportFormat(fmt).value, "rows": len(records), "path": str(path), "bytes": len(payload)},
    )
    return path


__all__ = [
    "EXPORT_COLUMNS",
    "HEADERS",
    "PLACEHOLDER",
    "ExportFormat",
    "encode",
    "encode_pdf",
    "encode_xlsx",
    "export_filename",
    "tabulate",
    "write_export",
]
