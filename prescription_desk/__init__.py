"""
Prescription Desk - patient registration and prescription records for a hospital desk.

This package provides:

- Form validation turning raw registration input into a normalized record
- A PostgreSQL record store with store-assigned registration numbers
- Filtering, pagination, and a list session for browsing stored records
- Spreadsheet (xlsx) and PDF exports of the full filtered record set
- A typer CLI (`prescription-desk`) with rich terminal rendering
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from prescription_desk.config import Settings, get_settings
from prescription_desk.domain import FilterCriteria, Gender, NewRecord, Record, VisitType
from prescription_desk.errors import (
    EncodingError,
    FormValidationError,
    PrescriptionDeskError,
    StoreError,
)
from prescription_desk.export import ExportFormat, encode_pdf, encode_xlsx, write_export
from prescription_desk.filters import filter_records
from prescription_desk.pagination import Page, clamp_page, paginate
from prescription_desk.sequencer import NextNumber, next_number
from prescription_desk.session import RecordListSession
from prescription_desk.utils.logging import configure_logging, get_logger
from prescription_desk.validation import validate

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "FilterCriteria",
    "Gender",
    "NewRecord",
    "Record",
    "VisitType",
    # Errors
    "EncodingError",
    "FormValidationError",
    "PrescriptionDeskError",
    "StoreError",
    # Core operations
    "filter_records",
    "next_number",
    "NextNumber",
    "Page",
    "clamp_page",
    "paginate",
    "validate",
    "RecordListSession",
    # Exports
    "ExportFormat",
    "encode_pdf",
    "encode_xlsx",
    "write_export",
    # Logging
    "configure_logging",
    "get_logger",
]
