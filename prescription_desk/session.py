"""
State of the record list screen.

`RecordListSession` owns the last-known-good record set, the active filter criteria,
and the requested page. Data flows store -> filter -> paginate for display, while
exports take the whole filtered set. A failed refresh raises `StoreError` but leaves
the previously loaded records untouched, so the screen keeps showing them.
"""

from __future__ import annotations

import threading
from datetime import datetime, tzinfo
from pathlib import Path
from typing import List, Optional

from prescription_desk.config import get_settings
from prescription_desk.domain.criteria import FilterCriteria
from prescription_desk.domain.models import Record
from prescription_desk.errors import StoreError
from prescription_desk.export import ExportFormat, write_export
from prescription_desk.filters import filter_records, local_zone
from prescription_desk.infrastructure.abstract import RecordStore
from prescription_desk.pagination import Page, clamp_page, paginate, total_pages
from prescription_desk.utils.logging import get_logger

log = get_logger(__name__)


class RecordListSession:
    def __init__(
        self,
        store: RecordStore,
        page_size: Optional[int] = None,
        criteria: Optional[FilterCriteria] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.store = store
        self.page_size = page_size or get_settings().page_size
        if self.page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        self.criteria = criteria or FilterCriteria()
        self.tz = tz or local_zone()
        self.page = 1
        self.records: List[Record] = []
        self.loaded_at: Optional[datetime] = None
        # refresh may run on a Ticker thread while the main thread renders
        self._lock = threading.Lock()

    def refresh(self) -> List[Record]:
        """
        Reload every record from the store (newest first).

        Raises
        ------
        StoreError
            The previous records are kept when the store call fails.
        """
        try:
            records = self.store.list(order_by="created_at", descending=True)
        except StoreError as exc:
            log.warning(
                "Refresh failed; keeping last loaded records",
                extra={"kept_rows": len(self.records), "error": str(exc)},
            )
            raise
        with self._lock:
            self.records = records
            self.loaded_at = datetime.now(self.tz)
            self.page = clamp_page(self.page, total_pages(len(self.filtered()), self.page_size))
        return records

    def apply(self, criteria: FilterCriteria) -> None:
        """Replace the filter criteria; the view returns to the first page."""
        with self._lock:
            self.criteria = criteria
            self.page = 1

    def clear_filters(self) -> None:
        self.apply(FilterCriteria())

    def filtered(self) -> List[Record]:
        return filter_records(self.records, self.criteria, self.tz)

    def go_to(self, page: int) -> int:
        """Move to `page`, clamped to the pages that exist; returns the page shown."""
        with self._lock:
            pages = total_pages(len(self.filtered()), self.page_size)
            self.page = clamp_page(page, pages)
            return self.page

    def current_page(self) -> Page[Record]:
        with self._lock:
            matching = self.filtered()
            self.page = clamp_page(self.page, total_pages(len(matching), self.page_size))
            return paginate(matching, self.page_size, self.page)

    def export(
        self,
        fmt: ExportFormat,
        out_dir: Path | str | None = None,
        generated_at: Optional[datetime] = None,
    ) -> Path:
        """Export every record matching the current criteria, regardless of the page."""
        with self._lock:
            matching = self.filtered()
        return write_export(matching, fmt, out_dir=out_dir, generated_at=generated_at, tz=self.tz)


__all__ = ["RecordListSession"]
