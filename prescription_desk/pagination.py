"""
Pagination slicer for the record list.

`paginate` is a pure half-open slice plus page-count metadata. It does not clamp:
an out-of-range page yields an empty window. Keeping the requested page in range is
the caller's job (see `clamp_page` and `RecordListSession`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One window of a result set."""

    items: List[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total_items: int = 0
    total_pages: int = 0

    @property
    def first_index(self) -> int:
        """1-based position of the first item on this page, 0 when empty."""
        return (self.page - 1) * self.page_size + 1 if self.items else 0

    @property
    def last_index(self) -> int:
        return self.first_index + len(self.items) - 1 if self.items else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def total_pages(total_items: int, page_size: int) -> int:
    """ceil(total_items / page_size); zero items means zero pages."""
    if page_size <= 0:
        raise ValueError("page_size must be a positive integer")
    return math.ceil(total_items / page_size)


def paginate(records: Sequence[T], page_size: int, page: int) -> Page[T]:
    """
    Slice `records[(page-1)*page_size : page*page_size]`.

    Raises
    ------
    ValueError
        If page_size is not positive. Out-of-range pages never raise.
    """
    pages = total_pages(len(records), page_size)
    if page < 1:
        window: List[T] = []
    else:
        start = (page - 1) * page_size
        window = list(records[start : start + page_size])
    return Page(
        items=window,
        page=page,
        page_size=page_size,
        total_items=len(records),
        total_pages=pages,
    )


def clamp_page(page: int, pages: int) -> int:
    """Clamp a requested page to [1, max(pages, 1)]."""
    return max(1, min(page, max(pages, 1)))


__all__ = ["Page", "clamp_page", "paginate", "total_pages"]
