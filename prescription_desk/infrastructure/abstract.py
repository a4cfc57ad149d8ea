"""
Record store interface for the prescription desk.

The store is a black box reached through three calls. Implementations raise
`StoreError` for every failure so callers handle a single exception type.
"""

from __future__ import annotations

import abc
from typing import List, Optional, Protocol, runtime_checkable

from prescription_desk.domain.models import NewRecord, Record

ORDERABLE_COLUMNS = ("created_at", "registration_number", "name", "updated_at")


@runtime_checkable
class RecordStore(Protocol):
    """
    Common interface all record stores must implement.
    """

    def insert(self, record: NewRecord) -> Record:
        """
        Persist a validated record.

        Returns
        -------
        Record
            The stored row including store-assigned id, timestamps, and registration number.
        """
        ...

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Record]:
        """
        Return every record, ordered by `order_by` (one of ORDERABLE_COLUMNS).
        """
        ...

    def max_registration_number(self) -> Optional[int]:
        """Highest registration number in the store, or None when it is empty."""
        ...


class AbstractRecordStore(abc.ABC):
    """
    Optional ABC helper for class-based implementations.
    """

    @abc.abstractmethod
    def insert(self, record: NewRecord) -> Record:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def list(
        self, order_by: str = "created_at", descending: bool = True
    ) -> List[Record]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def max_registration_number(self) -> Optional[int]:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "ORDERABLE_COLUMNS",
    "AbstractRecordStore",
    "RecordStore",
]
