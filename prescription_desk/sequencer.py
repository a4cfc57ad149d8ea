"""
Registration number suggestion.

Reads the current maximum registration number and suggests the next one. The value
is advisory: it is shown on the form but not reserved, so two desks asking at the same
time get the same suggestion. The persisted number comes from the store's sequence on
insert (see `ensure_schema`), which is what keeps numbers unique.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from prescription_desk.errors import StoreError
from prescription_desk.infrastructure.abstract import RecordStore
from prescription_desk.utils.logging import get_logger

log = get_logger(__name__)

FIRST_REGISTRATION_NUMBER = 1


@dataclass(frozen=True)
class NextNumber:
    """Suggested registration number plus the store error that forced a fallback, if any."""

    value: int
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None


def next_number(store: RecordStore) -> NextNumber:
    """
    Suggest `max(registration_number) + 1`, or 1 for an empty store.

    A store failure is not fatal: it is logged and reported through `NextNumber.error`
    while the suggestion falls back to 1.
    """
    try:
        current = store.max_registration_number()
    except StoreError as exc:
        log.warning("Could not read registration number", extra={"error": str(exc)})
        return NextNumber(value=FIRST_REGISTRATION_NUMBER, error=str(exc))

    value = current + 1 if current is not None else FIRST_REGISTRATION_NUMBER
    log.debug("Next registration number", extra={"registration_number": value})
    return NextNumber(value=value)


__all__ = ["FIRST_REGISTRATION_NUMBER", "NextNumber", "next_number"]
