"""
Error taxonomy for the prescription desk.

Domain code raises these; the CLI catches `PrescriptionDeskError` at the command
boundary and turns it into a notification instead of a traceback.
"""

from __future__ import annotations

from typing import Dict, Mapping


class PrescriptionDeskError(Exception):
    """Base class for every recoverable error raised by this package."""


class FormValidationError(PrescriptionDeskError):
    """
    Raised by the form validator with one message per offending field.

    Never reaches the store: submission is blocked until the errors are resolved.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid form fields: {fields}")


class StoreError(PrescriptionDeskError):
    """Any failure talking to the record store (connection, constraint, timeout, bad row)."""


class EncodingError(PrescriptionDeskError):
    """Failure while encoding an export or writing it to its sink."""


__all__ = [
    "PrescriptionDeskError",
    "FormValidationError",
    "StoreError",
    "EncodingError",
]
