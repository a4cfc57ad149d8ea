"""
Registration form validation.

Turns a raw field bag (strings as typed by the user, or already-typed values) into a
`NewRecord`, or raises `FormValidationError` with one message per failing field.

Validation is eager: every field is checked in a single pass, so the user sees all
problems at once. Text is trimmed; blank optional fields become None (never ""), so
"not provided" and "provided empty" cannot be confused in the store.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Type

from pydantic import ValidationError

from prescription_desk.domain.models import (
    DEPARTMENTS,
    MAX_AGE,
    MIN_AGE,
    Gender,
    NewRecord,
    VisitType,
)
from prescription_desk.errors import FormValidationError
from prescription_desk.utils.logging import get_logger

log = get_logger(__name__)

REQUIRED_FIELDS = ("name", "age", "gender", "department", "type")
OPTIONAL_FIELDS = ("room_number", "address", "aadhar_number", "mobile_number")
FORM_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS

FIELD_LABELS: Dict[str, str] = {
    "name": "Name",
    "age": "Age",
    "gender": "Gender",
    "department": "Department",
    "type": "Type",
    "room_number": "Room number",
    "address": "Address",
    "aadhar_number": "Aadhar number",
    "mobile_number": "Mobile number",
}

_CHOICES: Dict[str, Type[Enum]] = {"gender": Gender, "type": VisitType}
# C0 controls other than tab, newline and carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _match_choice(value: Any, choices: Sequence[str]) -> Any:
    """Return the canonical spelling of `value` from `choices`, or `value` unchanged."""
    if not isinstance(value, str):
        return value
    folded = value.casefold()
    for choice in choices:
        if choice.casefold() == folded:
            return choice
    return value


def _message(field: str, error: Mapping[str, Any]) -> str:
    label = FIELD_LABELS.get(field, field)
    kind = error["type"]
    if kind == "missing":
        return f"{label} is required"
    if kind.startswith("int_"):
        return f"{label} must be a whole number"
    if kind in ("greater_than_equal", "less_than_equal", "greater_than", "less_than"):
        return f"{label} must be between {MIN_AGE} and {MAX_AGE}"
    if kind == "enum":
        expected = ", ".join(member.value for member in _CHOICES[field])
        return f"{label} must be one of: {expected}"
    return f"{label}: {error['msg']}"


def validate(raw: Mapping[str, Any], departments: Optional[Sequence[str]] = None) -> NewRecord:
    """
    Validate a raw form submission.

    Parameters
    ----------
    raw : Mapping[str, Any]
        Field bag keyed by form field name; unknown keys are ignored.
    departments : Sequence[str] | None
        Allowed departments. Defaults to the built-in department list.

    Returns
    -------
    NewRecord
        The normalized record input, ready for `RecordStore.insert`.

    Raises
    ------
    FormValidationError
        With `errors` mapping each failing field to a user-facing message.
    """
    allowed = tuple(departments) if departments is not None else DEPARTMENTS
    bag = {field: _clean(raw.get(field)) for field in FORM_FIELDS}
    errors: Dict[str, str] = {}

    for field in REQUIRED_FIELDS:
        if bag[field] is None:
            errors[field] = f"{FIELD_LABELS[field]} is required"

    for field, value in bag.items():
        if field not in errors and isinstance(value, str) and _CONTROL_CHARS.search(value):
            errors[field] = f"{FIELD_LABELS[field]} contains invalid characters"

    for field, enum in _CHOICES.items():
        bag[field] = _match_choice(bag[field], [member.value for member in enum])

    if "department" not in errors:
        department = _match_choice(bag["department"], allowed)
        if department not in allowed:
            errors["department"] = "Department must be one of the listed departments"
        bag["department"] = department

    try:
        record = NewRecord.model_validate({k: v for k, v in bag.items() if v is not None})
    except ValidationError as exc:
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "__all__"
            errors.setdefault(field, _message(field, error))
        record = None

    if errors:
        log.info("Form rejected", extra={"invalid_fields": sorted(errors)})
        raise FormValidationError(errors)
    return record


__all__ = [
    "FIELD_LABELS",
    "FORM_FIELDS",
    "OPTIONAL_FIELDS",
    "REQUIRED_FIELDS",
    "validate",
]
