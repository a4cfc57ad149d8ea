"""
Domain models for the prescription desk.

Defines the record schema aligned with `ensure_schema()` in the record store. A single
schema carries every revision of the registration form: fields that were added over
time (room number, identifiers) are nullable extensions rather than parallel types.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

DEPARTMENTS = (
    "Cardiology",
    "Dermatology",
    "Emergency",
    "ENT",
    "Gastroenterology",
    "General Medicine",
    "Gynecology",
    "Neurology",
    "Oncology",
    "Orthopedics",
    "Pediatrics",
    "Psychiatry",
    "Radiology",
    "Surgery",
    "Urology",
)

MIN_AGE = 1
MAX_AGE = 150


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHERS = "others"


class VisitType(str, Enum):
    ANC = "ANC"
    GENERAL = "General"
    JSSK = "JSSK"


class NewRecord(BaseModel):
    """
    Normalized form input, ready to be inserted.

    `registration_number` is left as None so the store assigns it from its sequence;
    callers may still pass an explicit value (e.g. when importing legacy data).
    """

    name: str = Field(..., min_length=1, description="Patient name.")
    age: int = Field(..., ge=MIN_AGE, le=MAX_AGE, description="Age in years.")
    gender: Gender = Field(..., description="Patient gender.")
    department: str = Field(..., min_length=1, description="Visited department.")
    type: VisitType = Field(..., description="Visit scheme (ANC, General, JSSK).")
    room_number: Optional[str] = Field(None, description="Room number, if assigned.")
    address: Optional[str] = Field(None, description="Postal address.")
    aadhar_number: Optional[str] = Field(None, description="Aadhaar identifier, free-form.")
    mobile_number: Optional[str] = Field(None, description="Mobile phone number.")
    registration_number: Optional[int] = Field(None, ge=1, description="Explicit sequence value.")

    model_config = {
        "frozen": True,
    }

    def to_row(self) -> Dict[str, Any]:
        """Column/value mapping for an INSERT; omits the registration number when unset."""
        row = self.model_dump(mode="json")
        if row["registration_number"] is None:
            del row["registration_number"]
        return row


class Record(BaseModel):
    """
    Representation of a single row in the prescriptions table.
    """

    id: UUID = Field(..., description="Primary key assigned by the store.")
    registration_number: int = Field(..., description="Human-facing sequence number.")
    created_at: datetime = Field(..., description="Row creation timestamp.")
    updated_at: datetime = Field(..., description="Row update timestamp.")
    name: str = Field(..., description="Patient name.")
    age: int = Field(..., description="Age in years.")
    gender: Gender = Field(..., description="Patient gender.")
    department: str = Field(..., description="Visited department.")
    type: VisitType = Field(..., description="Visit scheme.")
    room_number: Optional[str] = Field(None, description="Room number, if assigned.")
    address: Optional[str] = Field(None, description="Postal address.")
    aadhar_number: Optional[str] = Field(None, description="Aadhaar identifier.")
    mobile_number: Optional[str] = Field(None, description="Mobile phone number.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @property
    def display_number(self) -> str:
        """Registration number as printed on slips and reports (zero-padded to 6)."""
        return f"{self.registration_number:06d}"


__all__ = [
    "DEPARTMENTS",
    "MAX_AGE",
    "MIN_AGE",
    "Gender",
    "NewRecord",
    "Record",
    "VisitType",
]
