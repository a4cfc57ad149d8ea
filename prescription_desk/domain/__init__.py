"""
Domain package for the prescription desk.

Exports the record schema, its enums, and the filter criteria value object.
Keep this package focused on data definitions and validation concerns.
"""

from prescription_desk.domain.criteria import ALL_DEPARTMENTS, FilterCriteria
from prescription_desk.domain.models import (
    DEPARTMENTS,
    Gender,
    NewRecord,
    Record,
    VisitType,
)

__all__ = [
    "ALL_DEPARTMENTS",
    "DEPARTMENTS",
    "FilterCriteria",
    "Gender",
    "NewRecord",
    "Record",
    "VisitType",
]
