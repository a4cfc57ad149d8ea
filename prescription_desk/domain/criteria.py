"""
Filter criteria value object for the record list.

Categorical filters are always sets: a single-select control is just a set with zero
or one member, and an empty set means "no filter", not "match nothing".
"""
from __future__ import annotations

from datetime import date
from typing import FrozenSet, Optional

from pydantic import BaseModel, Field, field_validator

from prescription_desk.domain.models import Gender, VisitType

ALL_DEPARTMENTS = "all"


class FilterCriteria(BaseModel):
    search_text: str = Field("", description="Matches name or registration number.")
    genders: FrozenSet[Gender] = Field(default_factory=frozenset)
    types: FrozenSet[VisitType] = Field(default_factory=frozenset)
    department: Optional[str] = Field(ALL_DEPARTMENTS, description="'all' disables the filter.")
    date_from: Optional[date] = Field(None, description="Inclusive lower bound on created_at.")
    date_to: Optional[date] = Field(None, description="Inclusive upper bound (end of day).")

    model_config = {
        "frozen": True,
    }

    @field_validator("search_text", mode="before")
    @classmethod
    def none_is_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def search_term(self) -> str:
        return self.search_text.strip().lower()

    @property
    def department_filter(self) -> Optional[str]:
        """The concrete department to match, or None when the filter is inactive."""
        department = (self.department or "").strip()
        if not department or department.lower() == ALL_DEPARTMENTS:
            return None
        return department

    @property
    def active_count(self) -> int:
        """Number of constraints that actually narrow the result."""
        return sum(
            (
                bool(self.search_term),
                bool(self.genders),
                bool(self.types),
                self.department_filter is not None,
                self.date_from is not None,
                self.date_to is not None,
            )
        )


__all__ = ["ALL_DEPARTMENTS", "FilterCriteria"]
