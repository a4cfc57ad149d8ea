"""
Filter engine for the record list.

`filter_records` reduces a record set to the records matching every active predicate
of a `FilterCriteria`. It never sorts: the store's ordering (newest first) is kept, and
identical inputs always give an identical ordered output.
"""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Callable, Iterable, List, Optional
from zoneinfo import ZoneInfo

from prescription_desk.config import get_settings
from prescription_desk.domain.criteria import FilterCriteria
from prescription_desk.domain.models import Record

Predicate = Callable[[Record], bool]


def local_zone(name: Optional[str] = None) -> tzinfo:
    """Timezone used to interpret calendar-date filters and render dates."""
    return ZoneInfo(name or get_settings().local_timezone)


def _to_local(moment: datetime, tz: tzinfo) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _search_predicate(term: str) -> Predicate:
    def matches(record: Record) -> bool:
        return term in record.name.lower() or term in str(record.registration_number)

    return matches


def _date_predicate(date_from: Optional[date], date_to: Optional[date], tz: tzinfo) -> Predicate:
    start = datetime.combine(date_from, time.min, tzinfo=tz) if date_from else None
    # end of the local day, so records created any time on date_to are included
    end = datetime.combine(date_to, time.max, tzinfo=tz) if date_to else None

    def matches(record: Record) -> bool:
        created = _to_local(record.created_at, tz)
        if start is not None and created < start:
            return False
        if end is not None and created > end:
            return False
        return True

    return matches


def build_predicates(criteria: FilterCriteria, tz: Optional[tzinfo] = None) -> List[Predicate]:
    """Predicates for the active constraints only; an inactive criterion adds nothing."""
    predicates: List[Predicate] = []
    if criteria.search_term:
        predicates.append(_search_predicate(criteria.search_term))
    if criteria.genders:
        genders = criteria.genders
        predicates.append(lambda record: record.gender in genders)
    if criteria.types:
        types = criteria.types
        predicates.append(lambda record: record.type in types)
    department = criteria.department_filter
    if department is not None:
        predicates.append(lambda record: record.department == department)
    if criteria.date_from is not None or criteria.date_to is not None:
        predicates.append(_date_predicate(criteria.date_from, criteria.date_to, tz or local_zone()))
    return predicates


def filter_records(
    records: Iterable[Record],
    criteria: FilterCriteria,
    tz: Optional[tzinfo] = None,
) -> List[Record]:
    """
    Return the records satisfying the conjunction of all active criteria.

    Parameters
    ----------
    records : Iterable[Record]
        Full record set, in store order.
    criteria : FilterCriteria
        Search text, categorical sets, department, and inclusive date range.
    tz : tzinfo | None
        Zone for calendar-date comparison. Defaults to settings.local_timezone.
    """
    predicates = build_predicates(criteria, tz)
    if not predicates:
        return list(records)
    return [record for record in records if all(p(record) for p in predicates)]


__all__ = ["build_predicates", "filter_records", "local_zone"]
