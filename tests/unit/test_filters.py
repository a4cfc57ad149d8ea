from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from io import BytesIO

import pytest
from openpyxl import load_workbook

from prescription_desk.domain.criteria import FilterCriteria
from prescription_desk.domain.models import Gender, VisitType
from prescription_desk.export import encode_pdf, encode_xlsx
from prescription_desk.export.pdf import build_table
from prescription_desk.filters import filter_records
from prescription_desk.pagination import paginate


@pytest.fixture
def ward(make_record, ist):
    """Six visits over three days, newest first as the store returns them."""
    day = datetime(2026, 3, 10, 9, 0, tzinfo=ist)
    return [
        make_record(registration_number=106, name="Meera Nair", gender=Gender.FEMALE,
                    type=VisitType.ANC, department="Gynecology", created_at=day + timedelta(days=2, hours=14)),
        make_record(registration_number=105, name="Arjun Singh", gender=Gender.MALE,
                    type=VisitType.GENERAL, department="Cardiology", created_at=day + timedelta(days=2)),
        make_record(registration_number=104, name="Kavya Reddy", gender=Gender.FEMALE,
                    type=VisitType.JSSK, department="Pediatrics", created_at=day + timedelta(days=1)),
        make_record(registration_number=103, name="Rohan Das", gender=Gender.OTHERS,
                    type=VisitType.GENERAL, department="Cardiology", created_at=day + timedelta(hours=5)),
        make_record(registration_number=12, name="Sneha Iyer", gender=Gender.FEMALE,
                    type=VisitType.GENERAL, department="ENT", created_at=day + timedelta(hours=1)),
        make_record(registration_number=1, name="Vikram Arjunan", gender=Gender.MALE,
                    type=VisitType.ANC, department="Gynecology", created_at=day),
    ]


def _numbers(records):
    return [r.registration_number for r in records]


def test_empty_criteria_returns_everything_in_order(ward):
    assert filter_records(ward, FilterCriteria()) == ward


def test_search_matches_name_case_insensitively(ward):
    result = filter_records(ward, FilterCriteria(search_text="  ARJUN "))
    assert _numbers(result) == [105, 1]


def test_search_matches_registration_number_substring(ward):
    assert _numbers(filter_records(ward, FilterCriteria(search_text="10"))) == [106, 105, 104, 103]
    assert _numbers(filter_records(ward, FilterCriteria(search_text="12"))) == [12]


def test_gender_set_is_a_disjunction(ward):
    criteria = FilterCriteria(genders={Gender.MALE, Gender.OTHERS})
    assert _numbers(filter_records(ward, criteria)) == [105, 103, 1]


def test_type_filter(ward):
    assert _numbers(filter_records(ward, FilterCriteria(types={VisitType.ANC}))) == [106, 1]


@pytest.mark.parametrize("sentinel", ["all", "ALL", " all ", "", "   ", None])
def test_department_sentinel_disables_filter(ward, sentinel):
    assert filter_records(ward, FilterCriteria(department=sentinel)) == ward


def test_department_is_exact_match(ward):
    assert _numbers(filter_records(ward, FilterCriteria(department="Cardiology"))) == [105, 103]
    assert filter_records(ward, FilterCriteria(department="cardio")) == []


def test_date_to_includes_the_whole_day(ward, ist):
    criteria = FilterCriteria(date_from=date(2026, 3, 12), date_to=date(2026, 3, 12))
    result = filter_records(ward, criteria, tz=ist)
    # 106 was created at 23:00 local on the 12th
    assert _numbers(result) == [106, 105]


def test_date_range_uses_local_calendar_days(make_record, ist):
    # 20:00 UTC on the 10th is 01:30 on the 11th in India
    late = make_record(created_at=datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc))
    assert filter_records([late], FilterCriteria(date_to=date(2026, 3, 10)), tz=ist) == []
    assert filter_records([late], FilterCriteria(date_from=date(2026, 3, 11)), tz=ist) == [late]


def test_inverted_date_range_matches_nothing(ward):
    criteria = FilterCriteria(date_from=date(2026, 3, 12), date_to=date(2026, 3, 10))
    assert filter_records(ward, criteria) == []


def test_filters_combine_as_conjunction(ward):
    criteria = FilterCriteria(
        search_text="a",
        genders={Gender.FEMALE},
        types={VisitType.ANC, VisitType.JSSK},
        date_from=date(2026, 3, 11),
    )
    assert _numbers(filter_records(ward, criteria)) == [106, 104]


@pytest.mark.parametrize(
    "criteria",
    [
        FilterCriteria(),
        FilterCriteria(search_text="ar"),
        FilterCriteria(genders={Gender.FEMALE}, department="Gynecology"),
        FilterCriteria(types={VisitType.GENERAL}, date_to=date(2026, 3, 11)),
    ],
)
def test_filter_is_idempotent(ward, criteria):
    once = filter_records(ward, criteria)
    assert filter_records(once, criteria) == once
    assert filter_records(ward, criteria) == once


def test_adding_constraints_never_grows_the_result(ward):
    steps = [
        FilterCriteria(),
        FilterCriteria(types={VisitType.GENERAL}),
        FilterCriteria(types={VisitType.GENERAL}, genders={Gender.MALE, Gender.OTHERS}),
        FilterCriteria(types={VisitType.GENERAL}, genders={Gender.MALE, Gender.OTHERS}, department="Cardiology"),
        FilterCriteria(
            types={VisitType.GENERAL},
            genders={Gender.MALE, Gender.OTHERS},
            department="Cardiology",
            search_text="rohan",
        ),
    ]
    sizes = [len(filter_records(ward, criteria)) for criteria in steps]
    assert sizes == sorted(sizes, reverse=True)
    assert sizes[-1] == 1


def test_active_count():
    assert FilterCriteria().active_count == 0
    assert FilterCriteria(search_text="  ", department="all").active_count == 0
    criteria = FilterCriteria(search_text="x", genders={Gender.MALE}, date_from=date(2026, 1, 1))
    assert criteria.active_count == 3


def test_filter_paginate_export_scenario(make_record, ist):
    records = [
        make_record(registration_number=1, gender=Gender.MALE),
        make_record(registration_number=2, gender=Gender.FEMALE, name="Anaya Verma"),
        make_record(registration_number=3, gender=Gender.MALE),
    ]

    result = filter_records(records, FilterCriteria(search_text="", genders={Gender.FEMALE}))
    assert _numbers(result) == [2]

    page = paginate(result, 10, 1)
    assert page.items == result
    assert page.total_pages == 1

    sheet = load_workbook(BytesIO(encode_xlsx(result, tz=ist))).active
    assert sheet.max_row == 2
    assert sheet.cell(row=2, column=1).value == "000002"
    assert len(build_table(result, ist)._cellvalues) == 2
    assert encode_pdf(result, tz=ist).startswith(b"%PDF")


def test_department_value_is_trimmed(ward):
    criteria = FilterCriteria(department=" Cardiology ")
    assert criteria.department_filter == "Cardiology"
    assert _numbers(filter_records(ward, criteria)) == [105, 103]
    assert FilterCriteria(department="   ").active_count == 0
