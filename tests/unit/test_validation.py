from __future__ import annotations

import pytest

from prescription_desk.domain.models import Gender, VisitType
from prescription_desk.errors import FormValidationError
from prescription_desk.validation import REQUIRED_FIELDS, validate


def _form(**overrides):
    form = {
        "name": "Priya Sharma",
        "age": "28",
        "gender": "female",
        "department": "Gynecology",
        "type": "ANC",
    }
    form.update(overrides)
    return form


def test_valid_form_produces_normalized_record():
    record = validate(_form(name="  Priya Sharma  ", room_number="  ", address=" 12 MG Road "))

    assert record.name == "Priya Sharma"
    assert record.age == 28
    assert record.gender is Gender.FEMALE
    assert record.type is VisitType.ANC
    assert record.address == "12 MG Road"
    # blank optional fields are stored as absent, never as ""
    assert record.room_number is None
    assert record.aadhar_number is None
    assert record.registration_number is None


def test_choices_are_matched_case_insensitively():
    record = validate(_form(gender="FEMALE", type="jssk", department="gynecology"))

    assert record.gender is Gender.FEMALE
    assert record.type is VisitType.JSSK
    assert record.department == "Gynecology"


def test_blank_name_is_required():
    with pytest.raises(FormValidationError) as excinfo:
        validate(_form(name="   "))
    assert excinfo.value.errors == {"name": "Name is required"}


@pytest.mark.parametrize("age", ["0", "151", "-4"])
def test_age_outside_range_is_rejected(age):
    with pytest.raises(FormValidationError) as excinfo:
        validate(_form(age=age))
    assert excinfo.value.errors["age"] == "Age must be between 1 and 150"


@pytest.mark.parametrize("age", ["1", "150"])
def test_age_bounds_are_inclusive(age):
    assert validate(_form(age=age)).age == int(age)


def test_non_numeric_age_is_rejected():
    with pytest.raises(FormValidationError) as excinfo:
        validate(_form(age="twenty"))
    assert excinfo.value.errors["age"] == "Age must be a whole number"


def test_all_errors_are_reported_at_once():
    with pytest.raises(FormValidationError) as excinfo:
        validate({"name": "", "age": "200", "gender": "unknown", "type": None})

    errors = excinfo.value.errors
    assert set(errors) == {"name", "age", "gender", "department", "type"}
    assert errors["department"] == "Department is required"
    assert errors["type"] == "Type is required"
    assert errors["gender"].startswith("Gender must be one of:")


def test_department_outside_the_list_is_rejected():
    with pytest.raises(FormValidationError) as excinfo:
        validate(_form(department="Astrology"))
    assert excinfo.value.errors == {"department": "Department must be one of the listed departments"}


def test_custom_department_list_is_honoured():
    record = validate(_form(department="Dental"), departments=["Dental"])
    assert record.department == "Dental"


def test_unknown_keys_are_ignored():
    record = validate(_form(notes="follow up in 2 weeks"))
    assert not hasattr(record, "notes")


def test_error_message_lists_fields():
    with pytest.raises(FormValidationError, match="Invalid form fields: age, name"):
        validate(_form(name="", age="0"))


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
@pytest.mark.parametrize("missing", ["absent", None, "   "])
def test_each_missing_required_field_is_reported_alone(field, missing):
    form = _form()
    if missing == "absent":
        del form[field]
    else:
        form[field] = missing

    with pytest.raises(FormValidationError) as excinfo:
        validate(form)

    assert set(excinfo.value.errors) == {field}
    assert excinfo.value.errors[field].endswith("is required")


@pytest.mark.parametrize("field", ["name", "address", "mobile_number"])
def test_control_characters_are_rejected(field):
    with pytest.raises(FormValidationError) as excinfo:
        validate(_form(**{field: "Ravi\x0bKumar"}))
    assert set(excinfo.value.errors) == {field}
    assert excinfo.value.errors[field].endswith("contains invalid characters")


def test_tabs_inside_text_are_kept():
    assert validate(_form(address="12\tMG Road")).address == "12\tMG Road"
