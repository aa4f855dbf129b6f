"""Field and form validation unit tests"""

import pytest

from policyadmin.enums import FieldType
from policyadmin.schema import REGISTRY, FieldDescriptor
from policyadmin.validation import is_blank, parse_number, validate_field, validate_form

CUSTOMERS = REGISTRY.get("customers")
PLANS = REGISTRY.get("plans")
POLICIES = REGISTRY.get("policies")

VALID_POLICY = {
    "numeroPoliza": "POL-001",
    "fechaInicio": "2025-06-01",
    "fechaFin": "2025-07-01",
    "primaMensual": "30",
    "estado": "ACTIVA",
    "clienteId": "1",
    "planSeguroId": "10",
}


class TestRequired:
    @pytest.mark.parametrize("value", ["", "   ", None, "\t\n"])
    def test_blank_required_value(self, value):
        for key in REGISTRY:
            for field in REGISTRY.get(key).fields:
                assert validate_field(field, value) == f"{field.label} is required"

    def test_blank_optional_value_passes(self):
        field = FieldDescriptor(name="nota", label="Note", minLength=5, pattern=r"^[a-z]+$")
        assert validate_field(field, "") == ""
        assert validate_field(field, None) == ""

    def test_zero_is_not_blank(self):
        field = PLANS.field("primaBase")
        assert validate_field(field, 0) == ""


class TestEmail:
    @pytest.mark.parametrize("value", ["ana@example.com", "a.b+c@mail.example.org"])
    def test_valid_email(self, value):
        assert validate_field(CUSTOMERS.field("email"), value) == ""

    @pytest.mark.parametrize("value", ["ana", "ana@example", "ana@@example.com", "an a@example.com", "@example.com", "ana@example.com\n"])
    def test_invalid_email(self, value):
        assert validate_field(CUSTOMERS.field("email"), value) == "Invalid email"


class TestPattern:
    def test_identification_scenario(self):
        field = CUSTOMERS.field("identificacion")
        assert validate_field(field, "12345") == "Must have between 10 and 13 digits"
        assert validate_field(field, "1234567890") == ""
        assert validate_field(field, "1234567890123") == ""
        assert validate_field(field, "12345678901234") == "Must have between 10 and 13 digits"

    def test_phone_pattern(self):
        field = CUSTOMERS.field("telefono")
        assert validate_field(field, "0991234567") == ""
        assert validate_field(field, "099123456a") == "Must have 10 digits"

    def test_pattern_must_match_whole_value(self):
        field = FieldDescriptor(name="code", label="Code", pattern=r"[A-Z]{3}")
        assert validate_field(field, "ABC") == ""
        assert validate_field(field, "ABCD") == "Invalid format"

    def test_generic_pattern_message(self):
        field = FieldDescriptor(name="code", label="Code", pattern=r"^[A-Z]{3}$")
        assert validate_field(field, "abc") == "Invalid format"

    def test_pattern_checked_before_min_length(self):
        field = FieldDescriptor(name="code", label="Code", pattern=r"^[0-9]+$", minLength=4)
        assert validate_field(field, "ab") == "Invalid format"
        assert validate_field(field, "12") == "Minimum 4 characters"


class TestMinLength:
    def test_min_length(self):
        field = CUSTOMERS.field("nombres")
        assert validate_field(field, "A") == "Minimum 2 characters"
        assert validate_field(field, "Al") == ""

    def test_plan_name_min_length(self):
        assert validate_field(PLANS.field("nombre"), "ab") == "Minimum 3 characters"


class TestNumber:
    @pytest.mark.parametrize(
        "minimum,valid",
        [(None, True), (0, True), (123.45, True), (123.46, False), (200, False)],
    )
    def test_decimal_against_min(self, minimum, valid):
        field = FieldDescriptor(name="monto", label="Amount", type=FieldType.NUMBER, min=minimum)
        assert (validate_field(field, "123.45") == "") is valid

    @pytest.mark.parametrize("value", ["abc", "12a", "1,5", "inf", "nan", "-Infinity"])
    def test_non_numeric_text(self, value):
        assert validate_field(PLANS.field("primaBase"), value) == "Must be a valid number"

    def test_below_min(self):
        assert validate_field(PLANS.field("coberturaMax"), "-1") == "Minimum value is 0"

    def test_fractional_min_message(self):
        field = FieldDescriptor(name="tasa", label="Rate", type=FieldType.NUMBER, min=0.5)
        assert validate_field(field, "0.1") == "Minimum value is 0.5"

    def test_numeric_value_from_backend(self):
        assert validate_field(PLANS.field("primaBase"), 25.5) == ""


class TestReference:
    @pytest.mark.parametrize("value", ["1", "10", 3, "2.0"])
    def test_whole_id(self, value):
        assert validate_field(POLICIES.field("clienteId"), value) == ""

    @pytest.mark.parametrize("value", ["abc", "2.9", 2.5, "nan"])
    def test_invalid_id(self, value):
        assert validate_field(POLICIES.field("clienteId"), value) == "Must be a valid number"


class TestValidateForm:
    def test_all_errors_reported_at_once(self):
        result = validate_form(CUSTOMERS, {"nombres": "", "identificacion": "12", "email": "x", "telefono": ""})

        assert result.valid is False
        assert result.errors == {
            "nombres": "Names is required",
            "identificacion": "Must have between 10 and 13 digits",
            "email": "Invalid email",
            "telefono": "Phone is required",
        }
        assert result.invalid_fields == ["nombres", "identificacion", "email", "telefono"]

    def test_valid_form(self):
        result = validate_form(
            CUSTOMERS,
            {"nombres": "Ana", "identificacion": "1712345678", "email": "ana@example.com", "telefono": "0991234567"},
        )
        assert result.valid is True
        assert set(result.errors) == set(CUSTOMERS.field_names)
        assert all(error == "" for error in result.errors.values())

    def test_missing_keys_are_blank(self):
        result = validate_form(PLANS, {})
        assert result.errors["nombre"] == "Name is required"
        assert result.valid is False

    def test_end_date_before_start(self):
        values = {**VALID_POLICY, "fechaInicio": "2025-06-01", "fechaFin": "2025-05-01"}
        result = validate_form(POLICIES, values)
        assert result.errors["fechaFin"] == "End date must be after start date"
        assert result.valid is False

    def test_end_date_after_start(self):
        result = validate_form(POLICIES, VALID_POLICY)
        assert result.errors["fechaFin"] == ""
        assert result.valid is True

    def test_equal_dates_rejected(self):
        values = {**VALID_POLICY, "fechaInicio": "2025-06-01", "fechaFin": "2025-06-01"}
        assert validate_form(POLICIES, values).errors["fechaFin"] == "End date must be after start date"

    def test_date_rule_skipped_when_start_missing(self):
        values = {**VALID_POLICY, "fechaInicio": ""}
        result = validate_form(POLICIES, values)
        assert result.errors["fechaInicio"] == "Start date is required"
        assert result.errors["fechaFin"] == ""

    def test_date_rule_skipped_for_unparseable_dates(self):
        values = {**VALID_POLICY, "fechaInicio": "not-a-date"}
        assert validate_form(POLICIES, values).errors["fechaFin"] == ""

    def test_date_rule_only_on_schemas_declaring_it(self):
        result = validate_form(CUSTOMERS, {"fechaInicio": "2025-06-01", "fechaFin": "2025-05-01"})
        assert "fechaFin" not in result.errors


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  ")
    assert not is_blank(0)
    assert not is_blank("x")


def test_parse_number():
    assert parse_number("12") == 12.0
    assert parse_number(" 3.5 ") == 3.5
    assert parse_number("abc") is None
    assert parse_number("inf") is None
    assert parse_number(True) is None
