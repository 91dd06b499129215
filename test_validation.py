from datetime import date

import pytest

from validation import (
    RECORD_SCHEMA,
    FieldKind,
    FieldRule,
    RowValidator,
    SchemaRegistry,
)

# Same record, different column headers
LEDGER_SCHEMA = {
    "Customer": FieldRule(kind=FieldKind.TEXT, required=True, attribute="name"),
    "Total": FieldRule(kind=FieldKind.NUMBER, required=True, min=0, attribute="amount"),
    "Booked": FieldRule(kind=FieldKind.DATE, required=True, attribute="date"),
}


@pytest.fixture
def validator(reference_date):
    """
    Fixture providing a validator for the record schema.

    Returns:
        RowValidator: Validator with the fixed reference date
    """
    return RowValidator(RECORD_SCHEMA, reference_date)


@pytest.fixture
def valid_row():
    return {"Name": "Alice", "Amount": "12.50", "Date": "2024-06-01", "Verified": "Yes"}


class TestRecordSchema:
    """
    Tests for the Name/Amount/Date/Verified rules.
    """

    def test_valid_row_has_no_errors(self, validator, valid_row):
        assert validator.validate(valid_row) == []

    def test_coerced_values(self, validator, valid_row):
        """
        Test that a valid row is coerced into record attributes.
        """
        result = validator.coerce(valid_row)

        assert result.is_success()
        assert result.data == {
            "name": "Alice",
            "amount": 12.5,
            "date": date(2024, 6, 1),
            "verified": True,
        }

    @pytest.mark.parametrize(
        "name",
        [None, "", "  ", 42],
        ids=["missing", "empty", "whitespace", "number"]
    )
    def test_invalid_name(self, validator, valid_row, name):
        valid_row["Name"] = name

        assert validator.validate(valid_row) == ["Name is missing or invalid"]

    def test_name_is_trimmed(self, validator, valid_row):
        valid_row["Name"] = " Alice "

        assert validator.coerce(valid_row).data["name"] == "Alice"

    @pytest.mark.parametrize(
        "amount, message",
        [
            ("0", "Invalid amount: 0"),
            (0, "Invalid amount: 0"),
            ("-5", "Invalid amount: -5"),
            ("abc", "Invalid amount: abc"),
            (None, "Invalid amount: missing"),
            (True, "Invalid amount: True"),
            ("nan", "Invalid amount: nan"),
        ],
        ids=["zero-text", "zero", "negative", "text", "missing", "boolean", "nan-text"]
    )
    def test_invalid_amount(self, validator, valid_row, amount, message):
        valid_row["Amount"] = amount

        assert validator.validate(valid_row) == [message]

    @pytest.mark.parametrize(
        "amount, expected",
        [("12.50", 12.5), (" 7 ", 7.0), (100, 100.0), (0.01, 0.01)],
        ids=["decimal-text", "padded-text", "integer", "small"]
    )
    def test_valid_amount(self, validator, valid_row, amount, expected):
        valid_row["Amount"] = amount

        assert validator.coerce(valid_row).data["amount"] == expected

    def test_date_messages_are_passed_through(self, validator, valid_row):
        valid_row["Date"] = "2024-05-31"
        assert validator.validate(valid_row) == ["Date is not within the current month"]

        valid_row["Date"] = None
        assert validator.validate(valid_row) == ["Date is missing"]

        valid_row["Date"] = "soon"
        assert validator.validate(valid_row) == ["Invalid date format: soon"]

    @pytest.mark.parametrize(
        "verified, expected",
        [(None, None), ("", None), ("yes", True), ("No", False), (True, True), (0, False), ("TRUE", True)],
        ids=["missing", "empty", "yes", "no", "bool", "zero", "upper-true"]
    )
    def test_verified_is_optional(self, validator, valid_row, verified, expected):
        valid_row["Verified"] = verified

        assert validator.coerce(valid_row).data["verified"] is expected

    @pytest.mark.parametrize(
        "verified",
        ["maybe", "Pending", "N/A", 2],
        ids=["maybe", "pending", "not-applicable", "two"]
    )
    def test_unrecognised_verified_value_is_ignored(self, validator, valid_row, verified):
        """
        Test that a Verified value that is not a boolean never rejects the row.
        """
        valid_row["Verified"] = verified

        result = validator.coerce(valid_row)

        assert result.is_success()
        assert result.data["verified"] is None

    def test_every_field_is_checked(self, validator):
        """
        Test that errors are collected for all fields, in schema order.
        """
        errors = validator.validate({"Name": " ", "Amount": "-1", "Date": "2024-01-01"})

        assert errors == [
            "Name is missing or invalid",
            "Invalid amount: -1",
            "Date is not within the current month",
        ]

    def test_row_is_not_mutated(self, validator, valid_row):
        snapshot = dict(valid_row)
        validator.coerce(valid_row)

        assert valid_row == snapshot


class TestCustomRules:
    """
    Tests for schemas other than the record schema.
    """

    def test_attribute_and_business_rule(self, reference_date):
        schema = {
            "Total": FieldRule(
                kind=FieldKind.NUMBER,
                required=True,
                business_rule=lambda value, today: value < 1000,
                message="Total is too large",
                attribute="amount",
            )
        }
        validator = RowValidator(schema, reference_date)

        assert validator.coerce({"Total": 5}).data == {"amount": 5.0}
        assert validator.validate({"Total": 5000}) == ["Total is too large"]

    def test_optional_text_may_be_blank(self, reference_date):
        validator = RowValidator({"Note": FieldRule()}, reference_date)

        assert validator.coerce({}).data == {"note": None}

    def test_business_rule_receives_reference_date(self):
        seen = []
        schema = {
            "When": FieldRule(
                kind=FieldKind.DATE,
                business_rule=lambda value, today: seen.append(today) or True,
            )
        }
        RowValidator(schema, date(2030, 1, 1)).validate({"When": "2030-01-05"})

        assert seen == [date(2030, 1, 1)]

    def test_required_boolean_reports_blank(self, reference_date):
        schema = {**RECORD_SCHEMA, "Verified": FieldRule(kind=FieldKind.BOOLEAN, required=True)}
        validator = RowValidator(schema, reference_date)

        errors = validator.validate({"Name": "A", "Amount": 1, "Date": "2024-06-01"})

        assert errors == ["Verified is missing"]


class TestSchemaRegistry:
    """
    Tests for sheet name to schema resolution.
    """

    def test_default_registry_validates_unknown_sheets(self):
        registry = SchemaRegistry.default()

        assert registry.schema_for("Sheet1") is RECORD_SCHEMA
        assert registry.schema_for("Expenses") is RECORD_SCHEMA

    def test_skip_mode_has_no_fallback(self):
        registry = SchemaRegistry.default("skip")

        assert registry.schema_for("Sheet1") is RECORD_SCHEMA
        assert registry.schema_for("Expenses") is None

    def test_explicit_mapping(self):
        registry = SchemaRegistry({"Ledger": LEDGER_SCHEMA})

        assert registry.schema_for("Ledger") is LEDGER_SCHEMA
        assert registry.schema_for("Sheet1") is None

    @pytest.mark.parametrize(
        "schemas, fallback",
        [
            ({"Codes": {"Code": FieldRule(required=True)}}, None),
            ({"Sheet1": RECORD_SCHEMA}, {"Name": FieldRule(required=True)}),
        ],
        ids=["mapped-schema", "fallback-schema"]
    )
    def test_schema_must_produce_record_attributes(self, schemas, fallback):
        """
        Test that a schema whose rows could never become Records is refused.
        """
        with pytest.raises(ValueError, match="does not produce"):
            SchemaRegistry(schemas, fallback=fallback)
