"""
Declarative row validation.

A FieldSchema maps column headers to FieldRule objects. RowValidator applies
a schema to one decoded row, checking every field independently and
collecting every message, together with the coerced values that a Record is
built from.
"""
import logging
import math
import numbers
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict

from date_normalizer import OUTSIDE_MONTH_MESSAGE, is_blank, parse_date, within_month
from models import Record
from utils.result import Result

logger = logging.getLogger(__name__)

TRUE_VALUES = {"yes", "y", "true", "1"}
FALSE_VALUES = {"no", "n", "false", "0"}


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class FieldRule(BaseModel):
    """
    Validation rule for one column.

    Attributes:
        kind: Type the cell is coerced to
        required: Whether a blank cell is an error
        min: Exclusive lower bound for numbers (value must be greater)
        business_rule: Extra predicate ``(value, reference_date) -> bool``
            applied to successfully coerced values
        message: Message reported when business_rule returns False
        attribute: Record attribute the coerced value is stored under
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    min: Optional[float] = None
    business_rule: Optional[Callable[[Any, date], bool]] = None
    message: Optional[str] = None
    attribute: Optional[str] = None


FieldSchema = Dict[str, FieldRule]

# Record attributes every schema has to fill; id is assigned by the sheet processor
RECORD_ATTRIBUTES = frozenset(
    name for name, info in Record.model_fields.items() if info.is_required() and name != "id"
)


def produced_attributes(schema: FieldSchema) -> Set[str]:
    return {rule.attribute or field.lower() for field, rule in schema.items()}


RECORD_SCHEMA: FieldSchema = {
    "Name": FieldRule(kind=FieldKind.TEXT, required=True),
    "Amount": FieldRule(kind=FieldKind.NUMBER, required=True, min=0),
    "Date": FieldRule(
        kind=FieldKind.DATE,
        required=True,
        business_rule=within_month,
        message=OUTSIDE_MONTH_MESSAGE,
    ),
    "Verified": FieldRule(kind=FieldKind.BOOLEAN),
}


class SchemaRegistry:
    """
    Explicit sheet name to schema mapping.

    Sheets without an entry use the fallback schema; with no fallback they
    are not processed at all. Accepted rows become Records, so every schema
    must produce the name, amount and date attributes.

    Raises:
        ValueError: If a schema does not produce every Record attribute
    """

    def __init__(self, schemas: Mapping[str, FieldSchema], fallback: Optional[FieldSchema] = None):
        self.schemas = dict(schemas)
        self.fallback = fallback

        named = list(self.schemas.items()) + ([("fallback", fallback)] if fallback is not None else [])
        for sheet_name, schema in named:
            missing = RECORD_ATTRIBUTES - produced_attributes(schema)
            if missing:
                raise ValueError(f"Schema for {sheet_name!r} does not produce {sorted(missing)}")

    def schema_for(self, sheet_name: str) -> Optional[FieldSchema]:
        return self.schemas.get(sheet_name, self.fallback)

    @classmethod
    def default(cls, unknown_sheets: str = "validate") -> "SchemaRegistry":
        """Registry with Sheet1 bound to the record schema."""
        fallback = RECORD_SCHEMA if unknown_sheets == "validate" else None
        return cls({"Sheet1": RECORD_SCHEMA}, fallback=fallback)


def _coerce_text(field: str, value: Any, rule: FieldRule) -> Result[Optional[str]]:
    if isinstance(value, str) and value.strip():
        return Result.ok(value.strip())
    return Result.fail(f"{field} is missing or invalid")


def _coerce_number(field: str, value: Any, rule: FieldRule) -> Result[Optional[float]]:
    shown = "missing" if value is None else value
    invalid = Result.fail(f"Invalid {field.lower()}: {shown}")

    if isinstance(value, bool):
        return invalid
    try:
        if isinstance(value, str):
            number = float(value.strip())
        elif isinstance(value, numbers.Real):
            number = float(value)
        else:
            return invalid
    except ValueError:
        return invalid

    if not math.isfinite(number):
        return invalid
    if rule.min is not None and number <= rule.min:
        return invalid
    return Result.ok(number)


def _coerce_date(field: str, value: Any, rule: FieldRule) -> Result[Optional[date]]:
    return parse_date(value, field=field)


def _coerce_boolean(field: str, value: Any, rule: FieldRule) -> Result[Optional[bool]]:
    if value is None:
        return Result.fail(f"{field} is missing")
    if isinstance(value, bool):
        return Result.ok(value)
    if isinstance(value, numbers.Real) and value in (0, 1):
        return Result.ok(bool(value))
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return Result.ok(True)
        if lowered in FALSE_VALUES:
            return Result.ok(False)
    # Flags never decide acceptance; unreadable values are dropped
    logger.debug(f"Ignoring unrecognised {field} value {value!r}")
    return Result.ok(None)


COERCERS = {
    FieldKind.TEXT: _coerce_text,
    FieldKind.NUMBER: _coerce_number,
    FieldKind.DATE: _coerce_date,
    FieldKind.BOOLEAN: _coerce_boolean,
}


class RowValidator:
    """
    Applies a FieldSchema to decoded rows.

    Args:
        schema: Field rules, checked in declaration order
        reference: Date passed to business rules as "today"
    """

    def __init__(self, schema: FieldSchema, reference: date):
        self.schema = schema
        self.reference = reference

    def check_field(self, field: str, value: Any, rule: FieldRule) -> Result[Any]:
        """Coerce a single cell and apply the rule's business predicate."""
        if is_blank(value) and not rule.required:
            return Result.ok(None)

        coerced = COERCERS[rule.kind](field, None if is_blank(value) else value, rule)
        if coerced.is_failure() or coerced.data is None or rule.business_rule is None:
            return coerced
        if not rule.business_rule(coerced.data, self.reference):
            return Result.fail(rule.message or f"{field} failed validation")
        return coerced

    def coerce(self, row: Mapping[str, Any]) -> Result[Dict[str, Any]]:
        """
        Check every field of the schema against the row.

        Returns:
            Result[Dict[str, Any]]: Coerced values keyed by record attribute,
            or every collected message when at least one field failed
        """
        values: Dict[str, Any] = {}
        errors: List[str] = []

        for field, rule in self.schema.items():
            outcome = self.check_field(field, row.get(field), rule)
            if outcome.is_success():
                values[rule.attribute or field.lower()] = outcome.data
            else:
                errors.extend(outcome.errors)

        if errors:
            return Result.fail(errors)
        return Result.ok(values)

    def validate(self, row: Mapping[str, Any]) -> List[str]:
        """Return the row's error messages; an empty list means it is valid."""
        return self.coerce(row).errors
