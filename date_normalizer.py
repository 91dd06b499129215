"""
Date normalization for spreadsheet cells.

Cells reaching the validator may hold a spreadsheet serial number, a
datetime produced by the decoder, free text, or nothing at all. This module
turns any of those into a calendar date or a failure message.
"""
import logging
import math
import numbers
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from utils.result import Result

logger = logging.getLogger(__name__)

# Serial day 25569 is 1970-01-01 (serial day 0 is 1899-12-30)
UNIX_EPOCH_SERIAL = 25569
UNIX_EPOCH = datetime(1970, 1, 1)

MISSING_MESSAGE = "{field} is missing"
INVALID_FORMAT_MESSAGE = "Invalid date format: {value}"
OUTSIDE_MONTH_MESSAGE = "Date is not within the current month"

# Resolved by pandas against the wall clock, never the reference date
RELATIVE_KEYWORDS = {"today", "now", "yesterday", "tomorrow"}


def is_blank(value: Any) -> bool:
    """Return True for None, NaN/NaT and empty or whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # pd.isna on containers returns an array
        return False


def from_serial(serial: float) -> date:
    """
    Convert a spreadsheet serial number to a calendar date.

    The conversion is a plain UTC day offset from the Unix epoch; any
    fractional part (time of day) is dropped.

    Raises:
        OverflowError: If the serial lies outside the representable range
    """
    moment = UNIX_EPOCH + timedelta(days=float(serial) - UNIX_EPOCH_SERIAL)
    return moment.date()


def _parse_strict_iso(text: str) -> date:
    parts = text.strip().split("-")
    if len(parts) != 3:
        raise ValueError(f"expected YYYY-MM-DD, got {text!r}")
    year, month, day = (int(part) for part in parts)
    return date(year, month, day)


def _parse_text(text: str) -> date:
    if text.strip().lower() in RELATIVE_KEYWORDS:
        raise ValueError(f"relative date {text!r}")
    parsed = pd.to_datetime(text, errors="coerce")
    if not pd.isna(parsed):
        return parsed.date()
    logger.debug("Generic date parsing failed, trying YYYY-MM-DD", extra={"value": text})
    return _parse_strict_iso(text)


def parse_date(value: Any, field: str = "Date") -> Result[date]:
    """
    Decode a raw cell value into a calendar date.

    Precedence: blank or serial 0 -> missing; other numbers -> spreadsheet
    serial; datetime and date objects -> their calendar date; anything else ->
    free-text parsing, then a strict YYYY-MM-DD decomposition. Relative words
    such as "today" are rejected so the result never depends on the wall clock.

    Args:
        value: Raw cell value
        field: Column name used in the "missing" message

    Returns:
        Result[date]: The decoded date or a single failure message
    """
    # Serial 0 is what an empty numeric date cell exports as
    if is_blank(value) or (isinstance(value, numbers.Real) and not isinstance(value, bool) and value == 0):
        return Result.fail(MISSING_MESSAGE.format(field=field))

    try:
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            if not math.isfinite(value):
                raise ValueError(f"non-finite serial {value}")
            return Result.ok(from_serial(value))
        if isinstance(value, datetime):
            return Result.ok(value.date())
        if isinstance(value, date):
            return Result.ok(value)
        if isinstance(value, str):
            return Result.ok(_parse_text(value))
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Could not decode date {value!r}: {e}")

    return Result.fail(INVALID_FORMAT_MESSAGE.format(value=value))


def within_month(value: date, reference: date) -> bool:
    """True when value falls in the same month and year as reference."""
    return value.year == reference.year and value.month == reference.month


def normalize_date(value: Any, reference: date) -> Result[date]:
    """
    Decode a cell value and require it to fall in the reference month.

    Args:
        value: Raw cell value
        reference: Date standing in for "today"

    Returns:
        Result[date]: The date, or the decoding / current-month failure
    """
    return parse_date(value).and_then(
        lambda parsed: Result.ok(parsed) if within_month(parsed, reference)
        else Result.fail(OUTSIDE_MONTH_MESSAGE)
    )
