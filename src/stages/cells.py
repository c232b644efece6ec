"""Cell-level helpers shared by the stages."""

import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any

from dateutil import parser as date_parser

EXCEL_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)
DATE_FORMAT = "%Y-%m-%d"
FILL_VALUE = "N/A"

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$")
_NUMBER_PREFIX_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_HAS_DIGIT_RE = re.compile(r"\d")


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def is_missing(value: Any) -> bool:
    """Blank or the literal fill marker (any case)."""
    return is_blank(value) or str(value).strip().lower() == FILL_VALUE.lower()


def is_numeric(value: Any) -> bool:
    """True if the value is a finite number or a string holding exactly one."""
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str) and _NUMERIC_RE.match(value):
        return math.isfinite(float(value))
    return False


def to_number(value: Any) -> float | None:
    """Numeric value of a cell, or None when it is not numeric."""
    if not is_numeric(value):
        return None
    return float(value)


def parse_number_prefix(text: str) -> float | None:
    """Parse the leading number of a string, ignoring trailing garbage."""
    match = _NUMBER_PREFIX_RE.match(text)
    if match is None:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def as_plain_number(number: float) -> int | float:
    return int(number) if number.is_integer() else number


def excel_serial_to_datetime(serial: float) -> datetime | None:
    """Convert an Excel serial day count (1899-12-30 epoch, UTC)."""
    try:
        return EXCEL_EPOCH + timedelta(days=serial)
    except (OverflowError, ValueError):
        return None


def excel_serial_to_date(value: Any) -> str | None:
    """Excel serial date as YYYY-MM-DD, or None when it cannot be converted."""
    number = to_number(value)
    if number is None:
        return None
    converted = excel_serial_to_datetime(number)
    if converted is None:
        return None
    return converted.strftime(DATE_FORMAT)


def parse_date(value: Any) -> datetime | None:
    """Parse a cell as a UTC datetime.

    Numbers are read as Excel serial dates. Strings must contain at least one
    digit so that bare words such as weekday names are not accepted.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if is_numeric(value):
        return excel_serial_to_datetime(float(value))
    if not isinstance(value, str) or not _HAS_DIGIT_RE.search(value):
        return None
    try:
        parsed = date_parser.parse(value.strip())
    except (ValueError, OverflowError):
        return None
    return _as_utc(parsed)


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
