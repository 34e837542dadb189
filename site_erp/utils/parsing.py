"""
Lenient coercion helpers for request payloads.
Each returns None for absent/unparseable input so callers decide whether the
field is required.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

TWO_PLACES = Decimal("0.01")
MAX_AMOUNT = Decimal("1e13")  # exclusive bound of NUMERIC(15, 2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def to_null_if_empty(value: Any) -> Optional[str]:
    """Trimmed string, or None for blanks and the literal 'undefined'/'null' sent by forms."""
    s = clean_str(value)
    if not s or s.lower() in ("undefined", "null"):
        return None
    return s


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime into a naive UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def to_amount(value: Any) -> Optional[Decimal]:
    """Money value rounded to two places; None when it does not fit NUMERIC(15, 2)."""
    number = to_decimal(value)
    if number is None or abs(number) >= MAX_AMOUNT:
        return None
    try:
        return number.quantize(TWO_PLACES)
    except InvalidOperation:
        return None


def to_decimal_or_zero(value: Any) -> Decimal:
    number = to_decimal(value)
    return number if number is not None else Decimal("0")


def parse_range_end(value: Any) -> Optional[datetime]:
    """Inclusive end of a date filter: a bare date (YYYY-MM-DD) covers the whole day."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    if isinstance(value, str) and len(value.strip()) == 10:
        return parsed.replace(hour=23, minute=59, second=59, microsecond=999999)
    return parsed
