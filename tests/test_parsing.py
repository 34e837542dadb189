from datetime import date, datetime
from decimal import Decimal

import pytest

from site_erp.utils.file_storage import safe_filename
from site_erp.utils.parsing import (
    parse_date,
    parse_range_end,
    to_amount,
    to_decimal,
    to_null_if_empty,
)


@pytest.mark.parametrize("value, expected", [
    ("2024-03-01", datetime(2024, 3, 1)),
    ("2024-03-01T10:15:00", datetime(2024, 3, 1, 10, 15)),
    ("2024-03-01T10:15:00Z", datetime(2024, 3, 1, 10, 15)),
    ("2024-03-01T15:45:00+05:30", datetime(2024, 3, 1, 10, 15)),
    (date(2024, 3, 1), datetime(2024, 3, 1)),
    ("", None),
    (None, None),
    ("03/01/2024", None),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


def test_parse_range_end_covers_whole_day():
    assert parse_range_end("2024-03-05") == datetime(2024, 3, 5, 23, 59, 59, 999999)
    assert parse_range_end("2024-03-05T12:00:00") == datetime(2024, 3, 5, 12)
    assert parse_range_end("garbage") is None


def test_numbers():
    assert to_decimal("12.5") == Decimal("12.5")
    assert to_decimal(" 7 ") == Decimal("7")
    assert to_decimal("NaN") is None
    assert to_decimal(True) is None
    assert to_decimal("abc") is None
    assert to_amount("10.006") == Decimal("10.01")
    assert to_amount(3) == Decimal("3.00")
    assert to_amount("9999999999999.99") == Decimal("9999999999999.99")
    assert to_amount("10000000000000") is None
    assert to_amount("-1e13") is None
    assert to_amount(Decimal("1e30")) is None


def test_to_null_if_empty():
    assert to_null_if_empty("  ") is None
    assert to_null_if_empty("undefined") is None
    assert to_null_if_empty("NULL") is None
    assert to_null_if_empty(" MP09 ") == "MP09"


def test_safe_filename():
    assert safe_filename("../../etc/passwd") == "passwd"
    assert safe_filename("truck photo (1).jpg") == "truck_photo_1_.jpg"
    assert safe_filename(None) == "upload"
