import math
from datetime import datetime, timezone

from storefront.utils import dates


def test_parse_timestamp_handles_garbage():
    assert dates.parse_timestamp(None) is None
    assert dates.parse_timestamp("") is None
    assert dates.parse_timestamp("not a date") is None
    assert dates.parse_timestamp(20240101) is None
    assert dates.parse_timestamp("now") is None
    assert dates.parse_timestamp("today") is None


def test_format_timestamp_is_utc_millis():
    value = datetime(2024, 6, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)
    assert dates.format_timestamp(value) == "2024-06-01T12:30:05.123Z"


def test_format_timestamp_converts_offsets():
    parsed = dates.parse_timestamp("2024-06-01T02:00:00+02:00")
    assert dates.format_timestamp(parsed) == "2024-06-01T00:00:00.000Z"


def test_recency_key_orders_missing_as_oldest():
    assert dates.recency_key("bad") == -math.inf
    assert dates.recency_key("2024-01-02") > dates.recency_key("2024-01-01")


def test_format_long_date():
    assert dates.format_long_date("2024-05-01T10:00:00.000Z") == "May 1, 2024"
    assert dates.format_long_date(None) == ""
