"""
Unit tests for temporal bucketing.
"""
import pytest
from datetime import datetime, timezone
from app.core.schemas import DateRange, TimeGranularity
from app.services.temporal import bucket, filter_by_range, parse_timestamp


@pytest.mark.unit
@pytest.mark.parametrize("granularity,expected", [
    (TimeGranularity.HOUR, "3/7/2024 14:00"),
    (TimeGranularity.DAY, "3/7/2024"),
    (TimeGranularity.MONTH, "3/2024"),
    (TimeGranularity.YEAR, "2024"),
])
def test_bucket_key_formats(granularity, expected):
    assert bucket("2024-03-07T14:35:10", granularity) == expected


@pytest.mark.unit
@pytest.mark.parametrize("granularity,expected", [
    (TimeGranularity.HOUR, "2024-03-07 14:00"),
    (TimeGranularity.DAY, "2024-03-07"),
    (TimeGranularity.MONTH, "2024-03"),
    (TimeGranularity.YEAR, "2024"),
])
def test_iso_bucket_key_formats(granularity, expected):
    assert bucket("2024-03-07T14:35:10", granularity, iso=True) == expected


@pytest.mark.unit
def test_bucket_accepts_granularity_strings_and_datetimes():
    assert bucket(datetime(2023, 12, 31, 23, 59), "day") == "12/31/2023"
    assert bucket("2024-01-01") == "1/1/2024"


@pytest.mark.unit
def test_midnight_hour_bucket():
    assert bucket("2024-01-05 00:10", TimeGranularity.HOUR) == "1/5/2024 0:00"


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "   ", "not a date", "undefined", 1704067200, 3.5, True, ["2024-01-01"]])
def test_unparseable_values_bucket_to_none(value):
    assert bucket(value, TimeGranularity.DAY) is None


@pytest.mark.unit
@pytest.mark.parametrize("value", ["now", "Today", " yesterday ", "tomorrow", "10:30", "10:30:00", "1/5", "Jan 5"])
def test_clock_relative_strings_bucket_to_none(value):
    """Values without a full calendar date never fall back to the current day."""
    assert parse_timestamp(value) is None
    assert bucket(value, TimeGranularity.HOUR) is None


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    ("Jan 5, 2024", "1/5/2024"),
    ("1/5/24", "1/5/2024"),
    ("2024-01-05 10:30", "1/5/2024"),
])
def test_written_dates_still_parse(value, expected):
    assert bucket(value) == expected


@pytest.mark.unit
def test_timezone_aware_values_are_converted_to_utc():
    assert bucket("2024-01-01T23:30:00-05:00", TimeGranularity.DAY) == "1/2/2024"
    ts = parse_timestamp(datetime(2024, 1, 1, 12, tzinfo=timezone.utc))
    assert ts.tzinfo is None
    assert ts.hour == 12


@pytest.mark.unit
def test_filter_by_range_is_inclusive():
    records = [
        {"date_start": "2024-01-01T00:00:00"},
        {"date_start": "2024-01-15T12:00:00"},
        {"date_start": "2024-01-31T00:00:00"},
        {"date_start": "2024-02-01T00:00:00"},
        {"date_start": "garbage"},
        {},
    ]
    date_range = DateRange(start=datetime(2024, 1, 1), end=datetime(2024, 1, 31))

    kept = filter_by_range(records, "date_start", date_range)

    assert kept == records[:3]


@pytest.mark.unit
def test_filter_without_range_keeps_everything():
    records = [{"date_start": "garbage"}, {}]
    assert filter_by_range(records, "date_start", None) == records
