"""
Temporal bucketing of event timestamps.

Timestamps are parsed with pandas and truncated to an hour, day, month or
year bucket. Bucket keys default to the dashboard's "M/D/YYYY" family,
which does not sort chronologically as plain strings; ISO-8601 keys are
available with ``iso=True``.

Timezone-aware values are converted to UTC and made naive. Naive values
are taken as wall-clock time, so bucketing never depends on the host
locale.
"""
import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

from app.core.schemas import DateRange, TimeGranularity
from app.services.records import field_value

logger = logging.getLogger(__name__)

ISO_FORMATS = {
    TimeGranularity.HOUR: "%Y-%m-%d %H:00",
    TimeGranularity.DAY: "%Y-%m-%d",
    TimeGranularity.MONTH: "%Y-%m",
    TimeGranularity.YEAR: "%Y",
}

# Strings pandas would resolve against the current clock
RELATIVE_DATE_WORDS = frozenset({"now", "today", "yesterday", "tomorrow"})

# A four-digit year, or day/month/year written as three numbers
_DATE_PART = re.compile(r"\d{4}|\d{1,2}[/.-]\d{1,2}[/.-]\d{2}")


def _naive(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is not None:
        return ts.tz_convert("UTC").tz_localize(None)
    return ts


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a record value as a timestamp.

    Strings and datetime/date objects are accepted. Numbers, booleans,
    blanks and unparseable strings yield None; this never raises.
    Strings must carry a full calendar date: relative words ("now") and
    time-only or year-less values ("10:30", "Jan 5") are rejected.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.lower() in RELATIVE_DATE_WORDS or not _DATE_PART.search(text):
            return None
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    elif isinstance(value, (datetime, date)):
        try:
            ts = pd.Timestamp(value)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if pd.isna(ts):
        return None
    return _naive(ts)


def truncate(ts: pd.Timestamp, granularity: TimeGranularity) -> pd.Timestamp:
    """Truncate a timestamp to the start of its bucket."""
    if granularity is TimeGranularity.HOUR:
        return ts.replace(minute=0, second=0, microsecond=0, nanosecond=0)
    if granularity is TimeGranularity.MONTH:
        return ts.replace(day=1).normalize()
    if granularity is TimeGranularity.YEAR:
        return ts.replace(month=1, day=1).normalize()
    return ts.normalize()


def format_bucket(start: pd.Timestamp, granularity: TimeGranularity, iso: bool = False) -> str:
    if iso:
        return start.strftime(ISO_FORMATS[granularity])
    if granularity is TimeGranularity.HOUR:
        return f"{start.month}/{start.day}/{start.year} {start.hour}:00"
    if granularity is TimeGranularity.MONTH:
        return f"{start.month}/{start.year}"
    if granularity is TimeGranularity.YEAR:
        return f"{start.year}"
    return f"{start.month}/{start.day}/{start.year}"


def bucket_start(value: Any, granularity: Union[TimeGranularity, str] = TimeGranularity.DAY) -> Optional[pd.Timestamp]:
    ts = parse_timestamp(value)
    if ts is None:
        return None
    return truncate(ts, TimeGranularity(granularity))


def bucket(
    value: Any,
    granularity: Union[TimeGranularity, str] = TimeGranularity.DAY,
    iso: bool = False
) -> Optional[str]:
    """
    Format a raw timestamp value into a bucket key.

    Args:
        value: Raw field value from an event record
        granularity: hour ("M/D/YYYY H:00"), day ("M/D/YYYY"),
            month ("M/YYYY") or year ("YYYY")
        iso: Use ISO-8601 keys instead

    Returns:
        The bucket key, or None if the value does not parse as a date
    """
    granularity = TimeGranularity(granularity)
    start = bucket_start(value, granularity)
    if start is None:
        return None
    return format_bucket(start, granularity, iso)


def filter_by_range(records: Iterable[Any], time_field: str, date_range: Optional[DateRange]) -> List[Any]:
    """
    Keep records whose time field falls inside the inclusive date range.

    Records with a missing or unparseable time field are dropped. Without a
    range every record passes through.
    """
    records = list(records)
    if date_range is None:
        return records

    start = _naive(pd.Timestamp(date_range.start))
    end = _naive(pd.Timestamp(date_range.end))

    kept = []
    for record in records:
        ts = parse_timestamp(field_value(record, time_field))
        if ts is not None and start <= ts <= end:
            kept.append(record)

    logger.debug(
        f"Filtered by {time_field} from {start.isoformat()} to {end.isoformat()}: "
        f"{len(records)} -> {len(kept)} records"
    )
    return kept
