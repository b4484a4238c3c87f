"""
Overview charts shown alongside the user-built chart.

These need no dimension selection: one tracks the most frequent event
types over recent days, the other shows where events happen.
"""
import logging
import math
from typing import Any, Optional, Sequence

import pandas as pd

from app.core.errors import PlaceholderTitles
from app.core.sanitization import is_valid_category_value
from app.core.schemas import (
    Axis,
    AxisType,
    ChartSpecification,
    Legend,
    NamedValue,
    RenderFamily,
    Series,
    TimeGranularity,
)
from app.services.aggregator import bucket_series, count_by, cross_count, key_series
from app.services.records import field_value, text_value

logger = logging.getLogger(__name__)

TREND_TOP_TYPES = 5
TREND_RECENT_BUCKETS = 10
LOCATION_TOP_N = 8
LOCATION_RADIUS = ["30%", "70%"]


def generate_trend_overview(
    records: Sequence[Any],
    category_field: str = "event_type",
    time_field: str = "date_start"
) -> ChartSpecification:
    """Daily counts of the 5 most frequent event types over the last 10 day buckets."""
    if not records:
        return ChartSpecification.empty(PlaceholderTitles.NO_DATA)

    try:
        categories = key_series(records, category_field)
        top_types = [name for name, _ in count_by(categories, limit=TREND_TOP_TYPES)]
        counts = cross_count(bucket_series(records, time_field, TimeGranularity.DAY), categories)
        if counts.empty:
            return ChartSpecification.empty(PlaceholderTitles.NO_DATA)

        dates = counts.outer_keys[-TREND_RECENT_BUCKETS:]
        series = [
            Series(
                name=event_type,
                type=RenderFamily.LINE,
                smooth=True,
                data=[counts.count(date, event_type) for date in dates],
            )
            for event_type in top_types
        ]

        return ChartSpecification(
            title="Recent Event Trends by Type",
            x_axis=[Axis(type=AxisType.CATEGORY, data=dates)],
            y_axis=[Axis(type=AxisType.VALUE, name="Event Count")],
            legend=Legend(data=top_types),
            series=series,
        )
    except Exception:
        logger.exception("Error generating trend overview chart")
        return ChartSpecification.empty(PlaceholderTitles.ERROR)


def _location_key(record: Any, field: str, fallback_field: str) -> Optional[str]:
    value = text_value(record, field)
    if value is not None:
        return value
    # "Main St, Springfield, Greene County" -> "Greene County"
    location = field_value(record, fallback_field)
    if is_valid_category_value(location):
        tail = location.split(',')[-1].strip()
        if tail:
            return tail
    return None


def _percent(count: int, total: int) -> int:
    return int(math.floor(count / total * 100 + 0.5)) if total else 0


def generate_location_overview(
    records: Sequence[Any],
    field: str = "county",
    fallback_field: str = "location"
) -> ChartSpecification:
    """Donut of the 8 locations with the most events."""
    if not records:
        return ChartSpecification.empty(PlaceholderTitles.NO_DATA)

    try:
        keys = pd.Series([_location_key(r, field, fallback_field) for r in records], dtype=object)
        items = count_by(keys, limit=LOCATION_TOP_N)
        if not items:
            return ChartSpecification.empty(PlaceholderTitles.NO_DATA)

        total = sum(count for _, count in items)
        data = [NamedValue(name=name, value=count, percent=_percent(count, total)) for name, count in items]

        return ChartSpecification(
            title="Event Distribution by Location",
            legend=Legend(data=[name for name, _ in items]),
            series=[Series(
                name="Location Distribution",
                type=RenderFamily.PIE,
                radius=LOCATION_RADIUS,
                data=data,
            )],
        )
    except Exception:
        logger.exception("Error generating location overview chart")
        return ChartSpecification.empty(PlaceholderTitles.ERROR)
