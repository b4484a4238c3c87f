"""
Multi-axis chart composition.

Overlays trend lines for the first category dimension (primary axis)
against bars for the third category dimension (secondary, offset axis),
sharing one chronological time axis. The second category dimension is
not drawn in this layout.
"""
import logging
from typing import Any, Dict, List, Sequence

import pandas as pd

from app.core.errors import PlaceholderTitles
from app.core.schemas import (
    Axis,
    AxisType,
    ChartSpecification,
    DimensionSelection,
    Legend,
    RenderFamily,
    Series,
)
from app.services.aggregator import cross_count, key_series
from app.services.dimensions import display_name
from app.services.records import field_value
from app.services.temporal import bucket_start, filter_by_range, format_bucket

logger = logging.getLogger(__name__)

MULTI_AXIS_TITLE = "Multi-Axis Chart of Traffic Events"
SECONDARY_AXIS_OFFSET = 80

# category dimension index -> (series family, axis position, axis offset)
AXIS_LAYOUT = {
    0: (RenderFamily.LINE, "left", 0),
    2: (RenderFamily.BAR, "right", SECONDARY_AXIS_OFFSET),
}


def generate_multi_axis_spec(records: Sequence[Any], selection: DimensionSelection) -> ChartSpecification:
    """
    Generate a multi-axis chart.

    Needs a time dimension and at least two category dimensions; anything
    less yields the "insufficient data" placeholder.
    """
    if selection.time is None or len(selection.categories) < 2 or not records:
        return ChartSpecification.empty(PlaceholderTitles.INSUFFICIENT_MULTI_AXIS)

    try:
        return _compose(list(records), selection)
    except Exception:
        logger.exception("Error generating multi-axis chart")
        return ChartSpecification.empty(PlaceholderTitles.ERROR)


def _compose(records: List[Any], selection: DimensionSelection) -> ChartSpecification:
    time = selection.time
    filtered = filter_by_range(records, time.field, selection.date_range)

    starts: Dict[str, pd.Timestamp] = {}
    keys = []
    for record in filtered:
        start = bucket_start(field_value(record, time.field), time.granularity)
        if start is None:
            keys.append(None)
            continue
        key = format_bucket(start, time.granularity, selection.iso_buckets)
        starts.setdefault(key, start)
        keys.append(key)

    if not starts:
        return ChartSpecification.empty(PlaceholderTitles.INSUFFICIENT_MULTI_AXIS)

    dates = sorted(starts, key=lambda k: starts[k])
    buckets = pd.Series(keys, dtype=object)

    series: List[Series] = []
    y_axis: List[Axis] = []
    for index, dimension in enumerate(selection.categories):
        if index not in AXIS_LAYOUT:
            continue
        family, position, offset = AXIS_LAYOUT[index]
        axis_index = len(y_axis)
        label = display_name(dimension)

        counts = cross_count(buckets, key_series(filtered, dimension))
        for value in counts.inner_keys:
            series.append(Series(
                name=f"{label}: {value}",
                type=family,
                y_axis_index=axis_index,
                data=[counts.count(date, value) for date in dates],
            ))
        y_axis.append(Axis(type=AxisType.VALUE, name=label, position=position, offset=offset))

    return ChartSpecification(
        title=MULTI_AXIS_TITLE,
        x_axis=[Axis(type=AxisType.CATEGORY, data=dates)],
        y_axis=y_axis,
        legend=Legend(data=[s.name for s in series]),
        series=series,
    )
