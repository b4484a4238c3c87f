"""
Chart specification generator for traffic event data.

Turns event records, a dimension selection and a chart type into a
renderer-agnostic ChartSpecification. Every failure mode (missing chart
type, invalid dimensions, no data, unexpected errors) produces a
placeholder specification with an explanatory title instead of raising.
"""
import logging
from typing import Any, List, Optional, Sequence, Union

from app.core.errors import PlaceholderTitles
from app.core.schemas import (
    Axis,
    AxisType,
    BoxplotItem,
    ChartSpecification,
    ChartType,
    DimensionCategory,
    DimensionSelection,
    Legend,
    NamedValue,
    RenderFamily,
    Series,
    VisualMap,
)
from app.services.aggregator import (
    CrossCounts,
    bucket_series,
    count_by,
    cross_count,
    key_series,
    stack_keys,
)
from app.services.dimensions import display_name
from app.services.multi_axis import generate_multi_axis_spec
from app.services.stats import MIN_BOXPLOT_SAMPLES, summarize_categories
from app.services.temporal import filter_by_range
from app.services.validator import is_chart_type_allowed, validate_selection

logger = logging.getLogger(__name__)

CATEGORY_TOP_N = 20
COMPARISON_PRIMARY_LIMIT = 10
COMPARISON_SECONDARY_LIMIT = 8
STACK_ID = "total"
PIE_RADIUS = "70%"
DONUT_RADIUS = ["40%", "70%"]

LINE_TYPES = (ChartType.LINE, ChartType.AREA)
PIE_TYPES = (ChartType.PIE, ChartType.DONUT)


def placeholder_spec(title: str) -> ChartSpecification:
    """Empty chart carrying an explanatory title."""
    return ChartSpecification.empty(title)


def generate_chart_title(selection: DimensionSelection, chart_type: Union[ChartType, str]) -> str:
    """
    Build a chart title from the selected dimensions.

    e.g. "Line Chart of Traffic Events by Date Start, County, Event Type and Priority Level"
    """
    name = chart_type.value if isinstance(chart_type, ChartType) else str(chart_type)
    parts = []
    if selection.time is not None:
        parts.append(display_name(selection.time.field))
    if selection.location:
        parts.append(display_name(selection.location))
    if selection.categories:
        parts.append(' and '.join(display_name(c) for c in selection.categories))

    if not parts:
        return f"Traffic Events {name} Chart"
    return f"{name} Chart of Traffic Events by {', '.join(parts)}"


def generate_chart_spec(
    records: Sequence[Any],
    selection: DimensionSelection,
    chart_type: Optional[Union[ChartType, str]]
) -> ChartSpecification:
    """
    Generate a chart specification for the selected dimensions.

    Args:
        records: Event records (mappings of field name to scalar)
        selection: Time/location/category dimensions, date range and granularity
        chart_type: Requested chart type, or None

    Returns:
        ChartSpecification; a placeholder when the chart cannot be built
    """
    if chart_type is None:
        return placeholder_spec(PlaceholderTitles.NO_CHART_TYPE)

    try:
        chart_type = ChartType(chart_type)
    except ValueError:
        logger.warning(f"Unknown chart type requested: {chart_type!r}")
        return placeholder_spec(PlaceholderTitles.NO_MATCHING_CHART)

    try:
        if chart_type is ChartType.MULTI_AXIS:
            return generate_multi_axis_spec(records, selection)

        if not records:
            return placeholder_spec(PlaceholderTitles.NO_DATA)

        validation = validate_selection(selection)
        if not validation.valid:
            return placeholder_spec(PlaceholderTitles.INVALID_SELECTION)
        if not is_chart_type_allowed(chart_type, validation):
            return placeholder_spec(PlaceholderTitles.UNSUPPORTED_CHART.format(chart_type=chart_type.value))

        filtered = _filter_records(records, selection)
        if not filtered:
            return placeholder_spec(PlaceholderTitles.NO_DATA)

        spec = _dispatch(filtered, selection, chart_type)
        logger.debug(f"Generated {chart_type.value} chart with {len(spec.series)} series from {len(filtered)} records")
        return spec
    except Exception:
        logger.exception(f"Error generating {chart_type.value} chart")
        return placeholder_spec(PlaceholderTitles.ERROR)


def _filter_records(records: Sequence[Any], selection: DimensionSelection) -> List[Any]:
    # Without a time dimension the range still applies, through date_field
    field = selection.time.field if selection.time is not None else selection.date_field
    return filter_by_range(records, field, selection.date_range)


def _dispatch(records: List[Any], selection: DimensionSelection, chart_type: ChartType) -> ChartSpecification:
    present = selection.present_categories()
    has_time = DimensionCategory.TIME in present
    has_location = DimensionCategory.LOCATION in present
    has_category = DimensionCategory.CATEGORY in present

    if chart_type is ChartType.HEATMAP:
        if not (has_time and has_location):
            return placeholder_spec(PlaceholderTitles.MISSING_DIMENSION.format(
                dimension="location", chart_type=chart_type.value
            ))
        return _heatmap_spec(records, selection, chart_type)

    if chart_type is ChartType.BOXPLOT:
        return _boxplot_spec(records, selection, chart_type)

    if has_time and has_category:
        return _time_category_spec(records, selection, chart_type)

    if has_time and has_location:
        return _time_location_spec(records, selection, chart_type)

    if has_location and has_category:
        if chart_type in PIE_TYPES:
            return _location_pie_spec(records, selection, chart_type)
        return _location_category_spec(records, selection, chart_type)

    if has_category:
        return _category_spec(records, selection, chart_type)

    logger.warning("No matching chart configuration found for the selected dimensions")
    return placeholder_spec(PlaceholderTitles.NO_MATCHING_CHART)


def _time_buckets(records: List[Any], selection: DimensionSelection):
    time = selection.time
    return bucket_series(records, time.field, time.granularity, selection.iso_buckets)


def _time_by_categories(records: List[Any], selection: DimensionSelection) -> CrossCounts:
    """Time bucket x category value counts over every selected category dimension."""
    buckets = _time_buckets(records, selection)
    # Several dimensions feed one series axis, so their values carry the dimension label
    prefix = len(selection.categories) > 1
    inners = [
        (display_name(dim) if prefix else None, key_series(records, dim))
        for dim in selection.categories
    ]
    outer, inner = stack_keys(buckets, inners)
    return cross_count(outer, inner)


def _time_category_spec(records, selection, chart_type) -> ChartSpecification:
    counts = _time_by_categories(records, selection)
    if counts.empty:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    family = RenderFamily.LINE if chart_type in LINE_TYPES else RenderFamily.BAR
    series = [
        Series(
            name=category,
            type=family,
            stack=STACK_ID if chart_type is ChartType.STACKED_BAR else None,
            area=chart_type is ChartType.AREA,
            data=counts.column(category),
        )
        for category in counts.inner_keys
    ]

    return ChartSpecification(
        title=generate_chart_title(selection, chart_type),
        x_axis=[Axis(type=AxisType.CATEGORY, data=counts.outer_keys)],
        y_axis=[Axis(type=AxisType.VALUE)],
        legend=Legend(data=counts.inner_keys),
        series=series,
    )


def _time_location_spec(records, selection, chart_type) -> ChartSpecification:
    counts = cross_count(_time_buckets(records, selection), key_series(records, selection.location))
    if counts.empty:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    series = [
        Series(
            name=location,
            type=RenderFamily.LINE,
            area=chart_type is ChartType.AREA,
            data=counts.column(location),
        )
        for location in counts.inner_keys
    ]

    return ChartSpecification(
        title=generate_chart_title(selection, chart_type),
        x_axis=[Axis(type=AxisType.CATEGORY, data=counts.outer_keys)],
        y_axis=[Axis(type=AxisType.VALUE, name="Event Count")],
        legend=Legend(data=counts.inner_keys),
        series=series,
    )


def _heatmap_spec(records, selection, chart_type) -> ChartSpecification:
    # Category dimensions do not take part in the heatmap
    counts = cross_count(_time_buckets(records, selection), key_series(records, selection.location))
    if counts.empty:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    times = counts.outer_keys
    locations = counts.inner_keys
    cells = [[time, location, counts.count(time, location)] for time in times for location in locations]

    return ChartSpecification(
        title=generate_chart_title(selection, chart_type),
        x_axis=[Axis(type=AxisType.CATEGORY, data=times)],
        y_axis=[Axis(type=AxisType.CATEGORY, data=locations)],
        series=[Series(name="Events", type=RenderFamily.HEATMAP, data=cells)],
        visual_map=VisualMap(min=0, max=max(counts.max(), 1)),
    )


def _boxplot_spec(records, selection, chart_type) -> ChartSpecification:
    """One box per category, summarizing its non-zero per-time-bucket counts."""
    counts = _time_by_categories(records, selection)
    samples = {category: counts.column(category) for category in counts.inner_keys}
    summaries = summarize_categories(samples, MIN_BOXPLOT_SAMPLES)

    if not summaries:
        return placeholder_spec(PlaceholderTitles.INSUFFICIENT_BOXPLOT.format(min_samples=MIN_BOXPLOT_SAMPLES))

    items = [BoxplotItem(name=name, **summary._asdict()) for name, summary in summaries]
    names = [name for name, _ in summaries]

    return ChartSpecification(
        title=generate_chart_title(selection, chart_type),
        x_axis=[Axis(type=AxisType.CATEGORY, data=names)],
        y_axis=[Axis(type=AxisType.VALUE, name="Event Count")],
        series=[Series(name="Event Distribution", type=RenderFamily.BOXPLOT, data=items)],
    )


def _location_category_spec(records, selection, chart_type) -> ChartSpecification:
    category = selection.categories[0]
    counts = cross_count(key_series(records, selection.location), key_series(records, category))
    if counts.empty:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    series = [
        Series(
            name=value,
            type=RenderFamily.BAR,
            stack=STACK_ID if chart_type is ChartType.STACKED_BAR else None,
            data=counts.column(value),
        )
        for value in counts.inner_keys
    ]

    return ChartSpecification(
        title=generate_chart_title(selection, chart_type),
        x_axis=[Axis(type=AxisType.CATEGORY, data=counts.outer_keys)],
        y_axis=[Axis(type=AxisType.VALUE)],
        legend=Legend(data=counts.inner_keys),
        series=series,
    )


def _pie_series(name: str, items: List[tuple], chart_type: ChartType) -> Series:
    return Series(
        name=name,
        type=RenderFamily.PIE,
        radius=DONUT_RADIUS if chart_type is ChartType.DONUT else PIE_RADIUS,
        data=[NamedValue(name=k, value=v) for k, v in items],
    )


def _location_pie_spec(records, selection, chart_type) -> ChartSpecification:
    items = count_by(key_series(records, selection.location), limit=CATEGORY_TOP_N)
    if not items:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    return ChartSpecification(
        title=generate_chart_title(selection, chart_type),
        legend=Legend(data=[k for k, _ in items]),
        series=[_pie_series("Events by Location", items, chart_type)],
    )


def _category_spec(records, selection, chart_type) -> ChartSpecification:
    if len(selection.categories) > 1 and chart_type not in PIE_TYPES:
        if chart_type in (ChartType.TREEMAP, ChartType.SUNBURST):
            return _hierarchy_spec(records, selection, chart_type)
        return _comparison_spec(records, selection, chart_type)

    dimension = selection.categories[0]
    label = display_name(dimension)
    limit = CATEGORY_TOP_N if chart_type in (ChartType.BAR,) + PIE_TYPES else None
    items = count_by(key_series(records, dimension), limit=limit)
    if not items:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    title = f"Distribution of Events by {label}"
    names = [k for k, _ in items]

    if chart_type in PIE_TYPES:
        return ChartSpecification(
            title=title,
            legend=Legend(data=names),
            series=[_pie_series(label, items, chart_type)],
        )

    if chart_type is ChartType.TREEMAP:
        return ChartSpecification(
            title=title,
            series=[Series(
                name=label,
                type=RenderFamily.TREEMAP,
                data=[NamedValue(name=k, value=v) for k, v in items],
            )],
        )

    if chart_type is ChartType.SUNBURST:
        root = NamedValue(name=label, children=[NamedValue(name=k, value=v) for k, v in items])
        return ChartSpecification(
            title=title,
            series=[Series(name=label, type=RenderFamily.SUNBURST, data=[root])],
        )

    return ChartSpecification(
        title=title,
        x_axis=[Axis(type=AxisType.CATEGORY, data=names)],
        y_axis=[Axis(type=AxisType.VALUE)],
        series=[Series(name=label, type=RenderFamily.BAR, data=[v for _, v in items])],
    )


def _primary_by_secondary(records, selection):
    primary, secondary = selection.categories[0], selection.categories[1]
    counts = cross_count(key_series(records, primary), key_series(records, secondary))
    return primary, secondary, counts


def _comparison_spec(records, selection, chart_type) -> ChartSpecification:
    primary, secondary, counts = _primary_by_secondary(records, selection)
    if counts.empty:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    primary_values = counts.top_outer(COMPARISON_PRIMARY_LIMIT)
    secondary_values = counts.top_inner(COMPARISON_SECONDARY_LIMIT)

    series = [
        Series(
            name=value,
            type=RenderFamily.BAR,
            stack=STACK_ID,
            data=counts.column(value, primary_values),
        )
        for value in secondary_values
    ]

    return ChartSpecification(
        title=f"Comparison of {display_name(primary)} by {display_name(secondary)}",
        x_axis=[Axis(type=AxisType.CATEGORY, data=primary_values)],
        y_axis=[Axis(type=AxisType.VALUE)],
        legend=Legend(data=secondary_values),
        series=series,
    )


def _hierarchy_spec(records, selection, chart_type) -> ChartSpecification:
    primary, secondary, counts = _primary_by_secondary(records, selection)
    if counts.empty:
        return placeholder_spec(PlaceholderTitles.NO_DATA)

    secondary_values = counts.top_inner(COMPARISON_SECONDARY_LIMIT)
    nodes = []
    for value in counts.top_outer(COMPARISON_PRIMARY_LIMIT):
        children = [
            NamedValue(name=child, value=n)
            for child, n in zip(secondary_values, counts.row(value, secondary_values))
            if n > 0
        ]
        if children:
            nodes.append(NamedValue(name=value, value=sum(c.value for c in children), children=children))

    family = RenderFamily.TREEMAP if chart_type is ChartType.TREEMAP else RenderFamily.SUNBURST
    return ChartSpecification(
        title=f"Comparison of {display_name(primary)} by {display_name(secondary)}",
        series=[Series(name=display_name(primary), type=family, data=nodes)],
    )
