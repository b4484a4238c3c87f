"""
Unit tests for multi-axis chart composition.
"""
import pytest
from app.core.errors import PlaceholderTitles
from app.core.schemas import ChartType, DimensionSelection, RenderFamily, TimeDimension, TimeGranularity
from app.services.generator import generate_chart_spec
from app.services.multi_axis import generate_multi_axis_spec


@pytest.fixture
def events():
    return [
        {"date_start": "2024-02-01T08:00", "event_type": "CRASH", "priority_level": "HIGH", "event_status": "OPEN"},
        {"date_start": "2024-01-15T08:00", "event_type": "STALL", "priority_level": "LOW", "event_status": "CLOSED"},
        {"date_start": "2024-12-01T08:00", "event_type": "CRASH", "priority_level": "LOW", "event_status": "OPEN"},
        {"date_start": "2024-02-01T18:00", "event_type": "CRASH", "priority_level": "HIGH", "event_status": "CLOSED"},
    ]


def selection_with(*categories):
    return DimensionSelection(
        time=TimeDimension(field="date_start", granularity=TimeGranularity.DAY),
        categories=list(categories),
    )


@pytest.mark.unit
def test_lines_on_left_bars_on_right(events):
    spec = generate_multi_axis_spec(events, selection_with("event_type", "priority_level", "event_status"))

    assert spec.title == "Multi-Axis Chart of Traffic Events"
    assert [a.name for a in spec.y_axis] == ["Event Type", "Event Status"]
    assert [a.position for a in spec.y_axis] == ["left", "right"]
    assert [a.offset for a in spec.y_axis] == [0, 80]

    lines = [s for s in spec.series if s.type is RenderFamily.LINE]
    bars = [s for s in spec.series if s.type is RenderFamily.BAR]
    assert [s.name for s in lines] == ["Event Type: CRASH", "Event Type: STALL"]
    assert [s.name for s in bars] == ["Event Status: CLOSED", "Event Status: OPEN"]
    assert all(s.y_axis_index == 0 for s in lines)
    assert all(s.y_axis_index == 1 for s in bars)
    assert not any(s.name.startswith("Priority Level") for s in spec.series)
    assert spec.legend.data == [s.name for s in spec.series]


@pytest.mark.unit
def test_time_axis_is_chronological(events):
    spec = generate_multi_axis_spec(events, selection_with("event_type", "priority_level"))

    # "12/1/2024" would sort before "2/1/2024" as a plain string
    assert spec.x_axis[0].data == ["1/15/2024", "2/1/2024", "12/1/2024"]
    crash = next(s for s in spec.series if s.name == "Event Type: CRASH")
    assert crash.data == [0, 2, 1]


@pytest.mark.unit
def test_two_categories_draw_primary_axis_only(events):
    spec = generate_multi_axis_spec(events, selection_with("event_type", "priority_level"))
    assert len(spec.y_axis) == 1
    assert all(s.type is RenderFamily.LINE for s in spec.series)


@pytest.mark.unit
@pytest.mark.parametrize("selection", [
    selection_with("event_type"),
    DimensionSelection(categories=["event_type", "priority_level"]),
    DimensionSelection(location="county", categories=["event_type", "priority_level"]),
])
def test_precondition_placeholder(events, selection):
    spec = generate_chart_spec(events, selection, ChartType.MULTI_AXIS)
    assert spec.placeholder is True
    assert spec.title == PlaceholderTitles.INSUFFICIENT_MULTI_AXIS


@pytest.mark.unit
def test_no_parseable_dates_is_insufficient():
    records = [{"date_start": "garbage", "event_type": "CRASH", "priority_level": "LOW"}]
    spec = generate_multi_axis_spec(records, selection_with("event_type", "priority_level"))
    assert spec.title == PlaceholderTitles.INSUFFICIENT_MULTI_AXIS
