"""
Unit tests for the overview charts.
"""
import pytest
from app.core.errors import PlaceholderTitles
from app.core.schemas import RenderFamily
from app.services.overview import generate_location_overview, generate_trend_overview


@pytest.mark.unit
def test_trend_overview_top_types_and_recent_days():
    records = []
    for day in range(1, 13):
        records.append({"date_start": f"2024-03-{day:02d}", "event_type": "CRASH"})
    for i, kind in enumerate(["STALL", "ROADWORK", "DEBRIS", "WEATHER", "FIRE", "ANIMAL"]):
        records.extend({"date_start": "2024-03-05", "event_type": kind} for _ in range(6 - i))

    spec = generate_trend_overview(records)

    assert spec.title == "Recent Event Trends by Type"
    assert spec.legend.data == ["CRASH", "STALL", "ROADWORK", "DEBRIS", "WEATHER"]
    assert len(spec.x_axis[0].data) == 10
    assert all(s.smooth and s.type is RenderFamily.LINE for s in spec.series)
    assert all(len(s.data) == 10 for s in spec.series)


@pytest.mark.unit
def test_location_overview_with_fallback_and_percent():
    records = [
        {"county": "Polk"},
        {"county": "Polk"},
        {"location": "I-35 at Exit 90, Story"},
        {"county": "", "location": "US-30, Story"},
        {"county": "null", "location": "undefined"},
    ]

    spec = generate_location_overview(records)
    slices = spec.series[0].data

    assert spec.series[0].radius == ["30%", "70%"]
    assert [(s.name, s.value, s.percent) for s in slices] == [("Polk", 2, 50), ("Story", 2, 50)]


@pytest.mark.unit
def test_location_overview_limits_to_eight():
    records = [{"county": f"County {i}"} for i in range(12)]
    spec = generate_location_overview(records)
    assert len(spec.series[0].data) == 8


@pytest.mark.unit
def test_overviews_of_nothing_are_placeholders():
    assert generate_trend_overview([]).title == PlaceholderTitles.NO_DATA
    assert generate_location_overview([]).title == PlaceholderTitles.NO_DATA
    assert generate_location_overview([{"county": ""}]).placeholder is True
