"""
Dimension catalog for traffic event records.

Lists the fields the dashboard offers for each dimension category and
their display labels. Records are open maps, so fields outside the
catalog are still accepted and get a derived label.
"""
from typing import Dict

from app.core.schemas import DimensionCatalog, DimensionInfo

DISPLAY_NAMES: Dict[str, str] = {
    'date_start': 'Date Start',
    'date_end': 'Date End',
    'route': 'Route',
    'city': 'City',
    'county': 'County',
    'district': 'District',
    'region': 'Region',
    'subdistrict': 'Subdistrict',
    'unit': 'Unit',
    'event_type': 'Event Type',
    'priority_level': 'Priority Level',
    'event_status': 'Event Status',
    'travel_direction': 'Travel Direction',
}

TIME_FIELDS = ['date_start', 'date_end']
LOCATION_FIELDS = ['route', 'city', 'county', 'district', 'region', 'subdistrict', 'unit']
CATEGORY_FIELDS = ['event_type', 'priority_level', 'event_status', 'travel_direction']


def display_name(field: str) -> str:
    """Human-readable label for a record field ("lane_status" -> "Lane Status")."""
    if field in DISPLAY_NAMES:
        return DISPLAY_NAMES[field]
    label = ' '.join(field.replace('_', ' ').split())
    return label.title() if label else field


def _describe(fields) -> list:
    return [DimensionInfo(field=f, label=display_name(f)) for f in fields]


DIMENSION_CATALOG = DimensionCatalog(
    time=_describe(TIME_FIELDS),
    location=_describe(LOCATION_FIELDS),
    category=_describe(CATEGORY_FIELDS),
)
