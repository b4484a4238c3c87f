"""
Dimension selection validator.

Decides whether a combination of Time (T), Location (L) and Category (C)
dimensions can be charted, and which chart types apply to it. The table
below is the single source of truth for chart type legality.
"""
import logging
from typing import Dict, FrozenSet, Iterable, Tuple, Union

from app.core.schemas import ChartType, DimensionCategory, DimensionSelection, ValidationResult

logger = logging.getLogger(__name__)

T = DimensionCategory.TIME
L = DimensionCategory.LOCATION
C = DimensionCategory.CATEGORY

# Time-only and location-only selections have no grouping key besides the
# axis itself, so they are absent from the table and therefore invalid.
VALIDITY_MATRIX: Dict[FrozenSet[DimensionCategory], Tuple[ChartType, ...]] = {
    frozenset({C}): (ChartType.BAR, ChartType.PIE, ChartType.TREEMAP, ChartType.SUNBURST),
    frozenset({T, C}): (ChartType.LINE, ChartType.GROUPED_BAR, ChartType.HEATMAP, ChartType.MULTI_AXIS),
    frozenset({L, C}): (ChartType.GROUPED_BAR, ChartType.STACKED_BAR, ChartType.PIE),
    frozenset({T, L}): (ChartType.LINE, ChartType.HEATMAP),
    frozenset({T, L, C}): (
        ChartType.STACKED_BAR,
        ChartType.GROUPED_BAR,
        ChartType.LINE,
        ChartType.HEATMAP,
        ChartType.BOXPLOT,
        ChartType.MULTI_AXIS,
    ),
}

# Render variants that are legal wherever their base type is
CHART_VARIANTS: Dict[ChartType, ChartType] = {
    ChartType.DONUT: ChartType.PIE,
    ChartType.AREA: ChartType.LINE,
}


def validate_dimensions(categories: Iterable[Union[DimensionCategory, str]]) -> ValidationResult:
    """
    Validate the set of dimension categories that have a selection.

    Args:
        categories: DimensionCategory members or their "T"/"L"/"C" values

    Returns:
        ValidationResult with the validity flag and ordered chart suggestions
    """
    categories = list(categories)
    try:
        present = frozenset(DimensionCategory(c) for c in categories)
    except ValueError:
        logger.warning(f"Unknown dimension category in {categories!r}")
        return ValidationResult(valid=False, suggested_chart_types=[])

    suggested = VALIDITY_MATRIX.get(present)
    if suggested is None:
        return ValidationResult(valid=False, suggested_chart_types=[])
    return ValidationResult(valid=True, suggested_chart_types=list(suggested))


def validate_selection(selection: DimensionSelection) -> ValidationResult:
    """Validate the dimension categories populated in a selection."""
    return validate_dimensions(selection.present_categories())


def is_chart_type_allowed(chart_type: ChartType, result: ValidationResult) -> bool:
    if not result.valid:
        return False
    if chart_type in result.suggested_chart_types:
        return True
    base = CHART_VARIANTS.get(chart_type)
    return base is not None and base in result.suggested_chart_types
