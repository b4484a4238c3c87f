from enum import Enum
from datetime import datetime
from typing import List, Optional, Any, Dict, Set, Union
from pydantic import BaseModel, Field, field_validator

from app.core.sanitization import validate_field_name


class ChartType(str, Enum):
    LINE = "Line"
    BAR = "Bar"
    PIE = "Pie"
    DONUT = "Donut"
    AREA = "Area"
    SCATTER = "Scatter"
    STACKED_BAR = "Stacked Bar"
    GROUPED_BAR = "Grouped Bar"
    HEATMAP = "Heatmap"
    TREEMAP = "Treemap"
    SUNBURST = "Sunburst"
    BOXPLOT = "Boxplot"
    MULTI_AXIS = "Multi-Axis"


class TimeGranularity(str, Enum):
    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class DimensionCategory(str, Enum):
    TIME = "T"
    LOCATION = "L"
    CATEGORY = "C"


class RenderFamily(str, Enum):
    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    TREEMAP = "treemap"
    SUNBURST = "sunburst"
    HEATMAP = "heatmap"
    BOXPLOT = "boxplot"


class AxisType(str, Enum):
    CATEGORY = "category"
    VALUE = "value"


class DateRange(BaseModel):
    start: datetime
    end: datetime


class TimeDimension(BaseModel):
    field: str
    granularity: TimeGranularity = TimeGranularity.DAY

    @field_validator('field')
    @classmethod
    def validate_field(cls, v: str) -> str:
        if not validate_field_name(v):
            raise ValueError(f"Invalid time field name: {v!r}")
        return v


class DimensionSelection(BaseModel):
    """The user's choice of time, location and category dimensions."""

    time: Optional[TimeDimension] = None
    location: Optional[str] = None  # single-select, never a list
    categories: List[str] = []  # order matters for comparison and multi-axis layouts
    date_range: Optional[DateRange] = None
    date_field: str = "date_start"  # range filter field when no time dimension is selected
    iso_buckets: bool = False

    @field_validator('location')
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        # a cleared location selector arrives as ""
        if v is None or not v.strip():
            return None
        if not validate_field_name(v):
            raise ValueError(f"Invalid location field name: {v!r}")
        return v

    @field_validator('date_field')
    @classmethod
    def validate_date_field(cls, v: str) -> str:
        if not validate_field_name(v):
            raise ValueError(f"Invalid field name: {v!r}")
        return v

    @field_validator('categories')
    @classmethod
    def validate_categories(cls, v: List[str]) -> List[str]:
        for name in v:
            if not validate_field_name(name):
                raise ValueError(f"Invalid category field name: {name!r}")
        if len(set(v)) != len(v):
            raise ValueError("Category dimensions must not contain duplicates")
        return v

    def present_categories(self) -> Set[DimensionCategory]:
        present = set()
        if self.time is not None:
            present.add(DimensionCategory.TIME)
        if self.location:
            present.add(DimensionCategory.LOCATION)
        if self.categories:
            present.add(DimensionCategory.CATEGORY)
        return present


class ValidationResult(BaseModel):
    valid: bool
    suggested_chart_types: List[ChartType] = []


class Axis(BaseModel):
    type: AxisType
    name: Optional[str] = None
    data: List[str] = []  # tick labels for category axes
    position: Optional[str] = None
    offset: int = 0


class Legend(BaseModel):
    data: List[str] = []


class NamedValue(BaseModel):
    name: str
    value: Optional[int] = None
    percent: Optional[int] = None
    children: List["NamedValue"] = []


class BoxplotItem(BaseModel):
    name: str
    min: float
    q1: float
    median: float
    q3: float
    max: float


class VisualMap(BaseModel):
    min: int = 0
    max: int


class Series(BaseModel):
    name: str
    type: RenderFamily
    data: List[Any] = []  # int counts, NamedValue, [row, col, value] or BoxplotItem
    stack: Optional[str] = None
    area: bool = False
    smooth: bool = False
    radius: Optional[Union[str, List[str]]] = None
    y_axis_index: int = 0


class ChartSpecification(BaseModel):
    title: str
    x_axis: List[Axis] = []
    y_axis: List[Axis] = []
    legend: Optional[Legend] = None
    series: List[Series] = []
    visual_map: Optional[VisualMap] = None
    placeholder: bool = False

    @classmethod
    def empty(cls, title: str) -> "ChartSpecification":
        """Placeholder chart carrying an explanatory title and no data."""
        return cls(title=title, placeholder=True)


class DimensionInfo(BaseModel):
    field: str
    label: str


class DimensionCatalog(BaseModel):
    time: List[DimensionInfo]
    location: List[DimensionInfo]
    category: List[DimensionInfo]


class ChartRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    selection: DimensionSelection = Field(default_factory=DimensionSelection)
    chart_type: Optional[ChartType] = None


class OverviewRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)


class OverviewResponse(BaseModel):
    trend: ChartSpecification
    locations: ChartSpecification
