import logging
from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from app.core.config import get_settings
from app.core.errors import ErrorCodes, get_error_response
from app.core.limiter import limiter, current_rate_limit
from app.core.performance import track_performance
from app.core.sanitization import sanitize_for_logging
from app.core.schemas import (
    ChartRequest,
    ChartSpecification,
    DimensionCatalog,
    DimensionSelection,
    OverviewRequest,
    OverviewResponse,
    ValidationResult,
)
from app.services.dimensions import DIMENSION_CATALOG
from app.services.generator import generate_chart_spec
from app.services.overview import generate_location_overview, generate_trend_overview
from app.services.validator import validate_selection

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_record_count(request: Request, count: int):
    """Reject payloads above MAX_RECORDS_PER_REQUEST with a 413."""
    max_records = get_settings().max_records_per_request
    if count > max_records:
        error_info = get_error_response(
            ErrorCodes.TOO_MANY_RECORDS,
            f"Maximum is {max_records} records. Your request has {count}."
        )
        error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
        raise HTTPException(status_code=413, detail=error_info)


@router.get("/health")
async def health_check():
    return {"status": "ok"}


@router.get("/dimensions", response_model=DimensionCatalog)
async def list_dimensions():
    """Known event fields grouped by dimension category."""
    return DIMENSION_CATALOG


@router.post("/dimensions/validate", response_model=ValidationResult)
@limiter.limit(current_rate_limit)
async def validate_dimensions_endpoint(request: Request, selection: DimensionSelection):
    """Chart types available for a dimension selection."""
    return validate_selection(selection)


@router.post("/charts", response_model=ChartSpecification, response_model_exclude_none=True)
@limiter.limit(current_rate_limit)
@track_performance("generate_chart")
async def create_chart(request: Request, body: ChartRequest):
    """
    Build a chart specification from event records.

    Empty or unsupported selections come back as a titled placeholder
    chart, never as an error.
    """
    _check_record_count(request, len(body.records))
    logger.info(
        f"Generating {sanitize_for_logging(body.chart_type.value if body.chart_type else 'no')} chart "
        f"for {len(body.records)} records"
    )
    return await run_in_threadpool(generate_chart_spec, body.records, body.selection, body.chart_type)


@router.post("/charts/overview", response_model=OverviewResponse, response_model_exclude_none=True)
@limiter.limit(current_rate_limit)
@track_performance("generate_overview")
async def create_overview(request: Request, body: OverviewRequest):
    """Trend and location overview charts for a set of event records."""
    _check_record_count(request, len(body.records))
    trend = await run_in_threadpool(generate_trend_overview, body.records)
    locations = await run_in_threadpool(generate_location_overview, body.records)
    return OverviewResponse(trend=trend, locations=locations)
