"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from app.core.performance import PerformanceMonitor

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """
    Get performance metrics.

    Returns timing statistics for every tracked operation, including
    overall request duration.
    """
    return {'performance': PerformanceMonitor.get_all_metrics()}
