"""
Performance monitoring for the HTTP layer.

Timings are kept in process memory per metric name. The chart engine is
never instrumented here; only request handlers are.
"""
import time
import inspect
import logging
import threading
from collections import defaultdict
from functools import wraps
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_METRIC = 1000

_metrics_lock = threading.Lock()
_metrics: Dict[str, List[Dict[str, Any]]] = defaultdict(list)


class PerformanceMonitor:
    """Monitor and track performance metrics."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Record a performance metric.

        Args:
            name: Metric name (e.g., 'generate_chart')
            value: Metric value (usually duration in seconds)
            metadata: Optional metadata (correlation_id, status, ...)
        """
        with _metrics_lock:
            samples = _metrics[name]
            samples.append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(samples) > MAX_SAMPLES_PER_METRIC:
                del samples[:-MAX_SAMPLES_PER_METRIC]

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a metric.

        Returns:
            Dict with count, min, max, mean and percentiles, or None if no data
        """
        with _metrics_lock:
            samples = _metrics.get(metric_name)
            if not samples:
                return None
            values = sorted(m['value'] for m in samples)

        n = len(values)
        return {
            'count': n,
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / n,
            'p50': values[n // 2],
            'p95': values[int(n * 0.95)],
            'p99': values[int(n * 0.99)],
        }

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        """Get statistics for all metrics."""
        with _metrics_lock:
            names = list(_metrics.keys())
        return {name: PerformanceMonitor.get_stats(name) for name in names}

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def _correlation_id(args, kwargs) -> Optional[str]:
    request = kwargs.get('request')
    if request is None and args and hasattr(args[0], 'state'):
        request = args[0]
    if request is not None and hasattr(request, 'state'):
        return getattr(request.state, 'correlation_id', None)
    return None


def _finish(metric_name: str, start_time: float, correlation_id: Optional[str], error: Optional[Exception] = None):
    duration = time.time() - start_time
    metadata = {'correlation_id': correlation_id, 'status': 'error' if error else 'success'}
    if error is not None:
        metadata['error'] = str(error)
        logger.error(f"{metric_name} failed after {duration:.3f}s: {error}")
    else:
        logger.debug(f"{metric_name} completed in {duration:.3f}s", extra={'metric': metric_name, 'duration': duration})
    PerformanceMonitor.record_metric(metric_name, duration, metadata)


def track_performance(metric_name: str):
    """
    Decorator to track function execution time.

    Usage:
        @track_performance("generate_chart")
        async def create_chart(request: Request, ...):
            ...
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                correlation_id = _correlation_id(args, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _finish(metric_name, start_time, correlation_id, e)
                    raise
                _finish(metric_name, start_time, correlation_id)
                return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            correlation_id = _correlation_id(args, kwargs)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _finish(metric_name, start_time, correlation_id, e)
                raise
            _finish(metric_name, start_time, correlation_id)
            return result
        return sync_wrapper

    return decorator
