"""
Redbard IDM - Prometheus Metrics

Prometheus metrics collection and export, and the operation profiler
"""

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST
)
from functools import wraps
import time
from typing import Callable, Tuple
from loguru import logger

# Create custom registry
registry = CollectorRegistry()

# ============================================================================
# COUNTERS (monotonically increasing)
# ============================================================================

auth_signin_attempts_total = Counter(
    'idm_auth_signin_attempts_total',
    'Total number of sign-in attempts',
    ['success'],
    registry=registry
)

users_created_total = Counter(
    'idm_users_created_total',
    'Total number of users created',
    ['source'],  # admin, signup
    registry=registry
)

# ============================================================================
# HISTOGRAMS (distributions)
# ============================================================================

operation_duration_seconds = Histogram(
    'idm_operation_duration_seconds',
    'Endpoint operation duration in seconds',
    ['operation', 'outcome'],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=registry
)

# ============================================================================
# INFO (static information)
# ============================================================================

app_info = Info(
    'idm_app',
    'Application information',
    registry=registry
)

# ============================================================================
# METRIC UPDATE HELPERS
# ============================================================================

class MetricsCollector:
    """Helper class for updating metrics"""

    @staticmethod
    def record_operation(operation: str, outcome: str, duration: float):
        operation_duration_seconds.labels(operation=operation, outcome=outcome).observe(duration)
        logger.debug(f"📊 Profile: {operation} {outcome} {duration * 1000:.1f}ms")

    @staticmethod
    def record_signin_attempt(success: bool):
        auth_signin_attempts_total.labels(success=str(success).lower()).inc()

    @staticmethod
    def record_user_created(source: str):
        users_created_total.labels(source=source).inc()

    @staticmethod
    def set_app_info(version: str, environment: str):
        app_info.info({'version': version, 'environment': environment})


def get_metrics() -> Tuple[bytes, str]:
    """Render the registry in Prometheus text exposition format"""
    return generate_latest(registry), CONTENT_TYPE_LATEST


# ============================================================================
# DECORATORS FOR AUTOMATIC METRIC COLLECTION
# ============================================================================

def profile(operation: str):
    """
    Decorator timing an async endpoint operation

    Usage:
        @profile("UserController#getAllUsers")
        async def get_all_users(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                MetricsCollector.record_operation(operation, "error", time.perf_counter() - start_time)
                raise
            MetricsCollector.record_operation(operation, "success", time.perf_counter() - start_time)
            return result

        return wrapper
    return decorator
