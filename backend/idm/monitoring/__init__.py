"""
Redbard IDM - Monitoring Package
"""

from idm.monitoring.metrics import (
    MetricsCollector,
    get_metrics,
    profile,
)

__all__ = [
    "MetricsCollector",
    "get_metrics",
    "profile",
]
