"""
Redbard IDM - Metrics API Endpoint

Prometheus metrics export
"""

from fastapi import APIRouter, Response

from idm.monitoring.metrics import get_metrics

router = APIRouter()


@router.get("")
async def prometheus_metrics():
    """
    Export Prometheus metrics

    No authentication required (typically scraped by Prometheus)
    """
    metrics_data, content_type = get_metrics()
    return Response(content=metrics_data, media_type=content_type)
