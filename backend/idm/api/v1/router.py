"""
Redbard IDM - API v1 Router
"""

from fastapi import APIRouter
from idm.api.v1.endpoints import users, metrics
from idm.core.config import settings

api_router = APIRouter()

api_router.include_router(users.router, tags=["users"])

# Public endpoints (no auth required)
if settings.PROMETHEUS_ENABLED:
    api_router.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])
