"""API v1 main router.

Aggregates all v1 API routers into a single router for inclusion in the app.
The catalog proxy is mounted separately under its configurable prefix.
"""

from fastapi import APIRouter

from moviefinder.api.v1.analytics import router as analytics_router

router = APIRouter()

router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
