"""Health check endpoint.

Reports liveness and whether deals come from HubSpot or the built-in sample
dataset. No external dependencies are checked.
"""

from __future__ import annotations

from fastapi import APIRouter

from src.deal_review.config import get_settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check plus the data source in use."""
    settings = get_settings()
    return {
        "status": "ok",
        "dummyData": settings.use_sample_data,
        "environment": settings.ENVIRONMENT.value,
    }
