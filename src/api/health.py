"""
Health check endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db import get_db
from src.models import LinkClick

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """Basic health check. Returns 200 if the service is running."""
    return {"status": "healthy", "service": "referral-attribution"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check against the attribution tables.

    Attribution degrades to "direct" while the store is down, so this is
    the place where an outage actually becomes visible.
    """
    try:
        await db.execute(select(LinkClick.id).limit(1))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Readiness check failed: {e}")
        return {
            "status": "not_ready",
            "database": f"error: {e}",
        }

    return {
        "status": "ready",
        "database": "connected",
        "attribution_window_days": settings.attribution_window_days,
    }


@router.get("/live")
async def liveness_check():
    """
    Liveness check.

    Used by the orchestrator to determine if the container should be restarted.
    """
    return {"status": "alive"}
