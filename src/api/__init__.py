"""API router aggregation."""

from fastapi import APIRouter

from src.api.attribution import router as attribution_router
from src.api.clicks import router as clicks_router
from src.api.health import router as health_router
from src.api.leads import router as leads_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(attribution_router)
api_router.include_router(clicks_router)
api_router.include_router(leads_router)

__all__ = ["api_router"]
