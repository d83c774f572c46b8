"""
Referral Attribution Service

FastAPI application that decides which referrer gets credit for a lead:
- Link click tracking with email/phone hints
- Cookie, email and phone attribution strategies
- Commission rate locking on leads
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from src.api import api_router
from src.config import settings
from src.db import engine, get_db_context
from src.models import ReferrerProfile

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Checks the attribution store is reachable

    An unreachable store does not stop startup: attribution falls back to
    degraded "direct" results until it comes back.
    """
    logger.info(
        f"Starting attribution service "
        f"(window={settings.attribution_window_days}d, "
        f"default rate={settings.default_commission_rate})"
    )

    try:
        async with get_db_context() as db:
            active = await db.scalar(
                select(func.count(ReferrerProfile.id)).where(
                    ReferrerProfile.is_active == True
                )
            )
        logger.info(f"Attribution store reachable, {active} active referrers")
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Attribution store unreachable at startup: {e}")

    yield

    logger.info("Shutting down attribution service...")
    await engine.dispose()


app = FastAPI(
    title="Referral Attribution",
    description="Lead attribution and commission rate locking",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

app.include_router(api_router)  # /api/* endpoints


@app.get("/", include_in_schema=False)
async def root():
    """Redirect root to the API docs in development, health otherwise."""
    if settings.is_production:
        return RedirectResponse(url="/api/health", status_code=302)
    return RedirectResponse(url="/docs", status_code=302)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
