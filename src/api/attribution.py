"""Attribution API endpoints.

- POST /attribution/resolve                     — Resolve attribution for a prospective lead
- GET  /attribution/referrers/{username}/stats  — Attribution breakdown for a referrer
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db import get_db
from src.schemas.attribution import (
    ReferrerAttributionStats,
    ResolveAttributionRequest,
    ResolveAttributionResponse,
)
from src.services.attribution import resolve_attribution
from src.services.lead_attribution import get_referrer_attribution_stats

router = APIRouter(prefix="/attribution", tags=["Attribution"])


@router.post("/resolve", response_model=ResolveAttributionResponse)
async def resolve(
    request: Request,
    data: ResolveAttributionRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Resolve who gets credit for a lead with this email/phone.

    The first-touch token comes from the body, or from the attribution
    cookie when the body has none. Always answers 200: a store failure
    shows up as status "degraded".
    """
    cookie_token = data.cookie_token or request.cookies.get(
        settings.attribution_cookie_name
    )

    outcome = await resolve_attribution(
        db,
        cookie_token=cookie_token,
        email=data.email,
        phone=data.phone,
    )
    return ResolveAttributionResponse.from_outcome(outcome)


@router.get(
    "/referrers/{username}/stats",
    response_model=ReferrerAttributionStats,
)
async def referrer_stats(
    username: str,
    db: AsyncSession = Depends(get_db),
):
    """Lead counts per attribution method and cross-device rate."""
    stats = await get_referrer_attribution_stats(db, username)

    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Attribution stats unavailable",
        )

    return stats
