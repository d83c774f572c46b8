"""
Lead attribution.

Decides which referrer gets credit for a lead. Strategies run in strict
priority order and the first one that finds a referrer wins:

1. First-touch cookie (confidence 100)
2. Email match against recent link clicks (confidence 90)
3. Phone match against recent link clicks (confidence 85)
4. Direct, no referrer (confidence 100)

Attribution is best-effort and must never block lead creation. Any
unexpected error produces a direct attribution with confidence 0 and a
DEGRADED status, so callers can tell "nobody referred this lead" apart from
"we could not find out".

Call resolve_attribution before adding anything else to the session: the
fallback path rolls the session back.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.models import AttributionMethod
from src.schemas.attribution import (
    AttributionData,
    AttributionMatch,
    AttributionOutcome,
    ResolutionStatus,
)
from src.services.commission import resolve_commission_rate
from src.services.cookie_reader import read_cookie_attribution
from src.services.identity_matcher import match_by_email, match_by_phone

logger = logging.getLogger(__name__)

DIRECT_CONFIDENCE = 100
DEGRADED_CONFIDENCE = 0


def direct_attribution(confidence: int = DIRECT_CONFIDENCE) -> AttributionData:
    """Attribution for a lead nobody referred."""
    return AttributionData(
        referrer_username=None,
        referrer_type=None,
        method=AttributionMethod.DIRECT,
        confidence=confidence,
        commission_rate=Decimal("0"),
    )


async def _find_referrer(
    db: AsyncSession,
    cookie_token: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    now: Optional[datetime],
) -> Optional[AttributionMatch]:
    match = await read_cookie_attribution(db, cookie_token)
    if match:
        return match

    if email:
        match = await match_by_email(db, email, now=now)
        if match:
            return match

    if phone:
        match = await match_by_phone(db, phone, now=now)
        if match:
            return match

    return None


async def resolve_attribution(
    db: AsyncSession,
    cookie_token: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AttributionOutcome:
    """
    Determine attribution for a lead.

    Args:
        db: Database session
        cookie_token: First-touch attribution cookie value, if the request had one
        email: Lead's email, for cross-device matching
        phone: Lead's phone, for cross-device matching
        now: Reference time for the attribution window, defaults to now

    Returns:
        RESOLVED outcome with the winning strategy (or direct), or a
        DEGRADED direct outcome if something went wrong
    """
    try:
        match = await _find_referrer(db, cookie_token, email, phone, now)

        if match is None:
            return AttributionOutcome(
                status=ResolutionStatus.RESOLVED,
                attribution=direct_attribution(),
            )

        rate = await resolve_commission_rate(
            db,
            match.referrer_username,
            match.referrer_type,
            referrer_id=match.referrer_id,
        )
        logger.debug(
            f"Attributed to {match.referrer_username} via {match.method.value} "
            f"(rate={rate.rate}, source={rate.source.value})"
        )
        return AttributionOutcome(
            status=ResolutionStatus.RESOLVED,
            attribution=AttributionData.from_match(match, rate),
        )

    except Exception as e:
        logger.error(f"Error determining attribution: {e}")
        try:
            await db.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback after attribution error failed: {rollback_error}")

        return AttributionOutcome(
            status=ResolutionStatus.DEGRADED,
            attribution=direct_attribution(confidence=DEGRADED_CONFIDENCE),
            error="Failed to determine attribution",
        )
