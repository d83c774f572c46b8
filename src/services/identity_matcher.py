"""
Cross-device attribution by email or phone.

A visitor may click a referral link on one device and sign up on another
without the cookie. If they left an email or phone on the click, the most
recent click inside the attribution window carrying the same hint gives the
referrer back, at lower confidence than the cookie.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.models import AttributionMethod, LinkClick, MarketingLink, utcnow
from src.schemas.attribution import AttributionMatch
from src.services.referrers import get_active_referrer_by_id
from src.utils.identity import normalize_email, phone_match_key

logger = logging.getLogger(__name__)

EMAIL_MATCH_CONFIDENCE = 90
PHONE_MATCH_CONFIDENCE = 85  # digit-suffix matching is a weaker signal


def attribution_window_start(now: Optional[datetime] = None) -> datetime:
    """Earliest click time that still counts for cross-device matching."""
    now = now or utcnow()
    return now - timedelta(days=settings.attribution_window_days)


async def _match_latest_click(
    db: AsyncSession,
    hint_clause,
    method: AttributionMethod,
    confidence: int,
    now: Optional[datetime],
) -> Optional[AttributionMatch]:
    result = await db.execute(
        select(MarketingLink.creator_id)
        .join(LinkClick, LinkClick.link_id == MarketingLink.id)
        .where(
            hint_clause,
            LinkClick.clicked_at >= attribution_window_start(now),
        )
        .order_by(LinkClick.clicked_at.desc(), LinkClick.id.desc())
        .limit(1)
    )
    creator_id = result.scalar_one_or_none()
    if creator_id is None:
        return None

    profile = await get_active_referrer_by_id(db, creator_id)
    if profile is None or not profile.referral_username:
        logger.debug(f"Matched click creator {creator_id} has no active username")
        return None

    return AttributionMatch(
        referrer_username=profile.referral_username,
        referrer_id=profile.id,
        referrer_type=profile.role.value,
        method=method,
        confidence=confidence,
    )


async def match_by_email(
    db: AsyncSession,
    email: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[AttributionMatch]:
    """
    Find the referrer of the most recent click left with this email.

    Returns:
        Email match with confidence 90, or None
    """
    normalized = normalize_email(email)
    if normalized is None:
        return None

    return await _match_latest_click(
        db,
        LinkClick.user_email == normalized,
        AttributionMethod.EMAIL_MATCH,
        EMAIL_MATCH_CONFIDENCE,
        now,
    )


async def match_by_phone(
    db: AsyncSession,
    phone: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[AttributionMatch]:
    """
    Find the referrer of the most recent click whose phone ends in the
    same 10 digits.

    Returns:
        Phone match with confidence 85, or None
    """
    key = phone_match_key(phone)
    if key is None:
        return None

    return await _match_latest_click(
        db,
        LinkClick.user_phone.contains(key, autoescape=True),
        AttributionMethod.PHONE_MATCH,
        PHONE_MATCH_CONFIDENCE,
        now,
    )
