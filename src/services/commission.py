"""
Commission rate resolution for referrers.

Rules, first match wins:
- Affiliate bonded to a preparer with a tiered structure: tier 1 rate
- Tax preparer: 0 (tracked for visibility, no referral commission)
- Anyone else, or no usable bonding: platform default rate

The rate is resolved once, when the lead is attributed, and locked onto
the lead so later changes to a bonding do not reprice old leads.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.models import AffiliateBonding, ReferrerProfile, ReferrerRole
from src.schemas.attribution import CommissionRateInfo, CommissionSource
from src.services.referrers import find_active_referrer, get_active_referrer_by_id

logger = logging.getLogger(__name__)

PREPARER_RATE = Decimal("0")


def default_rate() -> CommissionRateInfo:
    return CommissionRateInfo(
        rate=settings.default_commission_rate,
        source=CommissionSource.DEFAULT,
    )


def tier1_rate(structure: Optional[dict]) -> Optional[Decimal]:
    """Extract the tier 1 rate from a bonding's commission structure.

    Structure: {"tier1": {"count": 5, "rate": 50}, "tier2": {...}}

    Only tier 1 is used. Escalation by referral count is not implemented.

    Returns:
        Positive tier 1 rate as a Decimal, or None if not defined
    """
    if not isinstance(structure, dict):
        return None

    tier = structure.get("tier1")
    if not isinstance(tier, dict):
        return None

    raw = tier.get("rate")
    if raw is None or isinstance(raw, bool):
        return None

    try:
        rate = Decimal(str(raw))
    except InvalidOperation:
        return None

    if not rate.is_finite() or rate <= 0:
        return None
    return rate


async def _bonded_affiliate_rate(
    db: AsyncSession,
    profile: ReferrerProfile,
) -> Optional[Decimal]:
    if not profile.affiliate_bonded_to_preparer_id:
        return None

    result = await db.execute(
        select(AffiliateBonding.commission_structure)
        .where(
            AffiliateBonding.affiliate_id == profile.id,
            AffiliateBonding.preparer_id == profile.affiliate_bonded_to_preparer_id,
            AffiliateBonding.is_active == True,
        )
        .order_by(AffiliateBonding.id.desc())
        .limit(1)
    )
    return tier1_rate(result.scalar_one_or_none())


async def resolve_commission_rate(
    db: AsyncSession,
    referrer_username: str,
    referrer_type: Optional[str] = None,
    referrer_id: Optional[int] = None,
) -> CommissionRateInfo:
    """Determine the commission rate for a referrer.

    The role on the stored profile decides the rule. `referrer_type` is
    only used for logging when the profile cannot be found.

    When the strategy already knows which profile it matched, pass its
    `referrer_id`: the same string can sit in different identifier columns
    of two profiles, and only the id says which one was credited.

    Never raises: a missing profile or a store error gives the default rate.

    Args:
        db: Database session
        referrer_username: Username or tracking code of the referrer
        referrer_type: Role reported by the attribution strategy
        referrer_id: ID of the matched profile, if known

    Returns:
        Rate and the rule that produced it
    """
    try:
        if referrer_id is not None:
            profile = await get_active_referrer_by_id(db, referrer_id)
        else:
            profile = await find_active_referrer(db, referrer_username)
        if profile is None:
            logger.warning(
                f"Commission rate: referrer '{referrer_username}' ({referrer_type}) "
                f"not found, using default"
            )
            return default_rate()

        if profile.role == ReferrerRole.AFFILIATE:
            rate = await _bonded_affiliate_rate(db, profile)
            if rate is not None:
                return CommissionRateInfo(
                    rate=rate,
                    source=CommissionSource.AFFILIATE_BONDING,
                )

        if profile.role == ReferrerRole.TAX_PREPARER:
            return CommissionRateInfo(
                rate=PREPARER_RATE,
                source=CommissionSource.PREPARER_BONUS,
            )
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error getting commission rate for '{referrer_username}': {e}")

    return default_rate()
