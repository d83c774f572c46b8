"""
Locking attribution onto leads, and per-referrer attribution analytics.

A lead's commission rate is immutable once locked. The lock is enforced in
the UPDATE itself (`commission_rate_locked_at IS NULL`), so a second call
for the same lead, or two concurrent calls, can only ever lock it once.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import AttributionMethod, Lead, TaxIntakeLead, utcnow
from src.schemas.attribution import (
    AttributionData,
    AttributionMethodCounts,
    PersistOutcome,
    ReferrerAttributionStats,
)

logger = logging.getLogger(__name__)


async def persist_lead_attribution(
    db: AsyncSession,
    lead_id: int,
    attribution: AttributionData,
) -> PersistOutcome:
    """
    Write attribution onto a lead and lock its commission rate.

    Only succeeds if the lead has no locked rate yet. Never raises.

    Args:
        db: Database session
        lead_id: ID of the lead
        attribution: Resolved attribution

    Returns:
        LOCKED on success, ALREADY_LOCKED if the lead was locked before
        (stored values untouched), NOT_FOUND, or FAILED on a store error
    """
    try:
        result = await db.execute(
            update(Lead)
            .where(
                Lead.id == lead_id,
                Lead.commission_rate_locked_at.is_(None),
            )
            .values(
                referrer_username=attribution.referrer_username,
                referrer_type=attribution.referrer_type,
                attribution_method=attribution.method.value,
                attribution_confidence=attribution.confidence,
                commission_rate=attribution.commission_rate or Decimal("0"),
                commission_rate_locked_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            exists = await db.scalar(select(Lead.id).where(Lead.id == lead_id))
            if exists is None:
                logger.warning(f"Cannot save attribution: lead {lead_id} not found")
                return PersistOutcome.NOT_FOUND

            logger.warning(
                f"Lead {lead_id} attribution already locked, "
                f"ignoring {attribution.method.value} for '{attribution.referrer_username}'"
            )
            return PersistOutcome.ALREADY_LOCKED

        await db.flush()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error saving lead attribution for lead {lead_id}: {e}")
        await db.rollback()
        return PersistOutcome.FAILED

    logger.info(
        f"Lead attribution saved: lead={lead_id} "
        f"referrer={attribution.referrer_username} "
        f"rate={attribution.commission_rate} method={attribution.method.value}"
    )
    return PersistOutcome.LOCKED


async def persist_tax_intake_attribution(
    db: AsyncSession,
    intake_id: int,
    attribution: AttributionData,
) -> PersistOutcome:
    """
    Write referrer and method onto a tax intake submission.

    Intakes carry no commission, so there is nothing to lock and a later
    call overwrites an earlier one.

    Returns:
        SAVED, NOT_FOUND, or FAILED on a store error
    """
    try:
        intake = await db.get(TaxIntakeLead, intake_id)
        if not intake:
            logger.warning(f"Cannot save attribution: tax intake {intake_id} not found")
            return PersistOutcome.NOT_FOUND

        intake.referrer_username = attribution.referrer_username
        intake.referrer_type = attribution.referrer_type
        intake.attribution_method = attribution.method.value
        await db.flush()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error saving tax intake attribution for intake {intake_id}: {e}")
        await db.rollback()
        return PersistOutcome.FAILED

    logger.info(
        f"Tax intake attribution saved: intake={intake_id} "
        f"referrer={attribution.referrer_username} method={attribution.method.value}"
    )
    return PersistOutcome.SAVED


async def get_referrer_attribution_stats(
    db: AsyncSession,
    referrer_username: str,
) -> Optional[ReferrerAttributionStats]:
    """
    Break down a referrer's leads by attribution method.

    Cross-device rate is the share of leads matched by email or phone.

    Returns:
        Stats, or None on a store error
    """
    try:
        result = await db.execute(
            select(Lead.attribution_method, func.count(Lead.id))
            .where(Lead.referrer_username == referrer_username)
            .group_by(Lead.attribution_method)
        )
        rows = result.all()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error getting attribution stats for '{referrer_username}': {e}")
        return None

    counts = {method: count for method, count in rows}
    total = sum(counts.values())

    by_method = AttributionMethodCounts(
        cookie=counts.get(AttributionMethod.COOKIE.value, 0),
        email_match=counts.get(AttributionMethod.EMAIL_MATCH.value, 0),
        phone_match=counts.get(AttributionMethod.PHONE_MATCH.value, 0),
        direct=counts.get(AttributionMethod.DIRECT.value, 0),
    )

    cross_device = by_method.email_match + by_method.phone_match
    cross_device_rate = (cross_device / total) * 100 if total > 0 else 0.0

    return ReferrerAttributionStats(
        referrer_username=referrer_username,
        total_leads=total,
        by_method=by_method,
        cross_device_rate=cross_device_rate,
    )
