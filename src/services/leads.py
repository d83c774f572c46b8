"""
Lead intake with automatic attribution.

This is the only place a lead's attribution gets locked during normal
operation: resolve first, create the lead, then lock. A degraded
attribution still produces a lead.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.models import Lead
from src.schemas.attribution import AttributionOutcome, PersistOutcome
from src.schemas.lead import LeadCreate
from src.services.attribution import resolve_attribution
from src.services.lead_attribution import persist_lead_attribution

logger = logging.getLogger(__name__)


def _new_lead(data: LeadCreate) -> Lead:
    return Lead(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone=data.phone,
    )


async def create_attributed_lead(
    db: AsyncSession,
    data: LeadCreate,
    cookie_token: Optional[str] = None,
) -> Tuple[Lead, AttributionOutcome, PersistOutcome]:
    """
    Create a lead and lock its attribution.

    Args:
        db: Database session
        data: Lead contact details
        cookie_token: First-touch cookie, overridden by data.cookie_token

    Returns:
        The refreshed lead, the attribution outcome and the persist outcome
    """
    outcome = await resolve_attribution(
        db,
        cookie_token=data.cookie_token or cookie_token,
        email=data.email,
        phone=data.phone,
    )

    lead = _new_lead(data)
    db.add(lead)
    await db.flush()

    persisted = await persist_lead_attribution(db, lead.id, outcome.attribution)
    if persisted == PersistOutcome.FAILED:
        # The failed write rolled back the session, including the new lead
        logger.warning("Attribution write failed, saving lead without attribution")
        lead = _new_lead(data)
        db.add(lead)
        await db.flush()

    await db.refresh(lead)

    logger.info(
        f"Lead {lead.id} created "
        f"(attribution={outcome.status.value}, lock={persisted.value})"
    )
    return lead, outcome, persisted
