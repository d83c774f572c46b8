"""
Referral link click recording.

Every visit to a tracked link is stored with whatever identity hints the
visitor gave (email/phone), so a lead created later on another device can
still be matched to the link. Recording must never block the redirect:
failures are logged and swallowed.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.models import LinkClick, MarketingLink, utcnow
from src.schemas.click import ClickMetadata
from src.utils.identity import normalize_email, normalize_phone

logger = logging.getLogger(__name__)


async def is_unique_click(
    db: AsyncSession,
    link_id: int,
    ip_address: Optional[str],
    now: datetime,
) -> bool:
    """
    Check whether a click is the first from this IP on this link recently.

    Clicks without an IP are always counted as unique.
    """
    if not ip_address:
        return True

    since = now - timedelta(hours=settings.unique_click_window_hours)
    result = await db.execute(
        select(LinkClick.id)
        .where(
            LinkClick.link_id == link_id,
            LinkClick.ip_address == ip_address,
            LinkClick.clicked_at >= since,
        )
        .limit(1)
    )
    return result.first() is None


async def record_link_click(
    db: AsyncSession,
    link_id: int,
    metadata: ClickMetadata,
    clicked_at: Optional[datetime] = None,
) -> Optional[LinkClick]:
    """
    Record a click on a marketing link and bump its counters.

    Args:
        db: Database session
        link_id: ID of the clicked MarketingLink
        metadata: Request metadata and optional email/phone hints
        clicked_at: Click time, defaults to now

    Returns:
        The stored LinkClick, or None if the link is unknown or the
        store failed
    """
    now = clicked_at or utcnow()

    try:
        link = await db.get(MarketingLink, link_id)
        if not link:
            logger.warning(f"Click on unknown link {link_id} ignored")
            return None

        unique = await is_unique_click(db, link_id, metadata.ip, now)

        click = LinkClick(
            link_id=link_id,
            clicked_at=now,
            ip_address=metadata.ip,
            user_agent=metadata.user_agent,
            referrer=metadata.referrer,
            city=metadata.city,
            state=metadata.state,
            user_email=normalize_email(metadata.email),
            user_phone=normalize_phone(metadata.phone),
        )
        db.add(click)

        counters = {"clicks": MarketingLink.clicks + 1}
        if unique:
            counters["unique_clicks"] = MarketingLink.unique_clicks + 1
        await db.execute(
            update(MarketingLink)
            .where(MarketingLink.id == link_id)
            .values(**counters)
            .execution_options(synchronize_session=False)
        )

        await db.flush()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error recording click for link {link_id}: {e}")
        await db.rollback()
        return None

    logger.info(f"Link click recorded: link={link_id} unique={unique}")
    return click
