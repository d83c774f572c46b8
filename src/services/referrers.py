"""
Referrer profile lookup.

A username on a cookie or a lead may be any of a profile's three
identifiers. Only active profiles can receive credit.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import ReferrerProfile


def _identifier_rank(profile: ReferrerProfile, username: str) -> int:
    if profile.short_link_username == username:
        return 0
    if profile.custom_tracking_code == username:
        return 1
    return 2


async def find_active_referrer(
    db: AsyncSession,
    username: Optional[str],
) -> Optional[ReferrerProfile]:
    """
    Find the active profile a username belongs to.

    Matches short-link username, custom tracking code or tracking code.
    If the same string is claimed by several active profiles in different
    columns, the short-link username wins, then the custom code.

    Returns:
        The profile, or None if no active profile carries the username
    """
    if not username:
        return None

    result = await db.execute(
        select(ReferrerProfile).where(
            ReferrerProfile.is_active == True,
            or_(
                ReferrerProfile.short_link_username == username,
                ReferrerProfile.custom_tracking_code == username,
                ReferrerProfile.tracking_code == username,
            ),
        )
    )
    profiles = result.scalars().all()

    if not profiles:
        return None

    return min(profiles, key=lambda p: (_identifier_rank(p, username), p.id))


async def get_active_referrer_by_id(
    db: AsyncSession,
    profile_id: int,
) -> Optional[ReferrerProfile]:
    """Load a profile by id, or None if it is missing or inactive."""
    profile = await db.get(ReferrerProfile, profile_id)
    if profile is None or not profile.is_active:
        return None
    return profile
