"""
First-touch attribution cookie.

The cookie is set by the edge layer the first time a visitor lands on a
tracked link, and holds a signed JWT naming the referrer. It is passed
explicitly into attribution; nothing here reads ambient request state.

A missing, malformed, expired or forged token, or one naming a referrer
that no longer exists, is treated as "no cookie" and never as an error.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.models import AttributionMethod
from src.schemas.attribution import AttributionMatch
from src.services.referrers import find_active_referrer

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_TYPE = "attribution"
COOKIE_CONFIDENCE = 100


def issue_attribution_token(
    referrer_username: str,
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    """
    Create a signed first-touch attribution token.

    Args:
        referrer_username: Username or tracking code of the referrer
        expires_delta: Optional custom lifetime, defaults to the cookie max age
        issued_at: Time of the first touch, defaults to now

    Returns:
        Encoded JWT token string
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.attribution_cookie_max_age_days)

    payload = {
        "sub": referrer_username,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_attribution_token(token: Optional[str]) -> Optional[str]:
    """
    Verify a first-touch token and return the referrer username in it.

    Returns None if the token is missing, invalid, expired or not an
    attribution token.
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError as e:
        logger.debug(f"Attribution cookie rejected: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None

    username = payload.get("sub")
    if not username or not isinstance(username, str):
        return None

    return username


async def read_cookie_attribution(
    db: AsyncSession,
    token: Optional[str],
) -> Optional[AttributionMatch]:
    """
    Resolve the referrer named in a first-touch cookie.

    The username must belong to an active referrer profile.

    Returns:
        Cookie match with confidence 100, or None
    """
    username = decode_attribution_token(token)
    if username is None:
        return None

    profile = await find_active_referrer(db, username)
    if profile is None:
        logger.warning(f"Attribution cookie has invalid referrer username: {username}")
        return None

    return AttributionMatch(
        referrer_username=username,
        referrer_id=profile.id,
        referrer_type=profile.role.value,
        method=AttributionMethod.COOKIE,
        confidence=COOKIE_CONFIDENCE,
    )
