"""
Identity hint normalization for cross-device matching.

Emails and phones captured on link clicks and on leads are normalized the
same way so that matching is a plain equality / containment check in SQL.
Malformed values normalize to None and simply never match.
"""

import re
from typing import Optional

EMAIL_PATTERN = r'^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$'
EMAIL_REGEX = re.compile(EMAIL_PATTERN)

NON_DIGIT_REGEX = re.compile(r'\D')

# Last N digits identify a phone regardless of country code or formatting
PHONE_MATCH_DIGITS = 10


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Lowercase and trim an email address.

    Examples:
        "  Jane.Doe@Example.COM " -> "jane.doe@example.com"
        "not-an-email" -> None
    """
    if not email:
        return None

    value = email.strip().lower()
    if not EMAIL_REGEX.match(value):
        return None
    return value


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Strip everything but digits from a phone number.

    Examples:
        "+1 (555) 123-4567" -> "15551234567"
        "555-12" -> None (too short to identify anyone)
    """
    if not phone:
        return None

    digits = NON_DIGIT_REGEX.sub('', phone)
    if len(digits) < PHONE_MATCH_DIGITS:
        return None
    return digits


def phone_match_key(phone: Optional[str]) -> Optional[str]:
    """Last 10 digits of a phone number, or None if it cannot be matched."""
    digits = normalize_phone(phone)
    if digits is None:
        return None
    return digits[-PHONE_MATCH_DIGITS:]
