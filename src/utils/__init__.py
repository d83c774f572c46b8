"""Utility functions."""

from src.utils.identity import normalize_email, normalize_phone, phone_match_key
from src.utils.request import get_client_ip

__all__ = [
    "normalize_email",
    "normalize_phone",
    "phone_match_key",
    "get_client_ip",
]
