"""Business logic services."""

from src.services.attribution import resolve_attribution
from src.services.click_recorder import record_link_click
from src.services.commission import resolve_commission_rate
from src.services.cookie_reader import issue_attribution_token, read_cookie_attribution
from src.services.identity_matcher import match_by_email, match_by_phone
from src.services.lead_attribution import (
    get_referrer_attribution_stats,
    persist_lead_attribution,
    persist_tax_intake_attribution,
)
from src.services.leads import create_attributed_lead

__all__ = [
    "resolve_attribution",
    "record_link_click",
    "resolve_commission_rate",
    "issue_attribution_token",
    "read_cookie_attribution",
    "match_by_email",
    "match_by_phone",
    "persist_lead_attribution",
    "persist_tax_intake_attribution",
    "get_referrer_attribution_stats",
    "create_attributed_lead",
]
