"""
Database models for the attribution service.

All models are exported here for convenient imports:
    from src.models import Lead, LinkClick, ReferrerProfile, etc.
"""

from src.models.base import Base, BaseModel, TimestampMixin, utcnow
from src.models.bonding import AffiliateBonding
from src.models.lead import AttributionMethod, Lead, TaxIntakeLead
from src.models.link import LinkClick, MarketingLink
from src.models.profile import ReferrerProfile, ReferrerRole

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    "utcnow",
    # Referrers
    "ReferrerProfile",
    "ReferrerRole",
    "AffiliateBonding",
    # Links
    "MarketingLink",
    "LinkClick",
    # Leads
    "Lead",
    "TaxIntakeLead",
    "AttributionMethod",
]
