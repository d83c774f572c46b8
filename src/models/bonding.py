"""
AffiliateBonding model for affiliate-to-preparer relationships.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import BaseModel, utcnow
from src.models.profile import ReferrerProfile


class AffiliateBonding(BaseModel):
    """
    A persistent bond between an affiliate and a tax preparer.

    The preparer sets a tiered commission structure for the affiliate:
        {"tier1": {"count": 5, "rate": 50}, "tier2": {"count": 15, "rate": 75}}
    `count` is the referral count that unlocks the tier, `rate` is the
    flat commission per completed return.
    """

    __tablename__ = "affiliate_bondings"

    affiliate_id: Mapped[int] = mapped_column(
        ForeignKey("referrer_profiles.id"),
        nullable=False,
        index=True,
    )
    preparer_id: Mapped[int] = mapped_column(
        ForeignKey("referrer_profiles.id"),
        nullable=False,
        index=True,
    )
    commission_structure: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Tiered commission structure set by the preparer",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    bonded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    # Relationships
    affiliate: Mapped["ReferrerProfile"] = relationship(
        "ReferrerProfile",
        foreign_keys=[affiliate_id],
    )
    preparer: Mapped["ReferrerProfile"] = relationship(
        "ReferrerProfile",
        foreign_keys=[preparer_id],
    )

    def __repr__(self) -> str:
        return (
            f"<AffiliateBonding(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"preparer_id={self.preparer_id}, is_active={self.is_active})>"
        )
