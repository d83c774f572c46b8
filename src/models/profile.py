"""
Referrer profile model: anyone who can receive credit for a lead.
"""

from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import BaseModel

if TYPE_CHECKING:
    from src.models.link import MarketingLink


class ReferrerRole(str, Enum):
    """Roles a referrer profile can hold."""
    AFFILIATE = "affiliate"
    TAX_PREPARER = "tax_preparer"
    CLIENT = "client"
    ADMIN = "admin"


class ReferrerProfile(BaseModel):
    """
    A profile capable of receiving attribution credit.

    Credit can be claimed through any of three identifiers:
    - short_link_username: the vanity name used in short links
    - custom_tracking_code: a code chosen by the referrer
    - tracking_code: the system-generated code

    Each identifier is unique within its own column. The username that ends
    up on a lead is `referral_username`.
    """

    __tablename__ = "referrer_profiles"

    display_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    role: Mapped[ReferrerRole] = mapped_column(
        SQLAlchemyEnum(
            ReferrerRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    short_link_username: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=True,
    )
    custom_tracking_code: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=True,
    )
    tracking_code: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=True,
    )

    # Affiliate-to-preparer bonding (affiliates only)
    affiliate_bonded_to_preparer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("referrer_profiles.id"),
        nullable=True,
        comment="Preparer this affiliate is bonded to",
    )

    # Relationships
    links: Mapped[List["MarketingLink"]] = relationship(
        "MarketingLink",
        back_populates="creator",
    )

    @property
    def referral_username(self) -> Optional[str]:
        """Identifier credited on leads, short-link username first."""
        return (
            self.short_link_username
            or self.custom_tracking_code
            or self.tracking_code
        )

    def __repr__(self) -> str:
        return (
            f"<ReferrerProfile(id={self.id}, username='{self.referral_username}', "
            f"role={self.role})>"
        )
