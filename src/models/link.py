"""
Marketing link and link click models.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, BaseModel, utcnow

if TYPE_CHECKING:
    from src.models.profile import ReferrerProfile


class MarketingLink(BaseModel):
    """
    A tracked referral link owned by a referrer profile.

    `clicks` counts every visit, `unique_clicks` only visits from an IP
    that has not hit this link recently.
    """

    __tablename__ = "marketing_links"

    code: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    title: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    destination_url: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    creator_id: Mapped[int] = mapped_column(
        ForeignKey("referrer_profiles.id"),
        nullable=False,
        index=True,
    )
    creator_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Role of the creator when the link was made",
    )

    clicks: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )
    unique_clicks: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )

    # Relationships
    creator: Mapped["ReferrerProfile"] = relationship(
        "ReferrerProfile",
        back_populates="links",
    )
    click_events: Mapped[List["LinkClick"]] = relationship(
        "LinkClick",
        back_populates="link",
    )

    def __repr__(self) -> str:
        return f"<MarketingLink(id={self.id}, code='{self.code}', clicks={self.clicks})>"


class LinkClick(Base):
    """
    A single observed click on a marketing link.

    Append-only. Rows are read by the cross-device matcher and never
    updated or deleted. Email and phone hints are stored normalized
    (lowercase email, digits-only phone).
    """

    __tablename__ = "link_clicks"

    id: Mapped[int] = mapped_column(primary_key=True)
    link_id: Mapped[int] = mapped_column(
        ForeignKey("marketing_links.id"),
        nullable=False,
        index=True,
    )
    clicked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    # Request metadata
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
        comment="IPv4 or IPv6 address",
    )
    user_agent: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    referrer: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Raw HTTP referrer of the visit",
    )
    city: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    state: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # Identity hints for cross-device matching
    user_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    user_phone: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        index=True,
    )

    # Relationships
    link: Mapped["MarketingLink"] = relationship(
        "MarketingLink",
        back_populates="click_events",
    )

    def __repr__(self) -> str:
        return f"<LinkClick(id={self.id}, link_id={self.link_id}, clicked_at={self.clicked_at})>"
