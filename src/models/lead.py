"""
Lead models that receive attribution.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import BaseModel


class AttributionMethod(str, Enum):
    """How a lead's referrer was determined."""
    COOKIE = "cookie"
    EMAIL_MATCH = "email_match"
    PHONE_MATCH = "phone_match"
    DIRECT = "direct"


class Lead(BaseModel):
    """
    A captured lead.

    The attribution columns are written once, when the lead is created.
    `commission_rate_locked_at` marks the rate as final: the persister
    refuses to touch a lead where it is already set.
    """

    __tablename__ = "leads"

    first_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    last_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # Attribution
    referrer_username: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    referrer_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    attribution_method: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        index=True,
    )
    attribution_confidence: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Fixed score per attribution method (0-100)",
    )
    commission_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Commission per completed return, locked at creation",
    )
    commission_rate_locked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def is_attribution_locked(self) -> bool:
        return self.commission_rate_locked_at is not None

    def __repr__(self) -> str:
        return (
            f"<Lead(id={self.id}, referrer='{self.referrer_username}', "
            f"method={self.attribution_method})>"
        )


class TaxIntakeLead(BaseModel):
    """
    A tax intake form submission.

    Intake forms record who referred them but carry no commission.
    """

    __tablename__ = "tax_intake_leads"

    first_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    last_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    referrer_username: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    referrer_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    attribution_method: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<TaxIntakeLead(id={self.id}, referrer='{self.referrer_username}')>"
