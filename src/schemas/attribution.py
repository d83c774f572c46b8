"""
Attribution schemas.

AttributionData is what gets locked onto a lead. AttributionOutcome wraps it
with a status so callers can tell a genuine direct visit from a fallback
caused by a store failure.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.models.lead import AttributionMethod


class CommissionSource(str, Enum):
    """Where a commission rate came from."""
    AFFILIATE_BONDING = "affiliate_bonding"
    PREPARER_BONUS = "preparer_bonus"
    DEFAULT = "default"


class ResolutionStatus(str, Enum):
    """Whether attribution ran normally or fell back after an error."""
    RESOLVED = "resolved"
    DEGRADED = "degraded"


class PersistOutcome(str, Enum):
    """Result of writing attribution onto a lead or tax intake."""
    LOCKED = "locked"
    SAVED = "saved"  # tax intakes, no lock
    ALREADY_LOCKED = "already_locked"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class AttributionMatch(BaseModel):
    """A referrer found by one strategy, before the commission rate is known."""

    referrer_username: str
    referrer_id: Optional[int] = None
    referrer_type: Optional[str] = None
    method: AttributionMethod
    confidence: int = Field(..., ge=0, le=100)


class CommissionRateInfo(BaseModel):
    """Commission rate and the rule that produced it."""

    rate: Decimal
    source: CommissionSource


class AttributionData(BaseModel):
    """Resolved attribution for a single lead."""

    referrer_username: Optional[str] = Field(None, max_length=100)
    referrer_type: Optional[str] = Field(None, max_length=50)
    method: AttributionMethod
    confidence: int = Field(..., ge=0, le=100)
    commission_rate: Optional[Decimal] = Field(None, ge=0)

    @classmethod
    def from_match(cls, match: AttributionMatch, rate: CommissionRateInfo) -> "AttributionData":
        return cls(
            referrer_username=match.referrer_username,
            referrer_type=match.referrer_type,
            method=match.method,
            confidence=match.confidence,
            commission_rate=rate.rate,
        )


class AttributionOutcome(BaseModel):
    """Tagged result of an attribution attempt."""

    status: ResolutionStatus
    attribution: AttributionData
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED


class AttributionMethodCounts(BaseModel):
    """Lead counts per attribution method."""

    cookie: int = 0
    email_match: int = 0
    phone_match: int = 0
    direct: int = 0


class ReferrerAttributionStats(BaseModel):
    """Attribution breakdown for one referrer."""

    referrer_username: str
    total_leads: int
    by_method: AttributionMethodCounts
    cross_device_rate: float = Field(
        0.0,
        description="Share of leads matched by email or phone, in percent",
    )


# ── API bodies ───────────────────────────────────────────


class ResolveAttributionRequest(BaseModel):
    """Request to resolve attribution for a prospective lead."""

    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    cookie_token: Optional[str] = Field(None, max_length=2048)


class ResolveAttributionResponse(BaseModel):
    """Flattened attribution returned by the resolve endpoint."""

    referrer_username: Optional[str]
    referrer_type: Optional[str]
    method: AttributionMethod
    confidence: int
    commission_rate: Decimal
    status: ResolutionStatus

    @classmethod
    def from_outcome(cls, outcome: AttributionOutcome) -> "ResolveAttributionResponse":
        data = outcome.attribution
        return cls(
            referrer_username=data.referrer_username,
            referrer_type=data.referrer_type,
            method=data.method,
            confidence=data.confidence,
            commission_rate=data.commission_rate or Decimal("0"),
            status=outcome.status,
        )
