"""Lead schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from src.schemas.attribution import PersistOutcome, ResolutionStatus


class LeadCreate(BaseModel):
    """Create a lead; attribution is resolved automatically."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    cookie_token: Optional[str] = Field(None, max_length=2048)


class LeadResponse(BaseModel):
    """Lead with its locked attribution."""

    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    referrer_username: Optional[str] = None
    referrer_type: Optional[str] = None
    attribution_method: Optional[str] = None
    attribution_confidence: Optional[int] = None
    commission_rate: Optional[Decimal] = None
    commission_rate_locked_at: Optional[datetime] = None

    # Outcome of this request's attribution run
    attribution_status: Optional[ResolutionStatus] = None
    persist_outcome: Optional[PersistOutcome] = None

    model_config = {"from_attributes": True}


class PersistAttributionResponse(BaseModel):
    """Result of locking attribution onto a lead or intake."""

    id: int
    outcome: PersistOutcome
