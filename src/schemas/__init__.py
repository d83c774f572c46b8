"""Pydantic schemas for request/response validation."""

from src.schemas.attribution import (
    AttributionData,
    AttributionMatch,
    AttributionMethodCounts,
    AttributionOutcome,
    CommissionRateInfo,
    CommissionSource,
    PersistOutcome,
    ReferrerAttributionStats,
    ResolutionStatus,
    ResolveAttributionRequest,
    ResolveAttributionResponse,
)
from src.schemas.click import ClickCreate, ClickMetadata
from src.schemas.lead import LeadCreate, LeadResponse, PersistAttributionResponse

__all__ = [
    # Attribution
    "AttributionData",
    "AttributionMatch",
    "AttributionMethodCounts",
    "AttributionOutcome",
    "CommissionRateInfo",
    "CommissionSource",
    "PersistOutcome",
    "ReferrerAttributionStats",
    "ResolutionStatus",
    "ResolveAttributionRequest",
    "ResolveAttributionResponse",
    # Clicks
    "ClickCreate",
    "ClickMetadata",
    # Leads
    "LeadCreate",
    "LeadResponse",
    "PersistAttributionResponse",
]
