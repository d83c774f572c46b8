"""Lead attribution API endpoints.

- POST /leads                          — Create a lead with automatic attribution
- POST /leads/{lead_id}/attribution    — Lock a resolved attribution onto a lead
- POST /tax-intakes/{intake_id}/attribution — Record attribution on a tax intake
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db import get_db
from src.schemas.attribution import AttributionData, PersistOutcome
from src.schemas.lead import LeadCreate, LeadResponse, PersistAttributionResponse
from src.services.lead_attribution import (
    persist_lead_attribution,
    persist_tax_intake_attribution,
)
from src.services.leads import create_attributed_lead

router = APIRouter(tags=["Leads"])


@router.post(
    "/leads",
    response_model=LeadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_lead(
    request: Request,
    data: LeadCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a lead and lock its attribution.

    Succeeds even if attribution could not be determined.
    """
    lead, outcome, persisted = await create_attributed_lead(
        db,
        data,
        cookie_token=request.cookies.get(settings.attribution_cookie_name),
    )

    response = LeadResponse.model_validate(lead)
    response.attribution_status = outcome.status
    response.persist_outcome = persisted
    return response


@router.post(
    "/leads/{lead_id}/attribution",
    response_model=PersistAttributionResponse,
)
async def lock_lead_attribution(
    lead_id: int,
    data: AttributionData,
    db: AsyncSession = Depends(get_db),
):
    """
    Lock attribution onto an existing lead.

    Write-once: a lead whose commission rate is already locked answers 409
    and keeps its stored values.
    """
    outcome = await persist_lead_attribution(db, lead_id, data)

    if outcome == PersistOutcome.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found",
        )

    if outcome == PersistOutcome.ALREADY_LOCKED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Lead attribution is already locked",
        )

    if outcome == PersistOutcome.FAILED:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not save attribution",
        )

    return PersistAttributionResponse(id=lead_id, outcome=outcome)


@router.post(
    "/tax-intakes/{intake_id}/attribution",
    response_model=PersistAttributionResponse,
)
async def record_tax_intake_attribution(
    intake_id: int,
    data: AttributionData,
    db: AsyncSession = Depends(get_db),
):
    """Record referrer and attribution method on a tax intake."""
    outcome = await persist_tax_intake_attribution(db, intake_id, data)

    if outcome == PersistOutcome.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tax intake not found",
        )

    if outcome == PersistOutcome.FAILED:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not save attribution",
        )

    return PersistAttributionResponse(id=intake_id, outcome=outcome)
