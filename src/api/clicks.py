"""Link click tracking endpoint."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.schemas.click import ClickCreate, ClickMetadata
from src.services.click_recorder import record_link_click
from src.utils.request import get_client_ip

router = APIRouter(prefix="/clicks", tags=["Clicks"])


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def track_click(
    request: Request,
    data: ClickCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Record a click on a tracked link.

    Always accepted: click tracking never blocks the redirect, so unknown
    links and store failures are only logged.
    """
    metadata = ClickMetadata.model_validate(data.model_dump(exclude={"link_id"}))
    if not metadata.ip:
        metadata.ip = get_client_ip(request)
    if not metadata.user_agent:
        metadata.user_agent = request.headers.get("User-Agent")

    await record_link_click(db, data.link_id, metadata)

    return {"status": "accepted"}
