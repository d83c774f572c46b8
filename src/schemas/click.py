"""Link click schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class ClickMetadata(BaseModel):
    """Request metadata and identity hints captured with a click."""

    ip: Optional[str] = Field(None, max_length=45)
    user_agent: Optional[str] = Field(None, max_length=2000)
    referrer: Optional[str] = Field(None, max_length=2000)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class ClickCreate(ClickMetadata):
    """Body of POST /clicks."""

    link_id: int = Field(..., gt=0)
