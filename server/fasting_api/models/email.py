"""Email link request and response models."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class SendLinksRequest(BaseModel):
    """Body of POST /email/send-links. Email is checked by the route for a 400."""

    email: Optional[str] = None


class SendLinksResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    session_count: int = Field(alias="sessionCount")
    message: str
