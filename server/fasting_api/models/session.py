"""Response models for the session store routes."""
from pydantic import BaseModel
from typing import Any


class SaveSessionResponse(BaseModel):
    """Result of an upsert."""

    success: bool = True
    id: str
    revision: int


class DeleteSessionResponse(BaseModel):
    success: bool = True


class SessionsByEmailResponse(BaseModel):
    """Sessions owned by one email address, as stored (camelCase JSON)."""

    sessions: list[dict[str, Any]]
