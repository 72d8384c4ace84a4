"""Pydantic models for session store API requests and responses."""
from .session import SaveSessionResponse, DeleteSessionResponse, SessionsByEmailResponse
from .email import SendLinksRequest, SendLinksResponse

__all__ = [
    "SaveSessionResponse",
    "DeleteSessionResponse",
    "SessionsByEmailResponse",
    "SendLinksRequest",
    "SendLinksResponse",
]
