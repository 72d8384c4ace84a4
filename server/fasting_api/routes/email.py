"""Email API routes."""
import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException

from fasting_sync.identifiers import is_valid_email

from ..config import get_settings
from ..database import KeyValueStore, get_kv_store
from ..models.email import SendLinksRequest, SendLinksResponse
from ..services.email_service import EmailService, get_email_service
from ..services.session_search import find_sessions_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email", tags=["Email"])


@router.post("/send-links", response_model=SendLinksResponse)
async def send_session_links(
    request: SendLinksRequest,
    store: KeyValueStore = Depends(get_kv_store),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Email the editor and read-only links of every session owned by an address.

    Lets an owner recover their edit URLs on a new device.
    """
    email = request.email
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    try:
        sessions = find_sessions_by_email(store, email, get_settings().scan_batch_size)
    except sqlite3.Error as e:
        logger.error(f"[EMAIL] Error scanning sessions for {email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to send email")

    if not sessions:
        raise HTTPException(status_code=404, detail="No sessions found")

    if not email_service.send_session_links(email, sessions):
        raise HTTPException(status_code=500, detail="Failed to send email")

    return SendLinksResponse(
        session_count=len(sessions),
        message=f"Sent {len(sessions)} session link(s) to {email}",
    )
