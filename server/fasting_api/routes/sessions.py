"""Session store API routes."""
import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from fasting_sync.identifiers import is_valid_email
from fasting_sync.models import FastingSession

from ..config import get_settings
from ..database import KeyValueStore, get_kv_store
from ..models.session import DeleteSessionResponse, SaveSessionResponse, SessionsByEmailResponse
from ..services.session_search import find_sessions_by_email, session_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


# Declared before /{session_id} so "by-email" is not taken as an id
@router.get("/by-email", response_model=SessionsByEmailResponse)
async def get_sessions_by_email(
    email: str | None = Query(default=None, description="Owner email address"),
    store: KeyValueStore = Depends(get_kv_store),
):
    """
    Find every session owned by an email address (case-insensitive).

    Scans all stored sessions; there is no email index.
    """
    if not email:
        raise HTTPException(status_code=400, detail="Email parameter is required")
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    try:
        sessions = find_sessions_by_email(store, email, get_settings().scan_batch_size)
    except sqlite3.Error as e:
        logger.error(f"[SESSIONS] Error fetching sessions by email: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch sessions")

    if not sessions:
        raise HTTPException(status_code=404, detail="No sessions found for this email")
    return SessionsByEmailResponse(sessions=sessions)


@router.get("/{session_id}")
async def get_session(session_id: str, store: KeyValueStore = Depends(get_kv_store)):
    """Load one session record."""
    try:
        record = store.get(session_key(session_id))
    except sqlite3.Error as e:
        logger.error(f"[SESSIONS] Error loading session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load session")

    if record is None:
        raise HTTPException(status_code=404, detail="Session not found")

    try:
        return FastingSession.from_wire(record).to_wire()
    except ValidationError as e:
        logger.error(f"[SESSIONS] Stored session {session_id} is unreadable: {e}")
        raise HTTPException(status_code=500, detail="Failed to load session")


@router.post("/{session_id}", response_model=SaveSessionResponse)
async def save_session(
    session_id: str,
    session: FastingSession,
    store: KeyValueStore = Depends(get_kv_store),
):
    """
    Replace the stored record for a session (no partial update).

    The path id wins over the body id. Each write bumps the revision and
    resets the record's expiry.
    """
    settings = get_settings()
    key = session_key(session_id)

    try:
        existing = store.get(key)
        previous = existing.get("revision", 0) if isinstance(existing, dict) else 0
        revision = int(previous or 0) + 1

        record = session.model_copy(update={"id": session_id, "revision": revision}).to_wire()
        store.set(key, record, ex=settings.session_ttl_seconds)
    except sqlite3.Error as e:
        logger.error(f"[SESSIONS] Error saving session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save session")

    logger.info(f"[SESSIONS] Saved {session_id} at revision {revision}")
    return SaveSessionResponse(id=session_id, revision=revision)


@router.delete("/{session_id}", response_model=DeleteSessionResponse)
async def delete_session(session_id: str, store: KeyValueStore = Depends(get_kv_store)):
    """Remove a session record. Deleting a missing session still succeeds."""
    try:
        store.delete(session_key(session_id))
    except sqlite3.Error as e:
        logger.error(f"[SESSIONS] Error deleting session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete session")

    logger.info(f"[SESSIONS] Deleted {session_id}")
    return DeleteSessionResponse()
