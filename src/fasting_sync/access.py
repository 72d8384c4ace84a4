"""Access control for session URLs.

Three route shapes reach a session:

* ``/session/{id}``: legacy, redirect only. The first visitor to an
  untokenized session claims it and is sent to the tokenized editor URL.
* ``/session/{token}/{id}``: the editor, granted when the token matches.
* ``/view/{id}``: read-only, never checks a token.

Token mismatches redirect to the read-only view rather than failing.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import RemoteStoreError
from .identifiers import generate_edit_token, is_valid_session_id, validate_edit_token
from .local_cache import LocalSessionCache, SessionLinkIndex
from .models import FastingSession
from .remote import RemoteSessionStore

logger = logging.getLogger(__name__)

HOME_PATH = "/"


class AccessLevel(str, Enum):
    EDIT = "edit"
    READ_ONLY = "readonly"


@dataclass
class AccessDecision:
    """Outcome of resolving a URL path."""

    level: Optional[AccessLevel] = None
    session: Optional[FastingSession] = None
    redirect_to: Optional[str] = None
    error: Optional[str] = None

    @property
    def can_edit(self) -> bool:
        return self.level is AccessLevel.EDIT


def editor_path(session_id: str, edit_token: str) -> str:
    return f"/session/{edit_token}/{session_id}"


def legacy_path(session_id: str) -> str:
    return f"/session/{session_id}"


def view_path(session_id: str) -> str:
    return f"/view/{session_id}"


class AccessGate:
    """Decides editor vs. read-only access for a URL path."""

    def __init__(
        self,
        remote: RemoteSessionStore,
        cache: LocalSessionCache,
        links: SessionLinkIndex,
    ):
        self.remote = remote
        self.cache = cache
        self.links = links

    async def resolve(self, path: str) -> AccessDecision:
        parts = [p for p in path.split("?", 1)[0].split("/") if p]

        if not parts:
            return AccessDecision()
        if parts[0] == "session" and len(parts) == 2:
            return await self.open_legacy(parts[1])
        if parts[0] == "session" and len(parts) == 3:
            return await self.open_editor(parts[1], parts[2])
        if parts[0] == "view" and len(parts) == 2:
            return await self.open_view(parts[1])

        logger.info(f"[ACCESS] Unknown path {path}, redirecting home")
        return AccessDecision(redirect_to=HOME_PATH)

    async def _load(self, session_id: str) -> Optional[FastingSession]:
        """Remote copy when reachable, else whatever the local cache holds."""
        try:
            session = await self.remote.fetch_session(session_id)
        except RemoteStoreError as e:
            logger.warning(f"[ACCESS] Remote lookup of {session_id} failed: {e}")
            session = None
        if session is None:
            return self.cache.load_session(session_id)
        self.cache.save_session(session)
        return session

    async def open_legacy(self, session_id: str) -> AccessDecision:
        if not is_valid_session_id(session_id):
            return AccessDecision(redirect_to=HOME_PATH, error="Invalid session ID")

        session = await self._load(session_id)
        if session is None:
            return AccessDecision(redirect_to=HOME_PATH, error="Session not found")

        if session.edit_token:
            logger.info(f"[ACCESS] {session_id} is already claimed, redirecting to read-only view")
            return AccessDecision(
                session=session,
                redirect_to=view_path(session_id),
                error="This session requires a valid access token in the URL.",
            )

        token = generate_edit_token()
        claimed = session.model_copy(update={"edit_token": token})
        self.cache.save_session(claimed)
        try:
            await self.remote.save_session(claimed)
        except RemoteStoreError as e:
            logger.error(f"[ACCESS] Could not store new edit token for {session_id}: {e}")
        logger.info(f"[ACCESS] Minted edit token for legacy session {session_id}")
        return AccessDecision(session=claimed, redirect_to=editor_path(session_id, token))

    async def open_editor(self, edit_token: str, session_id: str) -> AccessDecision:
        if not is_valid_session_id(session_id):
            return AccessDecision(redirect_to=HOME_PATH, error="Invalid session ID")

        session = await self._load(session_id)
        if session is None:
            return AccessDecision(redirect_to=HOME_PATH, error="Session not found")

        if not validate_edit_token(session.edit_token, edit_token):
            logger.info(f"[ACCESS] Token mismatch for {session_id}, redirecting to read-only view")
            return AccessDecision(redirect_to=view_path(session_id))

        self.links.record(session, "editable", edit_token=edit_token)
        return AccessDecision(level=AccessLevel.EDIT, session=session)

    async def open_view(self, session_id: str) -> AccessDecision:
        if not is_valid_session_id(session_id):
            return AccessDecision(error="Invalid session ID")

        session = await self._load(session_id)
        if session is None:
            return AccessDecision(error="Session not found")

        self.links.record(session, "readonly")
        return AccessDecision(level=AccessLevel.READ_ONLY, session=session)
