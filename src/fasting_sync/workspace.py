"""Session-level operations: create, switch, delete, import, recents."""
import logging
from datetime import datetime
from typing import Any, Optional

from .access import editor_path
from .errors import InvalidEmailError, RemoteStoreError
from .export import import_session_json
from .identifiers import generate_edit_token, generate_session_id, is_valid_email
from .local_cache import LocalSessionCache, SessionLinkIndex
from .models import FastingSession, SessionLink, ensure_utc
from .remote import RemoteSessionStore

logger = logging.getLogger(__name__)

# Ids are not checked against the remote store; this only avoids
# overwriting a session already cached in this browser.
MAX_ID_ATTEMPTS = 10


class SessionWorkspace:
    """The set of sessions this client knows about."""

    def __init__(
        self,
        cache: LocalSessionCache,
        remote: RemoteSessionStore,
        links: SessionLinkIndex,
    ):
        self.cache = cache
        self.remote = remote
        self.links = links

    def _fresh_session_id(self) -> str:
        session_id = generate_session_id()
        for _ in range(MAX_ID_ATTEMPTS - 1):
            if not self.cache.has_session(session_id):
                break
            session_id = generate_session_id()
        return session_id

    async def _push(self, session: FastingSession) -> None:
        try:
            await self.remote.save_session(session)
        except RemoteStoreError as e:
            logger.warning(f"[WORKSPACE] {session.id} saved locally only: {e}")

    async def create_session(
        self,
        name: str,
        start_time: datetime,
        target_duration: float,
        email: Optional[str] = None,
    ) -> tuple[FastingSession, str]:
        """Create a session and return it with its editor URL."""
        if email and not is_valid_email(email):
            raise InvalidEmailError(f"Invalid email format: {email}")

        session = FastingSession(
            id=self._fresh_session_id(),
            name=name.strip(),
            start_time=ensure_utc(start_time),
            end_time=None,
            target_duration=target_duration,
            is_active=True,
            edit_token=generate_edit_token(),
            email=email or None,
        )
        self.cache.save_session(session)
        await self._push(session)
        logger.info(f"[WORKSPACE] Created session {session.id}")
        return session, editor_path(session.id, session.edit_token)

    def editor_url(self, session_id: str) -> Optional[str]:
        """Editor URL for a cached session, minting a token for tokenless ones."""
        session = self.cache.load_session(session_id)
        if session is None:
            return None
        if not session.edit_token:
            session = session.model_copy(update={"edit_token": generate_edit_token()})
            self.cache.save_session(session)
        return editor_path(session.id, session.edit_token)

    async def delete_session(self, session_id: str) -> None:
        self.cache.delete_session(session_id)
        self.links.remove(session_id)
        try:
            await self.remote.delete_session(session_id)
        except RemoteStoreError as e:
            logger.error(f"[WORKSPACE] Error deleting {session_id} from remote: {e}")

    async def import_session(self, content: str) -> tuple[FastingSession, str]:
        """Import an exported JSON document under a fresh id."""
        imported = import_session_json(content)
        session = imported.model_copy(
            update={
                "id": self._fresh_session_id(),
                "edit_token": imported.edit_token or generate_edit_token(),
                "revision": 0,
            }
        )
        self.cache.save_session(session)
        await self._push(session)
        logger.info(f"[WORKSPACE] Imported {imported.id} as {session.id}")
        return session, editor_path(session.id, session.edit_token)

    def recent_sessions(self) -> list[FastingSession]:
        return sorted(self.cache.list_sessions(), key=lambda s: s.start_time, reverse=True)

    def recent_links(self) -> list[SessionLink]:
        return self.links.list_links()

    async def email_session_links(self, email: str) -> dict[str, Any]:
        if not is_valid_email(email):
            raise InvalidEmailError(f"Invalid email format: {email}")
        return await self.remote.send_session_links(email)
