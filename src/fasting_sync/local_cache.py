"""Client-local session cache.

Three kinds of record live in local storage:

* ``session:<id>``: one serialized session per key, the write-through
  cache used by the synchronizer.
* ``fasting_sessions`` / ``active_session_id``: an aggregate blob of every
  session plus the currently selected one.
* ``sessionLinks``: a denormalized list of sessions this browser has
  opened, for the recents list.

Local writes are best effort. Failures are logged and never raised.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from pydantic import ValidationError

from .models import FastingSession, LinkType, SessionLink, utc_now
from .storage import StoragePort

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"
SESSIONS_KEY = "fasting_sessions"
ACTIVE_SESSION_KEY = "active_session_id"
SESSION_LINKS_KEY = "sessionLinks"


def session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def _parse_session(raw: str) -> FastingSession:
    return FastingSession.from_wire(json.loads(raw))


class LocalSessionCache:
    """Per-session records keyed by ``session:<id>``."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def load_session(self, session_id: str) -> Optional[FastingSession]:
        """Return the cached session, or None when absent or unreadable."""
        try:
            raw = self.storage.get(session_key(session_id))
            if raw is None:
                return None
            return _parse_session(raw)
        except (ValueError, ValidationError) as e:
            logger.error(f"[CACHE] Error loading session {session_id}: {e}")
            return None

    def save_session(self, session: FastingSession) -> None:
        try:
            self.storage.set(session_key(session.id), json.dumps(session.to_wire()))
        except Exception as e:
            logger.error(f"[CACHE] Error saving session {session.id}: {e}")

    def delete_session(self, session_id: str) -> None:
        self.storage.delete(session_key(session_id))

    def has_session(self, session_id: str) -> bool:
        return self.storage.get(session_key(session_id)) is not None

    def list_sessions(self) -> list[FastingSession]:
        """Every readable cached session, in key order."""
        sessions = []
        for key in self.storage.scan(SESSION_KEY_PREFIX):
            raw = self.storage.get(key)
            if raw is None:
                continue
            try:
                sessions.append(_parse_session(raw))
            except (ValueError, ValidationError) as e:
                logger.warning(f"[CACHE] Skipping unreadable record {key}: {e}")
        return sessions


@dataclass
class SessionsData:
    """Contents of the aggregate sessions blob."""

    sessions: list[FastingSession] = field(default_factory=list)
    active_session_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "sessions": [s.to_wire() for s in self.sessions],
            "activeSessionId": self.active_session_id,
        }


class MultiSessionStore:
    """All sessions plus the active selection, stored as one blob."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def load_all(self) -> SessionsData:
        try:
            raw = self.storage.get(SESSIONS_KEY)
            if raw:
                parsed = json.loads(raw)
                sessions = [FastingSession.from_wire(s) for s in parsed.get("sessions", [])]
                active_id = parsed.get("activeSessionId") or (
                    sessions[0].id if sessions else None
                )
                return SessionsData(sessions=sessions, active_session_id=active_id)
        except (ValueError, ValidationError) as e:
            logger.error(f"[CACHE] Error loading sessions: {e}")
        return SessionsData()

    def save_all(self, data: SessionsData) -> None:
        try:
            self.storage.set(SESSIONS_KEY, json.dumps(data.to_dict()))
            if data.active_session_id:
                self.storage.set(ACTIVE_SESSION_KEY, data.active_session_id)
        except Exception as e:
            logger.error(f"[CACHE] Error saving sessions: {e}")

    def add_session(self, session: FastingSession) -> SessionsData:
        data = self.load_all()
        data.sessions.append(session)
        data.active_session_id = session.id
        self.save_all(data)
        return data

    def update_session(self, session_id: str, updated: FastingSession) -> SessionsData:
        data = self.load_all()
        for index, existing in enumerate(data.sessions):
            if existing.id == session_id:
                data.sessions[index] = updated
                self.save_all(data)
                break
        return data

    def delete_session(self, session_id: str) -> SessionsData:
        data = self.load_all()
        data.sessions = [s for s in data.sessions if s.id != session_id]
        if data.active_session_id == session_id:
            data.active_session_id = data.sessions[0].id if data.sessions else None
            if data.active_session_id is None:
                self.storage.delete(ACTIVE_SESSION_KEY)
        self.save_all(data)
        return data

    def set_active_session(self, session_id: str) -> SessionsData:
        data = self.load_all()
        if any(s.id == session_id for s in data.sessions):
            data.active_session_id = session_id
            self.save_all(data)
        return data

    def get_active_session(self) -> Optional[FastingSession]:
        data = self.load_all()
        if not data.active_session_id:
            return None
        return next((s for s in data.sessions if s.id == data.active_session_id), None)


class SessionLinkIndex:
    """Recently opened sessions, deduplicated by ``(id, type)``."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def _load(self) -> list[SessionLink]:
        raw = self.storage.get(SESSION_LINKS_KEY)
        if not raw:
            return []
        try:
            return [SessionLink.model_validate(item) for item in json.loads(raw)]
        except (ValueError, ValidationError) as e:
            logger.error(f"[CACHE] Discarding unreadable session links: {e}")
            return []

    def _save(self, links: list[SessionLink]) -> None:
        try:
            self.storage.set(SESSION_LINKS_KEY, json.dumps([link.to_wire() for link in links]))
        except Exception as e:
            logger.error(f"[CACHE] Error saving session links: {e}")

    def record(
        self,
        session: FastingSession,
        link_type: LinkType,
        edit_token: Optional[str] = None,
    ) -> SessionLink:
        """Insert or refresh the link for this session and access type."""
        links = self._load()
        now = utc_now()
        token = edit_token if link_type == "editable" else None

        for index, existing in enumerate(links):
            if existing.id == session.id and existing.type == link_type:
                update = {
                    "last_accessed": now,
                    "name": session.name,
                    "is_active": session.is_active,
                }
                if token:
                    update["edit_token"] = token
                link = existing.model_copy(update=update)
                links[index] = link
                break
        else:
            link = SessionLink(
                id=session.id,
                name=session.name,
                type=link_type,
                edit_token=token,
                last_accessed=now,
                start_time=session.start_time,
                target_duration=session.target_duration,
                is_active=session.is_active,
            )
            links.append(link)

        self._save(links)
        return link

    def list_links(self) -> list[SessionLink]:
        return sorted(self._load(), key=lambda link: link.last_accessed, reverse=True)

    def remove(self, session_id: str) -> None:
        links = self._load()
        remaining = [link for link in links if link.id != session_id]
        if len(remaining) != len(links):
            self._save(remaining)
