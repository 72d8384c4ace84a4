"""
Pytest fixtures for fasting session tests.
"""
import sys
import pytest
import httpx
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Ensure the project root and src/ are on sys.path so tests can import
# both the server package and the fasting_sync client.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
for path in (ROOT, SRC):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Load environment variables
load_dotenv()

from fastapi.testclient import TestClient  # noqa: E402

from fasting_sync.errors import RemoteStoreError  # noqa: E402
from fasting_sync.local_cache import LocalSessionCache, SessionLinkIndex  # noqa: E402
from fasting_sync.models import CheckinEntry, FastingSession  # noqa: E402
from fasting_sync.remote import RemoteSessionStore  # noqa: E402
from fasting_sync.storage import MemoryStorage  # noqa: E402
from server.fasting_api.database import KeyValueStore, get_kv_store  # noqa: E402
from server.fasting_api.main import app  # noqa: E402
from server.fasting_api.services.email_service import get_email_service  # noqa: E402


# ============================================================================
# Session builders
# ============================================================================

START = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def make_session(session_id: str = "calm-tiger-42", **overrides) -> FastingSession:
    """Build a fresh active session; keyword overrides use field names."""
    data = {
        "id": session_id,
        "name": "Test",
        "start_time": START,
        "target_duration": 72,
        "is_active": True,
    }
    data.update(overrides)
    return FastingSession(**data)


def make_checkin(entry_id: str = "1714550400000-abc123xyz", hours: int = 1) -> CheckinEntry:
    return CheckinEntry(
        id=entry_id,
        timestamp=START + timedelta(hours=hours),
        energy=7,
        hunger=3,
        mental_clarity=8,
        mood=6,
        physical_comfort=7,
    )


@pytest.fixture
def session_factory():
    return make_session


# ============================================================================
# Local storage fixtures
# ============================================================================

@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage):
    return LocalSessionCache(storage)


@pytest.fixture
def links(storage):
    return SessionLinkIndex(storage)


# ============================================================================
# Remote store fixtures
# ============================================================================

class FakeRemoteStore:
    """In-memory stand-in for RemoteSessionStore that records every call."""

    def __init__(self):
        self.records: dict[str, FastingSession] = {}
        self.saved: list[FastingSession] = []
        self.fetches = 0
        self.fail = False
        self.revision = 0

    async def fetch_session(self, session_id: str) -> Optional[FastingSession]:
        self.fetches += 1
        if self.fail:
            raise RemoteStoreError("store unavailable")
        return self.records.get(session_id)

    async def save_session(self, session: FastingSession) -> int:
        if self.fail:
            raise RemoteStoreError("store unavailable")
        self.revision += 1
        stored = session.model_copy(update={"revision": self.revision})
        self.records[session.id] = stored
        self.saved.append(stored)
        return self.revision

    async def delete_session(self, session_id: str) -> None:
        if self.fail:
            raise RemoteStoreError("store unavailable")
        self.records.pop(session_id, None)

    async def send_session_links(self, email: str) -> dict:
        return {"success": True, "sessionCount": 1, "message": f"Sent 1 session link(s) to {email}"}


@pytest.fixture
def fake_remote():
    return FakeRemoteStore()


class StubEmailService:
    """Captures outgoing session link emails instead of calling SendGrid."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: list[tuple[str, list[dict]]] = []

    def send_session_links(self, recipient_email: str, sessions: list[dict]) -> bool:
        self.sent.append((recipient_email, sessions))
        return self.succeed


@pytest.fixture
def kv_store(tmp_path):
    """Key-value store in a temporary SQLite file."""
    return KeyValueStore(str(tmp_path / "sessions.db"))


@pytest.fixture
def email_stub():
    return StubEmailService()


@pytest.fixture
def api_client(kv_store, email_stub):
    """TestClient against the API with a temporary store and stubbed email."""
    app.dependency_overrides[get_kv_store] = lambda: kv_store
    app.dependency_overrides[get_email_service] = lambda: email_stub
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def asgi_remote(kv_store, email_stub):
    """RemoteSessionStore wired to the in-process API."""
    app.dependency_overrides[get_kv_store] = lambda: kv_store
    app.dependency_overrides[get_email_service] = lambda: email_stub
    yield RemoteSessionStore(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=app),
    )
    app.dependency_overrides.clear()
