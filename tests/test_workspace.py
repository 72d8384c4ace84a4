"""
Tests for workspace-level operations, including the full lifecycle of a
fast against the in-process API.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest

from conftest import START, make_session
from fasting_sync.access import AccessGate, AccessLevel
from fasting_sync.errors import InvalidEmailError, SessionImportError
from fasting_sync.export import export_session_json
from fasting_sync.identifiers import is_valid_session_id
from fasting_sync.synchronizer import SessionSynchronizer
from fasting_sync.workspace import SessionWorkspace


@pytest.fixture
def workspace(cache, fake_remote, links):
    return SessionWorkspace(cache, fake_remote, links)


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_session(self, workspace, cache, fake_remote):
        session, url = await workspace.create_session(" Spring fast ", START, 72)

        assert is_valid_session_id(session.id)
        assert session.name == "Spring fast"
        assert session.is_active and session.end_time is None
        assert url == f"/session/{session.edit_token}/{session.id}"
        assert cache.load_session(session.id) == session
        assert fake_remote.records[session.id].id == session.id

    @pytest.mark.asyncio
    async def test_naive_start_time_is_utc(self, workspace):
        session, _ = await workspace.create_session("x", datetime(2024, 5, 1, 8, 0), 24)
        assert session.start_time == START

    @pytest.mark.asyncio
    async def test_remote_failure_still_creates_locally(self, workspace, cache, fake_remote):
        fake_remote.fail = True
        session, _ = await workspace.create_session("x", START, 24)
        assert cache.has_session(session.id)

    @pytest.mark.asyncio
    async def test_invalid_owner_email(self, workspace):
        with pytest.raises(InvalidEmailError):
            await workspace.create_session("x", START, 24, email="not-an-email")

    @pytest.mark.asyncio
    async def test_fresh_id_avoids_cached_sessions(self, workspace, cache, monkeypatch):
        cache.save_session(make_session("calm-tiger-1"))
        ids = iter(["calm-tiger-1", "calm-tiger-1", "brave-wolf-2"])
        monkeypatch.setattr(
            "fasting_sync.workspace.generate_session_id", lambda: next(ids)
        )
        session, _ = await workspace.create_session("x", START, 24)
        assert session.id == "brave-wolf-2"


class TestSessionList:

    @pytest.mark.asyncio
    async def test_delete_removes_everywhere(self, workspace, cache, links, fake_remote):
        session = make_session(edit_token="4821")
        cache.save_session(session)
        fake_remote.records[session.id] = session
        links.record(session, "editable", edit_token="4821")

        await workspace.delete_session(session.id)

        assert not cache.has_session(session.id)
        assert links.list_links() == []
        assert session.id not in fake_remote.records

    def test_editor_url_mints_missing_token(self, workspace, cache):
        cache.save_session(make_session())
        url = workspace.editor_url("calm-tiger-42")

        token = cache.load_session("calm-tiger-42").edit_token
        assert token is not None
        assert url == f"/session/{token}/calm-tiger-42"
        assert workspace.editor_url("calm-tiger-42") == url
        assert workspace.editor_url("ghost-wolf-9") is None

    def test_recent_sessions_newest_start_first(self, workspace, cache):
        cache.save_session(make_session("calm-tiger-1"))
        cache.save_session(make_session("brave-wolf-2", start_time=START + timedelta(days=2)))
        assert [s.id for s in workspace.recent_sessions()] == ["brave-wolf-2", "calm-tiger-1"]

    @pytest.mark.asyncio
    async def test_email_links_validates_address(self, workspace):
        with pytest.raises(InvalidEmailError):
            await workspace.email_session_links("nope")
        result = await workspace.email_session_links("me@example.com")
        assert result["success"] is True


class TestImport:

    @pytest.mark.asyncio
    async def test_import_assigns_fresh_id(self, workspace, fake_remote):
        original = make_session(edit_token="4821", revision=7)
        session, url = await workspace.import_session(export_session_json(original))

        assert session.id != original.id
        assert is_valid_session_id(session.id)
        assert session.edit_token == "4821"
        assert session.revision == 0
        assert url == f"/session/4821/{session.id}"
        assert session.id in fake_remote.records

    @pytest.mark.asyncio
    async def test_import_mints_token_when_missing(self, workspace):
        session, url = await workspace.import_session(export_session_json(make_session()))
        assert session.edit_token
        assert url.endswith(session.id)

    @pytest.mark.asyncio
    async def test_bad_document_raises(self, workspace, cache):
        with pytest.raises(SessionImportError):
            await workspace.import_session(json.dumps({"name": "x"}))
        assert cache.list_sessions() == []


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_create_checkin_end_export_delete_import(self, asgi_remote, cache, links):
        workspace = SessionWorkspace(cache, asgi_remote, links)
        gate = AccessGate(asgi_remote, cache, links)

        start = datetime.now(timezone.utc) - timedelta(hours=5)
        session, url = await workspace.create_session("Lifecycle", start, 48)

        decision = await gate.resolve(url)
        assert decision.level is AccessLevel.EDIT

        sync = SessionSynchronizer(session.id, cache, asgi_remote, debounce_delay=60)
        await sync.open(start_polling=False)
        sync.add_checkin(energy=6, hunger=4, mental_clarity=7, mood=6, physical_comfort=8)
        sync.end_fast()
        await sync.flush()
        await sync.close()

        stored = await asgi_remote.fetch_session(session.id)
        assert stored.is_active is False
        assert stored.end_time is not None
        assert len(stored.entries) == 1

        exported = export_session_json(stored)
        await workspace.delete_session(session.id)
        assert await asgi_remote.fetch_session(session.id) is None

        restored, restored_url = await workspace.import_session(exported)
        assert restored.id != session.id
        assert restored.entries == stored.entries

        decision = await gate.resolve(f"/view/{restored.id}")
        assert decision.level is AccessLevel.READ_ONLY
        assert decision.session.entries == stored.entries
