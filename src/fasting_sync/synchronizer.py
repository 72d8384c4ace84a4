"""
Session Synchronizer.

Keeps one open session consistent between the in-memory view, the local
cache and the remote session store:

- open: show the cached copy immediately, then let the remote copy win
- mutate: update memory, write the cache, schedule a debounced remote save
- poll: re-fetch on a fixed interval so other tabs/devices converge
- close: cancel the pending save timer and the poll loop

Everything runs on one asyncio event loop; mutation methods must be called
from inside it.
"""

import asyncio
import contextlib
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from .config import get_sync_settings
from .errors import ReadOnlySessionError, RemoteStoreError
from .identifiers import generate_entry_id, is_valid_email
from .local_cache import LocalSessionCache
from .models import BodyMetric, CheckinEntry, FastingSession, JournalEntry, utc_now
from .remote import RemoteSessionStore

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    """Sync status of the open session."""

    LOADING = "loading"
    SYNCED = "synced"
    DIRTY = "dirty"


class SessionSynchronizer:
    """
    Owns the single-session view model for one session id.

    Remote writes are last-write-wins at the granularity of the whole
    record. Two guards keep a poll from discarding local work: a fetched
    copy is ignored while a save is pending or in flight, and it is ignored
    when its revision is older than the last revision this synchronizer
    wrote.
    """

    def __init__(
        self,
        session_id: str,
        cache: LocalSessionCache,
        remote: RemoteSessionStore,
        debounce_delay: Optional[float] = None,
        poll_interval: Optional[float] = None,
        read_only: bool = False,
    ):
        settings = get_sync_settings()
        self.session_id = session_id
        self.cache = cache
        self.remote = remote
        self.debounce_delay = (
            debounce_delay if debounce_delay is not None else settings.debounce_seconds
        )
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.poll_interval_seconds
        )
        self.read_only = read_only

        self.state = SyncState.LOADING
        self.last_synced_at: Optional[datetime] = None
        self.is_syncing = False

        self._session: Optional[FastingSession] = None
        self._pending: Optional[FastingSession] = None
        self._save_handle: Optional[asyncio.TimerHandle] = None
        self._inflight: set[asyncio.Task] = set()
        self._poll_task: Optional[asyncio.Task] = None
        self._last_written_revision = 0
        self._write_seq = 0
        self._closed = False

    @property
    def session(self) -> Optional[FastingSession]:
        return self._session

    @property
    def has_pending_write(self) -> bool:
        return self._save_handle is not None or bool(self._inflight)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, start_polling: bool = True) -> Optional[FastingSession]:
        """Load the session (cache first, then remote) and start polling."""
        local = self.cache.load_session(self.session_id)
        if local is not None:
            self._session = local

        await self.refresh()

        if start_polling and self._poll_task is None and not self._closed:
            self._poll_task = asyncio.create_task(self._poll_loop())
            logger.debug(
                f"[SYNC] Polling {self.session_id} every {self.poll_interval}s"
            )
        return self._session

    async def close(self) -> None:
        """Cancel the pending save and the poll loop. In-flight saves still land."""
        self._closed = True
        if self._save_handle is not None:
            self._save_handle.cancel()
            self._save_handle = None
            self._pending = None
        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None
        logger.debug(f"[SYNC] Closed {self.session_id}")

    async def flush(self) -> None:
        """Send any pending save now and wait for outstanding saves."""
        if self._save_handle is not None:
            self._save_handle.cancel()
            self._dispatch_save()
        if self._inflight:
            await asyncio.gather(*list(self._inflight))

    # ------------------------------------------------------------------
    # Remote reconciliation
    # ------------------------------------------------------------------

    async def refresh(self) -> Optional[FastingSession]:
        """Fetch the remote copy and reconcile it into the in-memory view."""
        if (
            self.state is SyncState.DIRTY
            and not self.has_pending_write
            and self._session is not None
            and not self._closed
        ):
            # the last save failed; retry it rather than pulling over it
            logger.info(f"[SYNC] Retrying unsynced changes for {self.session_id}")
            self._schedule_save(self._session)
            return self._session

        try:
            remote = await self.remote.fetch_session(self.session_id)
        except RemoteStoreError as e:
            logger.warning(f"[SYNC] Error loading {self.session_id} from remote: {e}")
            return self._session

        if remote is None:
            if self._session is not None and not self.has_pending_write and not self._closed:
                logger.info(
                    f"[SYNC] {self.session_id} missing from remote store, pushing local copy"
                )
                # the store numbers a re-created record from 1 again
                self._last_written_revision = 0
                self._schedule_save(self._session)
            return self._session

        if self.has_pending_write:
            logger.debug(f"[SYNC] Local changes pending for {self.session_id}, skipping refresh")
            return self._session

        if remote.revision < self._last_written_revision:
            logger.debug(
                f"[SYNC] Ignoring stale copy of {self.session_id} "
                f"(revision {remote.revision} < {self._last_written_revision})"
            )
            return self._session

        self._session = remote
        self.cache.save_session(remote)
        self.last_synced_at = utc_now()
        self.state = SyncState.SYNCED
        return remote

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"[SYNC] Poll of {self.session_id} failed: {e}")

    # ------------------------------------------------------------------
    # Debounced remote save
    # ------------------------------------------------------------------

    def _schedule_save(self, session: FastingSession) -> None:
        """Restart the debounce timer with the latest snapshot."""
        if self._save_handle is not None:
            self._save_handle.cancel()
        self._pending = session
        loop = asyncio.get_running_loop()
        self._save_handle = loop.call_later(self.debounce_delay, self._dispatch_save)

    def _dispatch_save(self) -> None:
        self._save_handle = None
        session, self._pending = self._pending, None
        if session is None:
            return
        self._write_seq += 1
        task = asyncio.create_task(self._write(session, self._write_seq))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _write(self, session: FastingSession, seq: int) -> bool:
        self.is_syncing = True
        try:
            revision = await self.remote.save_session(session)
        except RemoteStoreError as e:
            logger.warning(f"[SYNC] Error saving {session.id} to remote: {e}")
            return False
        finally:
            self.is_syncing = False

        # only the latest dispatched write sets the mark
        if seq == self._write_seq:
            self._last_written_revision = revision
        self.last_synced_at = utc_now()
        # this task is still in _inflight until its done-callback runs
        if self._save_handle is None and len(self._inflight) <= 1:
            self.state = SyncState.SYNCED
        logger.debug(f"[SYNC] Saved {session.id} (revision {revision})")
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _ensure_writable(self) -> None:
        if self.read_only:
            raise ReadOnlySessionError(f"Session {self.session_id} is open read-only")

    def _commit(self, session: FastingSession) -> FastingSession:
        """Write-through: memory, then local cache, then a debounced remote save."""
        self._session = session
        self.cache.save_session(session)
        if self._closed:
            return session
        self.state = SyncState.DIRTY
        self._schedule_save(session)
        return session

    def add_checkin(
        self,
        energy: int,
        hunger: int,
        mental_clarity: int,
        mood: int,
        physical_comfort: int,
        sleep_quality: Optional[int] = None,
        water_intake: Optional[int] = None,
        electrolytes: Optional[bool] = None,
    ) -> Optional[CheckinEntry]:
        self._ensure_writable()
        if self._session is None:
            return None
        entry = CheckinEntry(
            id=generate_entry_id(),
            timestamp=utc_now(),
            energy=energy,
            hunger=hunger,
            mental_clarity=mental_clarity,
            mood=mood,
            physical_comfort=physical_comfort,
            sleep_quality=sleep_quality,
            water_intake=water_intake,
            electrolytes=electrolytes,
        )
        self._commit(
            self._session.model_copy(update={"entries": [*self._session.entries, entry]})
        )
        return entry

    def add_body_metric(
        self,
        weight: Optional[float] = None,
        body_fat_percentage: Optional[float] = None,
    ) -> Optional[BodyMetric]:
        self._ensure_writable()
        if self._session is None:
            return None
        if weight is None and body_fat_percentage is None:
            raise ValueError("A body metric needs a weight or a body-fat percentage")
        metric = BodyMetric(
            id=generate_entry_id(),
            timestamp=utc_now(),
            weight=weight,
            body_fat_percentage=body_fat_percentage,
        )
        self._commit(
            self._session.model_copy(
                update={"body_metrics": [*self._session.body_metrics, metric]}
            )
        )
        return metric

    def add_journal_entry(
        self, content: str, tags: Optional[list[str]] = None
    ) -> Optional[JournalEntry]:
        self._ensure_writable()
        if self._session is None:
            return None
        note = JournalEntry(
            id=generate_entry_id(),
            timestamp=utc_now(),
            content=content,
            tags=[t.strip() for t in (tags or []) if t.strip()],
        )
        self._commit(self._session.model_copy(update={"notes": [*self._session.notes, note]}))
        return note

    def end_fast(self) -> Optional[FastingSession]:
        """End the fast. Calling it again keeps the first end time."""
        self._ensure_writable()
        if self._session is None:
            return None
        if not self._session.is_active and self._session.end_time is not None:
            return self._session
        return self._commit(
            self._session.model_copy(update={"is_active": False, "end_time": utc_now()})
        )

    def rename(self, name: str) -> Optional[FastingSession]:
        self._ensure_writable()
        if self._session is None:
            return None
        return self._commit(self._session.model_copy(update={"name": name.strip()}))

    def set_owner_email(self, email: Optional[str]) -> Optional[FastingSession]:
        self._ensure_writable()
        if self._session is None:
            return None
        if email and not is_valid_email(email):
            raise ValueError(f"Invalid email format: {email}")
        return self._commit(self._session.model_copy(update={"email": email or None}))

    def set_edit_token(self, token: str) -> Optional[FastingSession]:
        self._ensure_writable()
        if self._session is None:
            return None
        return self._commit(self._session.model_copy(update={"edit_token": token}))
