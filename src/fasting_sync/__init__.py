"""
Fasting Session Sync.

Client-side session model, local cache and synchronization against the
remote session store.
"""

from .access import AccessDecision, AccessGate, AccessLevel
from .local_cache import LocalSessionCache, MultiSessionStore, SessionLinkIndex
from .models import BodyMetric, CheckinEntry, FastingSession, JournalEntry, SessionLink
from .remote import RemoteSessionStore
from .storage import MemoryStorage, SqliteStorage
from .synchronizer import SessionSynchronizer, SyncState
from .workspace import SessionWorkspace

__all__ = [
    "AccessDecision",
    "AccessGate",
    "AccessLevel",
    "LocalSessionCache",
    "MultiSessionStore",
    "SessionLinkIndex",
    "BodyMetric",
    "CheckinEntry",
    "FastingSession",
    "JournalEntry",
    "SessionLink",
    "RemoteSessionStore",
    "MemoryStorage",
    "SqliteStorage",
    "SessionSynchronizer",
    "SyncState",
    "SessionWorkspace",
]
