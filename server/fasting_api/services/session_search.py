"""Owner-email lookup over stored session records.

There is no email index: every ``session:*`` key is read and compared.
This is linear in the number of stored sessions.
"""
import logging
from typing import Any

from ..database import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY_PATTERN = "session:*"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


def find_sessions_by_email(
    store: KeyValueStore, email: str, batch_size: int = 100
) -> list[dict[str, Any]]:
    """Return every stored session whose ``email`` matches, ignoring case."""
    normalized = email.strip().lower()
    matches = []
    scanned = 0

    for key in store.scan_iter(SESSION_KEY_PATTERN, count=batch_size):
        scanned += 1
        record = store.get(key)
        if not isinstance(record, dict):
            continue
        owner = record.get("email")
        if isinstance(owner, str) and owner.lower() == normalized:
            matches.append(record)

    logger.debug(f"[SEARCH] Scanned {scanned} sessions, {len(matches)} matched")
    return matches
