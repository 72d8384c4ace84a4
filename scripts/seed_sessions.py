#!/usr/bin/env python3
"""
Seed the session store with demo fasting sessions.

Writes directly into the SQLite key-value store used by the API, so the
API does not need to be running.

Usage:
    python scripts/seed_sessions.py --count 3 --email demo@example.com
"""
import argparse
import random
import sys
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Project root and src/ on the path so server and client packages import
BASE_DIR = Path(__file__).parent.parent
for path in (BASE_DIR, BASE_DIR / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from fasting_sync.identifiers import (  # noqa: E402
    generate_edit_token,
    generate_entry_id,
    generate_session_id,
)
from fasting_sync.models import (  # noqa: E402
    BodyMetric,
    CheckinEntry,
    FastingSession,
    JournalEntry,
    utc_now,
)
from server.fasting_api.config import get_settings  # noqa: E402
from server.fasting_api.database import KeyValueStore  # noqa: E402
from server.fasting_api.services.session_search import session_key  # noqa: E402

NOTES = [
    ("Hunger wave around lunch, passed after tea.", ["hunger"]),
    ("Slept badly but head feels clear.", ["sleep", "clarity"]),
    ("Light walk, energy steady.", ["exercise"]),
]


def build_demo_session(name: str, hours_ago: int, target: int, email: str | None) -> FastingSession:
    """Build a session with a check-in every 8 hours since it started."""
    now = utc_now()
    start = now - timedelta(hours=hours_ago)
    entries = []
    metrics = []
    notes = []

    for offset in range(0, hours_ago, 8):
        stamp = start + timedelta(hours=offset)
        entries.append(
            CheckinEntry(
                id=generate_entry_id(),
                timestamp=stamp,
                energy=random.randint(4, 9),
                hunger=random.randint(2, 8),
                mental_clarity=random.randint(5, 10),
                mood=random.randint(4, 9),
                physical_comfort=random.randint(4, 9),
                water_intake=random.randint(1, 4),
                electrolytes=random.random() > 0.5,
            )
        )
        if offset % 24 == 0:
            metrics.append(
                BodyMetric(
                    id=generate_entry_id(),
                    timestamp=stamp,
                    weight=round(80 - offset / 24 * 0.6, 1),
                    body_fat_percentage=round(22 - offset / 24 * 0.2, 1),
                )
            )

    for index, (content, tags) in enumerate(NOTES[: max(1, hours_ago // 24)]):
        notes.append(
            JournalEntry(
                id=generate_entry_id(),
                timestamp=start + timedelta(hours=12 + index * 24),
                content=content,
                tags=tags,
            )
        )

    finished = hours_ago >= target
    return FastingSession(
        id=generate_session_id(),
        name=name,
        start_time=start,
        end_time=start + timedelta(hours=target) if finished else None,
        target_duration=target,
        is_active=not finished,
        entries=entries,
        body_metrics=metrics,
        notes=notes,
        edit_token=generate_edit_token(),
        email=email,
    )


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Seed demo fasting sessions")
    parser.add_argument("--count", type=int, default=3, help="Number of sessions")
    parser.add_argument("--email", default=None, help="Owner email for the sessions")
    parser.add_argument("--db", default=None, help="Path to the key-value database")
    args = parser.parse_args()

    settings = get_settings()
    store = KeyValueStore(args.db or settings.kv_db_path)

    print("=" * 50)
    print("Seeding fasting sessions")
    print("=" * 50)

    for i in range(args.count):
        session = build_demo_session(
            name=f"Demo fast {i + 1}",
            hours_ago=random.choice([12, 30, 60, 80]),
            target=random.choice([24, 48, 72]),
            email=args.email,
        )
        record = session.model_copy(update={"revision": 1}).to_wire()
        store.set(session_key(session.id), record, ex=settings.session_ttl_seconds)
        print(f"  {session.id}: /session/{session.edit_token}/{session.id}")

    print(f"\nSeeded {args.count} session(s) into {store.db_path}")


if __name__ == "__main__":
    main()
