#!/usr/bin/env python3
"""
Delete expired session records from the key-value store.

Expired records are already invisible to the API; this reclaims the space.

Usage:
    python scripts/purge_expired_sessions.py [--db path/to/sessions.db]
"""
import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from server.fasting_api.config import get_settings  # noqa: E402
from server.fasting_api.database import KeyValueStore  # noqa: E402


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Purge expired session records")
    parser.add_argument("--db", default=None, help="Path to the key-value database")
    args = parser.parse_args()

    store = KeyValueStore(args.db or get_settings().kv_db_path)
    removed = store.purge_expired()
    print(f"Removed {removed} expired record(s) from {store.db_path}")


if __name__ == "__main__":
    main()
