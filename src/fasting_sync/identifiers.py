"""Session ids, entry ids and edit tokens.

Session ids are human-readable slugs such as ``fast-eagle-42``. Edit tokens
are four-digit PINs embedded in the editor URL; they keep casual visitors of
a shared link out of the editor and are not a secret in any stronger sense.
"""
import hmac
import random
import re
import secrets
import string
import time
from typing import Optional

ADJECTIVES = [
    "fast", "quick", "steady", "strong", "focused", "mindful", "determined",
    "patient", "calm", "active", "healthy", "vibrant", "energetic", "peaceful",
    "balanced", "clear", "bright", "fresh", "happy", "brave", "mighty",
]

NOUNS = [
    "eagle", "tiger", "lion", "wolf", "bear", "hawk", "falcon", "dragon",
    "phoenix", "warrior", "champion", "hero", "tracker", "journey", "quest",
    "path", "mission", "goal", "star", "comet", "rocket",
]

SESSION_ID_PATTERN = re.compile(r"^[a-z]+-[a-z]+-\d{1,3}$")

EDIT_TOKEN_MIN = 1000
EDIT_TOKEN_MAX = 9999

_BASE36 = string.digits + string.ascii_lowercase


def generate_session_id() -> str:
    """Return a random ``adjective-noun-number`` id (number in 0..999)."""
    adjective = random.choice(ADJECTIVES)
    noun = random.choice(NOUNS)
    number = random.randint(0, 999)
    return f"{adjective}-{noun}-{number}"


def is_valid_session_id(session_id: Optional[str]) -> bool:
    if not isinstance(session_id, str):
        return False
    return SESSION_ID_PATTERN.fullmatch(session_id) is not None


def generate_edit_token() -> str:
    return str(EDIT_TOKEN_MIN + secrets.randbelow(EDIT_TOKEN_MAX - EDIT_TOKEN_MIN + 1))


def validate_edit_token(stored: Optional[str], provided: Optional[str]) -> bool:
    """True only when both tokens are present and identical."""
    if not stored or not provided:
        return False
    return hmac.compare_digest(stored.encode(), provided.encode())


def generate_entry_id() -> str:
    """Id for check-ins, body metrics and notes: ``<epoch-ms>-<9 base36 chars>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{millis}-{suffix}"


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Optional[str]) -> bool:
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None
