"""Elapsed-time, milestone and check-in summary helpers."""
import math
import statistics
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .models import CheckinEntry, FastingSession, ensure_utc, utc_now

MILESTONE_HOURS = (24, 48, 72)


@dataclass(frozen=True)
class ElapsedTime:
    hours: int
    minutes: int
    total_hours: float
    percentage: float


@dataclass(frozen=True)
class CheckinSummary:
    """Average of each rating across a set of check-ins."""

    count: int
    avg_energy: float
    avg_hunger: float
    avg_mental_clarity: float
    avg_mood: float
    avg_physical_comfort: float


def calculate_elapsed_time(
    start_time: Optional[datetime],
    target_duration: float = 72,
    now: Optional[datetime] = None,
) -> ElapsedTime:
    """Time since ``start_time``; percentage of the target is capped at 100."""
    if start_time is None:
        return ElapsedTime(hours=0, minutes=0, total_hours=0.0, percentage=0.0)

    now = ensure_utc(now) if now else utc_now()
    total_hours = (now - ensure_utc(start_time)).total_seconds() / 3600
    hours = math.floor(total_hours)
    minutes = int((total_hours - hours) * 60)
    percentage = min(total_hours / target_duration * 100, 100.0) if target_duration else 0.0
    return ElapsedTime(
        hours=hours, minutes=minutes, total_hours=total_hours, percentage=percentage
    )


def session_elapsed(session: FastingSession, now: Optional[datetime] = None) -> ElapsedTime:
    """Elapsed time for a session, frozen at ``end_time`` once the fast is over."""
    reference = session.end_time if session.end_time is not None else now
    return calculate_elapsed_time(session.start_time, session.target_duration, reference)


def format_elapsed_time(hours: int, minutes: int) -> str:
    return f"{hours}h {minutes}m"


def milestone_status(total_hours: float) -> dict[str, bool]:
    return {f"milestone{h}": total_hours >= h for h in MILESTONE_HOURS}


def summarize_checkins(entries: list[CheckinEntry]) -> Optional[CheckinSummary]:
    if not entries:
        return None
    return CheckinSummary(
        count=len(entries),
        avg_energy=statistics.mean(e.energy for e in entries),
        avg_hunger=statistics.mean(e.hunger for e in entries),
        avg_mental_clarity=statistics.mean(e.mental_clarity for e in entries),
        avg_mood=statistics.mean(e.mood for e in entries),
        avg_physical_comfort=statistics.mean(e.physical_comfort for e in entries),
    )
