"""Session export (JSON, CSV) and JSON import."""
import csv
import io
import json
import logging
from datetime import date
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import ValidationError

from .errors import SessionImportError
from .models import FastingSession, format_timestamp, utc_now

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
REQUIRED_IMPORT_FIELDS = ("id", "startTime", "targetDuration")

ExportFormat = Literal["json", "csv"]

CHECKIN_HEADERS = [
    "Timestamp", "Energy", "Hunger", "Mental Clarity", "Mood",
    "Physical Comfort", "Sleep Quality", "Water Intake", "Electrolytes",
]
METRIC_HEADERS = ["Timestamp", "Weight (kg)", "Body Fat (%)"]
JOURNAL_HEADERS = ["Timestamp", "Content", "Tags"]


def _blank_if_none(value) -> str:
    return "" if value is None else str(value)


def export_filename(fmt: ExportFormat, on: Optional[date] = None) -> str:
    on = on or utc_now().date()
    return f"fasting-session-{on.isoformat()}.{fmt}"


def export_session_json(session: FastingSession) -> str:
    data = session.to_wire()
    data["name"] = session.name or "Unnamed Session"
    data["exportedAt"] = format_timestamp(utc_now())
    data["version"] = EXPORT_VERSION
    return json.dumps(data, indent=2)


def export_session_csv(session: FastingSession) -> str:
    """Three labeled sections: check-ins, body metrics, journal entries."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    buffer.write("=== CHECK-IN DATA ===\n")
    writer.writerow(CHECKIN_HEADERS)
    for entry in session.entries:
        writer.writerow([
            format_timestamp(entry.timestamp),
            entry.energy,
            entry.hunger,
            entry.mental_clarity,
            entry.mood,
            entry.physical_comfort,
            _blank_if_none(entry.sleep_quality),
            _blank_if_none(entry.water_intake),
            "Yes" if entry.electrolytes else "No",
        ])

    buffer.write("\n=== BODY METRICS ===\n")
    writer.writerow(METRIC_HEADERS)
    for metric in session.body_metrics:
        writer.writerow([
            format_timestamp(metric.timestamp),
            _blank_if_none(metric.weight),
            _blank_if_none(metric.body_fat_percentage),
        ])

    buffer.write("\n=== JOURNAL ENTRIES ===\n")
    writer.writerow(JOURNAL_HEADERS)
    for note in session.notes:
        writer.writerow([format_timestamp(note.timestamp), note.content, "; ".join(note.tags)])

    return buffer.getvalue()


def write_export(
    session: FastingSession,
    directory: Union[str, Path],
    fmt: ExportFormat = "json",
) -> Path:
    """Write the export file into ``directory`` and return its path."""
    content = export_session_json(session) if fmt == "json" else export_session_csv(session)
    path = Path(directory) / export_filename(fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"[EXPORT] Wrote {session.id} to {path}")
    return path


def import_session_json(content: str) -> FastingSession:
    """Parse an exported JSON document back into a session."""
    try:
        data = json.loads(content)
        if not isinstance(data, dict) or not all(data.get(f) for f in REQUIRED_IMPORT_FIELDS):
            raise ValueError("Invalid session data format")
        data.pop("exportedAt", None)
        data.pop("version", None)
        return FastingSession.from_wire(data)
    except (ValueError, ValidationError) as e:
        raise SessionImportError(f"Failed to parse import file: {e}") from e


def import_session_file(path: Union[str, Path]) -> FastingSession:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SessionImportError(f"Failed to read file: {e}") from e
    return import_session_json(content)
