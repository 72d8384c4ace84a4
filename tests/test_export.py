"""
Tests for session export (JSON, CSV) and JSON import.
"""
import json
from datetime import date, timedelta

import pytest

from conftest import START, make_checkin, make_session
from fasting_sync.errors import SessionImportError
from fasting_sync.export import (
    export_filename,
    export_session_csv,
    export_session_json,
    import_session_file,
    import_session_json,
    write_export,
)
from fasting_sync.models import BodyMetric, JournalEntry


@pytest.fixture
def full_session():
    return make_session(
        name="Spring fast",
        edit_token="4821",
        entries=[
            make_checkin(),
            make_checkin("1714557600000-def456uvw", hours=3).model_copy(
                update={"sleep_quality": 6, "water_intake": 500, "electrolytes": True}
            ),
        ],
        body_metrics=[
            BodyMetric(id="m1", timestamp=START + timedelta(hours=2), weight=81.5),
        ],
        notes=[
            JournalEntry(
                id="n1",
                timestamp=START + timedelta(hours=4),
                content="Headache, then clear",
                tags=["headache", "focus"],
            ),
        ],
    )


class TestJsonExport:

    def test_contains_session_and_export_metadata(self, full_session):
        data = json.loads(export_session_json(full_session))

        assert data["id"] == "calm-tiger-42"
        assert data["version"] == "1.0"
        assert data["exportedAt"].endswith("Z")
        assert data["startTime"] == "2024-05-01T08:00:00.000Z"
        assert len(data["entries"]) == 2
        assert data["bodyMetrics"][0]["weight"] == 81.5

    def test_unnamed_session_gets_placeholder(self):
        data = json.loads(export_session_json(make_session(name="")))
        assert data["name"] == "Unnamed Session"

    def test_import_restores_exported_session(self, full_session):
        restored = import_session_json(export_session_json(full_session))

        assert restored.entries == full_session.entries
        assert restored.body_metrics == full_session.body_metrics
        assert restored.notes == full_session.notes
        assert restored.start_time == START
        assert restored.edit_token == "4821"


class TestCsvExport:

    def test_sections_in_order(self, full_session):
        lines = export_session_csv(full_session).split("\n")

        assert lines[0] == "=== CHECK-IN DATA ==="
        assert lines[1].startswith("Timestamp,Energy,Hunger,Mental Clarity")
        assert lines[2] == "2024-05-01T09:00:00.000Z,7,3,8,6,7,,,No"
        assert lines[3] == "2024-05-01T11:00:00.000Z,7,3,8,6,7,6,500,Yes"
        assert lines[4] == ""
        assert lines[5] == "=== BODY METRICS ==="
        assert lines[6] == "Timestamp,Weight (kg),Body Fat (%)"
        assert lines[7] == "2024-05-01T10:00:00.000Z,81.5,"
        assert lines[9] == "=== JOURNAL ENTRIES ==="
        assert lines[11] == '2024-05-01T12:00:00.000Z,"Headache, then clear",headache; focus'

    def test_empty_session_still_has_headers(self):
        content = export_session_csv(make_session())
        assert content.count("===") == 6
        assert "Timestamp,Content,Tags" in content


class TestImportErrors:

    def test_not_json(self):
        with pytest.raises(SessionImportError, match="Failed to parse import file"):
            import_session_json("{nope")

    def test_missing_required_fields(self):
        with pytest.raises(SessionImportError):
            import_session_json(json.dumps({"id": "calm-tiger-42", "name": "x"}))

    def test_not_an_object(self):
        with pytest.raises(SessionImportError):
            import_session_json("[1, 2, 3]")

    def test_invalid_values(self):
        document = make_session().to_wire()
        document["entries"] = [{"id": "x", "timestamp": "yesterday"}]
        with pytest.raises(SessionImportError):
            import_session_json(json.dumps(document))

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(SessionImportError, match="Failed to read file"):
            import_session_file(tmp_path / "missing.json")


class TestWriteExport:

    def test_filename(self):
        assert export_filename("csv", date(2024, 5, 3)) == "fasting-session-2024-05-03.csv"

    def test_writes_json_file_that_imports_back(self, tmp_path, full_session):
        path = write_export(full_session, tmp_path / "exports", "json")

        assert path.parent == tmp_path / "exports"
        assert path.name.startswith("fasting-session-")
        assert import_session_file(path).entries == full_session.entries

    def test_writes_csv_file(self, tmp_path, full_session):
        path = write_export(full_session, tmp_path, "csv")
        assert path.suffix == ".csv"
        assert path.read_text(encoding="utf-8").startswith("=== CHECK-IN DATA ===")
