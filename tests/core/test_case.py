"""Tests for case file persistence."""

import json
from pathlib import Path

import pytest

from tlfusion.core.case import CaseManager
from tlfusion.core.errors import CaseNotFoundError, IOError, ParseError
from tlfusion.models.event import CanonicalEvent


class TestCaseRoundTrip:
    def test_save_then_load(self, tmp_path: Path, fixed_clock, normalizer, csv_file: Path):
        events = normalizer.normalize_csv(csv_file.read_text(encoding="utf-8"))
        events += normalizer.normalize_json([{"id": "x", "timestamp": "2024-01-01T00:00:00Z", "source": "S", "extra": [1, 2]}])
        path = tmp_path / "case.json"

        CaseManager(clock=fixed_clock).save(events, path)
        loaded = CaseManager().load(path)

        assert loaded.events == events
        assert loaded.metadata.event_count == 3
        assert loaded.metadata.saved_at == "2025-03-01T12:30:45.123Z"
        assert loaded.metadata.version == "1.0"

    def test_file_layout(self, tmp_path: Path, fixed_clock, sample_event: CanonicalEvent):
        path = tmp_path / "nested" / "case.json"
        CaseManager(clock=fixed_clock).save([sample_event], path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == {"events", "metadata"}
        assert data["metadata"] == {
            "savedAt": "2025-03-01T12:30:45.123Z",
            "version": "1.0",
            "eventCount": 1,
        }
        assert data["events"][0]["id"] == "evt-1"

    def test_missing_events_key(self, tmp_path: Path):
        path = tmp_path / "case.json"
        path.write_text('{"metadata": {"savedAt": "2024-01-01T00:00:00.000Z", "eventCount": 0}}', encoding="utf-8")
        assert CaseManager().load(path).events == []


class TestCaseErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(CaseNotFoundError):
            CaseManager().load(tmp_path / "absent.json")

    @pytest.mark.parametrize(
        "content",
        [
            "{broken",
            "[]",
            '{"events": [{"id": "x", "timestamp": "yesterday"}]}',
        ],
    )
    def test_invalid_content(self, tmp_path: Path, content: str):
        path = tmp_path / "case.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ParseError):
            CaseManager().load(path)


class TestCaseFidelity:
    def test_null_extras_survive_round_trip(self, tmp_path: Path, fixed_clock, normalizer):
        events = normalizer.normalize_json(
            [{"id": "1", "timestamp": "2024-01-01T00:00:00Z", "source": "s", "host": None}]
        )
        path = tmp_path / "case.json"

        CaseManager(clock=fixed_clock).save(events, path)
        loaded = CaseManager().load(path)

        assert loaded.events == events
        assert json.loads(path.read_text(encoding="utf-8"))["events"][0]["host"] is None

    def test_absent_optionals_not_written(self, tmp_path: Path, fixed_clock):
        path = tmp_path / "case.json"
        event = CanonicalEvent(id="x", timestamp="2024-01-01T00:00:00.000Z")
        CaseManager(clock=fixed_clock).save([event], path)

        written = json.loads(path.read_text(encoding="utf-8"))["events"][0]
        assert not {"path", "raw", "metadata"} & set(written)

    def test_failed_save_keeps_previous_file(self, tmp_path: Path, fixed_clock, sample_event, monkeypatch):
        path = tmp_path / "case.json"
        path.write_text('{"events": []}', encoding="utf-8")

        def fail_replace(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail_replace)
        with pytest.raises(IOError):
            CaseManager(clock=fixed_clock).save([sample_event], path)

        assert path.read_text(encoding="utf-8") == '{"events": []}'
        assert [p.name for p in tmp_path.iterdir()] == ["case.json"]
