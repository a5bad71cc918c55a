"""Shared test fixtures for tlfusion."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from tlfusion.core.clock import FixedClock
from tlfusion.models.event import CanonicalEvent
from tlfusion.normalizer.timeline import TimelineNormalizer

FIXED_INSTANT = datetime(2025, 3, 1, 12, 30, 45, 123000, tzinfo=UTC)

SAMPLE_CSV = (
    "date,type,description,source\n"
    "2024-01-01 10:00:00,File Activity,Created document.txt,File System\n"
    "2024-01-01 10:01:00,Network,HTTP GET /api/data,Network Monitor\n"
)


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(FIXED_INSTANT)


@pytest.fixture
def normalizer(fixed_clock: FixedClock) -> TimelineNormalizer:
    return TimelineNormalizer(clock=fixed_clock)


@pytest.fixture
def sample_event() -> CanonicalEvent:
    return CanonicalEvent(
        id="evt-1",
        timestamp="2024-01-01T10:00:00.000Z",
        source="Sysmon",
        type="Process",
        summary="powershell.exe started",
        path="C:\\Windows\\System32\\WindowsPowerShell\\v1.0\\powershell.exe",
        raw={"EventID": 1},
        metadata={"host": "WS01"},
    )


@pytest.fixture
def sample_events() -> list[CanonicalEvent]:
    return [
        CanonicalEvent(
            id=f"evt-{i}",
            timestamp=f"2024-01-01T10:0{i}:00.000Z",
            source="Test",
            type="Test",
            summary=f"Test event {i}",
        )
        for i in range(4)
    ]


@pytest.fixture
def json_file(tmp_path: Path) -> Path:
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps(
            [
                {"id": "a-1", "timestamp": "2024-01-01T10:00:00Z", "source": "EDR", "type": "Process", "summary": "cmd.exe"},
                {"date": "2024-01-01T11:00:00Z", "origin": "Proxy", "eventType": "Network", "message": "HTTP GET"},
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "timeline.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path
