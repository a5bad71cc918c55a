"""Tests for the additive workspace."""

from pathlib import Path

import pytest

from tlfusion.core.errors import ParseError, UnsupportedFormatError
from tlfusion.core.workspace import Workspace
from tlfusion.normalizer.lanes import Lane


@pytest.fixture
def workspace(normalizer, json_file: Path, csv_file: Path) -> Workspace:
    ws = Workspace(normalizer=normalizer)
    ws.import_file(json_file)
    ws.import_file(csv_file)
    return ws


class TestImports:
    def test_imports_are_additive(self, workspace: Workspace):
        assert len(workspace) == 4
        assert [e.source for e in workspace.events] == ["EDR", "Proxy", "File System", "Network Monitor"]

    def test_failed_import_leaves_events(self, workspace: Workspace, tmp_path: Path):
        broken = tmp_path / "broken.json"
        broken.write_text("[{]", encoding="utf-8")
        before = list(workspace.events)

        with pytest.raises(ParseError):
            workspace.import_file(broken)
        with pytest.raises(UnsupportedFormatError):
            workspace.import_file(tmp_path / "notes.txt")

        assert workspace.events == before

    def test_get(self, workspace: Workspace):
        assert workspace.get("a-1").summary == "cmd.exe"
        assert workspace.get("missing") is None


class TestSearch:
    def test_blank_query_returns_all(self, workspace: Workspace):
        assert workspace.search("  ") == workspace.events

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("HTTP", ["Proxy", "Network Monitor"]),
            ("edr", ["EDR"]),
            ("document.txt", ["File System"]),
        ],
    )
    def test_matches(self, workspace: Workspace, query, expected):
        assert [e.source for e in workspace.search(query)] == expected


def test_lanes(workspace: Workspace):
    lanes = workspace.lanes()
    assert set(lanes) == set(Lane)
    assert [e.source for e in lanes[Lane.NETWORK]] == ["Proxy", "Network Monitor"]
    assert sum(len(events) for events in lanes.values()) == 4


def test_case_round_trip(workspace: Workspace, fixed_clock):
    case_file = workspace.to_case(clock=fixed_clock)
    restored = Workspace.from_case(case_file)

    assert case_file.metadata.event_count == 4
    assert restored.events == workspace.events
