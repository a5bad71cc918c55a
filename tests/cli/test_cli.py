"""Tests for the tlfusion CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tlfusion.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _json(result) -> object:
    return json.loads(result.stdout)


class TestImport:
    def test_import_json_and_csv(self, runner: CliRunner, json_file: Path, csv_file: Path):
        result = runner.invoke(cli, ["import", str(json_file), str(csv_file), "--lanes", "--hash"])

        assert result.exit_code == 0, result.output
        events = _json(result)
        assert len(events) == 4
        assert events[0]["timestamp"] == "2024-01-01T10:00:00.000Z"
        assert events[1]["lane"] == 4
        assert len(events[2]["hash"]) == 64
        assert "Imported 2 events from CSV" in result.stderr

    def test_jsonl_output(self, runner: CliRunner, csv_file: Path):
        result = runner.invoke(cli, ["-f", "jsonl", "import", str(csv_file)])

        assert result.exit_code == 0
        lines = result.stdout.strip().splitlines()
        assert [json.loads(line)["type"] for line in lines] == ["File Activity", "Network"]

    def test_human_output(self, runner: CliRunner, csv_file: Path):
        result = runner.invoke(cli, ["--format", "human", "import", str(csv_file)])

        assert result.exit_code == 0
        assert "summary" in result.stdout
        assert "Total: 2 events" in result.stdout

    def test_unsupported_format(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        result = runner.invoke(cli, ["import", str(path)])

        assert result.exit_code == 1
        assert _json(result)["code"] == "UNSUPPORTED_FORMAT"

    def test_strict_timestamps(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "bad.csv"
        path.write_text("date,message\nsometime,hello\n", encoding="utf-8")

        lenient = runner.invoke(cli, ["import", str(path)])
        strict = runner.invoke(cli, ["import", str(path), "--strict-timestamps"])

        assert lenient.exit_code == 0
        assert strict.exit_code == 1
        assert _json(strict)["code"] == "INVALID_TIMESTAMP"

    def test_mapping_file(self, runner: CliRunner, tmp_path: Path):
        mapping = tmp_path / "mapping.yaml"
        mapping.write_text("timestamp: [Created]\nsummary: [Details]\n", encoding="utf-8")
        data = tmp_path / "custom.csv"
        data.write_text("Created,Details\n2024-05-05T05:05:05Z,custom\n", encoding="utf-8")

        result = runner.invoke(cli, ["import", str(data), "--mapping", str(mapping)])

        assert result.exit_code == 0
        [event] = _json(result)
        assert event["timestamp"] == "2024-05-05T05:05:05.000Z"
        assert event["summary"] == "custom"

    def test_config_file(self, runner: CliRunner, tmp_path: Path, csv_file: Path):
        config = tmp_path / "tlfusion.yaml"
        config.write_text("output_format: jsonl\n", encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(config), "import", str(csv_file)])

        assert result.exit_code == 0
        assert len(result.stdout.strip().splitlines()) == 2


class TestDigest:
    def test_digest_is_reproducible_for_identified_events(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "ids.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "1", "timestamp": "2024-01-01T00:00:00Z", "source": "A"},
                    {"id": "2", "timestamp": "2024-01-02T00:00:00Z", "source": "B"},
                ]
            ),
            encoding="utf-8",
        )

        first = _json(runner.invoke(cli, ["digest", str(path), "--per-event"]))
        second = _json(runner.invoke(cli, ["digest", str(path)]))

        assert first["digest"] == second["digest"]
        assert first["event_count"] == 2
        assert first["algorithm"] == "sha256"
        assert [e["id"] for e in first["events"]] == ["1", "2"]


class TestCaseAndStory:
    @pytest.fixture
    def case_path(self, runner: CliRunner, tmp_path: Path, json_file: Path) -> Path:
        path = tmp_path / "case.json"
        result = runner.invoke(cli, ["case", "save", str(json_file), "-o", str(path)])
        assert result.exit_code == 0, result.output
        assert _json(result)["metadata"]["eventCount"] == 2
        return path

    def test_case_show(self, runner: CliRunner, case_path: Path):
        result = runner.invoke(cli, ["case", "show", str(case_path)])

        assert result.exit_code == 0
        events = _json(result)
        assert [e["source"] for e in events] == ["EDR", "Proxy"]
        assert [e["lane"] for e in events] == [2, 4]

    def test_case_show_search(self, runner: CliRunner, case_path: Path):
        result = runner.invoke(cli, ["case", "show", str(case_path), "--search", "http"])
        assert [e["source"] for e in _json(result)] == ["Proxy"]

    def test_case_show_missing(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(cli, ["case", "show", str(tmp_path / "absent.json")])
        assert result.exit_code == 1
        assert _json(result)["code"] == "CASE_NOT_FOUND"

    def test_story_build_and_verify(self, runner: CliRunner, case_path: Path):
        events = json.loads(case_path.read_text(encoding="utf-8"))["events"]
        first_id, second_id = events[0]["id"], events[1]["id"]

        built = runner.invoke(
            cli,
            ["story", "build", str(case_path), "-e", first_id, "-e", second_id,
             "--author", "analyst", "--note", f"{second_id}=beacon"],
        )
        assert built.exit_code == 0, built.output
        report = _json(built)
        assert report["author"] == "analyst"
        assert report["items"][1]["note"] == "beacon"

        digest = report["story_hash"]
        same = runner.invoke(cli, ["story", "build", str(case_path), "-e", first_id, "-e", second_id, "--expect", digest])
        swapped = runner.invoke(cli, ["story", "build", str(case_path), "-e", second_id, "-e", first_id, "--expect", digest])

        assert same.exit_code == 0
        assert _json(same)["verified"] is True
        assert swapped.exit_code == 1
        assert _json(swapped)["verified"] is False

    def test_story_unknown_event(self, runner: CliRunner, case_path: Path):
        result = runner.invoke(cli, ["story", "build", str(case_path), "-e", "nope"])
        assert result.exit_code == 1
        assert _json(result)["code"] == "STORY_ERROR"

    def test_story_bad_note(self, runner: CliRunner, case_path: Path):
        result = runner.invoke(cli, ["story", "build", str(case_path), "-e", "a-1", "--note", "missing-separator"])
        assert result.exit_code == 2
