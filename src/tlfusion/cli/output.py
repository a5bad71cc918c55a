"""Output formatting for the tlfusion CLI.

stdout carries only results (JSON, JSONL or a human table); logs and
warnings go to stderr.
"""

import json
import sys
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel

OutputFormat = Literal["json", "jsonl", "human"]

EVENT_COLUMNS = ["timestamp", "lane", "source", "type", "summary"]

_output_format: OutputFormat = "json"


def set_output_format(format: OutputFormat) -> None:
    """Set the global output format."""
    global _output_format
    _output_format = format


def get_output_format() -> OutputFormat:
    """Get the current output format."""
    return _output_format


class JSONEncoder(json.JSONEncoder):
    """JSON encoder for tlfusion types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", exclude_none=True)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    return data


def output_json(data: Any, file: Any = None) -> None:
    """Write data as a single JSON document."""
    file = file or sys.stdout
    json.dump(_plain(data), file, cls=JSONEncoder, ensure_ascii=False)
    file.write("\n")
    file.flush()


def output_jsonl(records: Iterable[Any], file: Any = None) -> None:
    """Write records as JSONL (one JSON object per line)."""
    file = file or sys.stdout
    for record in records:
        json.dump(_plain(record), file, cls=JSONEncoder, ensure_ascii=False)
        file.write("\n")
    file.flush()


def output_human(data: Any, title: str | None = None, file: Any = None) -> None:
    """Write data as indented key/value text."""
    file = file or sys.stdout

    if title:
        file.write(f"\n{title}\n")
        file.write("=" * len(title) + "\n\n")

    data = _plain(data)
    if isinstance(data, dict):
        _format_dict(data, file)
    elif isinstance(data, list):
        _format_list(data, file)
    else:
        file.write(f"{data}\n")
    file.flush()


def output_human_table(
    records: list[dict[str, Any]],
    columns: list[str] | None = None,
    file: Any = None,
    max_width: int = 60,
) -> None:
    """Write records as a fixed-width table."""
    file = file or sys.stdout

    if not records:
        file.write("No events.\n")
        return

    if columns is None:
        columns = [c for c in EVENT_COLUMNS if c in records[0]] or list(records[0])[:6]

    widths = {col: len(col) for col in columns}
    for record in records[:100]:
        for col in columns:
            widths[col] = min(max_width, max(widths[col], len(str(record.get(col, "")))))

    header = " | ".join(col.ljust(widths[col]) for col in columns)
    file.write(header + "\n")
    file.write("-" * len(header) + "\n")

    for record in records:
        cells = []
        for col in columns:
            value = record.get(col)
            text = "" if value is None else str(value)
            if len(text) > widths[col]:
                text = text[: widths[col] - 3] + "..."
            cells.append(text.ljust(widths[col]))
        file.write(" | ".join(cells) + "\n")

    file.write(f"\nTotal: {len(records)} events\n")
    file.flush()


def _format_dict(data: dict[str, Any], file: Any, indent: int = 0) -> None:
    prefix = "  " * indent
    for key, value in data.items():
        if isinstance(value, dict):
            file.write(f"{prefix}{key}:\n")
            _format_dict(value, file, indent + 1)
        elif isinstance(value, list):
            file.write(f"{prefix}{key}:\n")
            _format_list(value, file, indent + 1)
        else:
            file.write(f"{prefix}{key}: {value}\n")


def _format_list(data: list[Any], file: Any, indent: int = 0) -> None:
    prefix = "  " * indent
    for i, item in enumerate(data):
        if isinstance(item, dict):
            file.write(f"{prefix}[{i}]:\n")
            _format_dict(item, file, indent + 1)
        else:
            file.write(f"{prefix}- {item}\n")


def output(data: Any, format: OutputFormat | None = None, **kwargs: Any) -> None:
    """Write data in the given (or global) format."""
    format = format or _output_format

    if format == "jsonl" and isinstance(data, list):
        output_jsonl(data, **kwargs)
    elif format == "human":
        output_human(data, **kwargs)
    else:
        output_json(data, **kwargs)


def output_error(error: Any, file: Any = None) -> None:
    """Write an error to stdout in the current format.

    Errors go to stdout, not stderr, for programmatic handling.
    """
    output(error, file=file)


class OutputFormatter:
    """Encapsulates output formatting for commands."""

    def __init__(self, format: OutputFormat = "json"):
        self.format = format

    def output(self, data: Any) -> None:
        """Write a single result document."""
        output(data, format=self.format)

    def events(self, records: list[dict[str, Any]]) -> None:
        """Write a list of event dicts: a table, a JSON array or JSONL."""
        if self.format == "human":
            output_human_table(records)
        elif self.format == "jsonl":
            output_jsonl(records)
        else:
            output_json(records)

    def error(self, error: Any) -> None:
        """Write a structured error."""
        output(error, format=self.format)

    def is_human(self) -> bool:
        return self.format == "human"
