"""Timeline normalizer for heterogeneous event logs.

Converts JSON documents and CSV timeline exports into an ordered list
of CanonicalEvent records. Output order always equals input order.
"""

import csv
import io
import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from tlfusion.core import logging
from tlfusion.core.clock import SYSTEM_CLOCK, Clock
from tlfusion.core.errors import ParseError
from tlfusion.models.event import CanonicalEvent, ImportResult
from tlfusion.normalizer.fields import DEFAULT_FIELD_MAPPING, FieldMapping
from tlfusion.normalizer.ids import IdGenerator
from tlfusion.normalizer.timestamps import ensure_iso_timestamp, format_timestamp

EXTRA_CELLS_KEY = "__parsed_extra"

SUMMARY_PREVIEW_LENGTH = 100

# Keyword groups checked in order against a whole CSV row when the file
# has no type column.
ROW_TYPE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("file", "write", "modify"), "File System"),
    (("network", "http", "connection"), "Network"),
    (("process", "execute", "run"), "System"),
    (("user", "login", "auth"), "User Activity"),
    (("memory", "ram"), "Memory"),
)

JSON_ALIASES = {
    "timestamp": ("timestamp", "date", "time"),
    "source": ("source", "origin"),
    "type": ("type", "eventType"),
    "summary": ("summary", "description", "message"),
    "path": ("path", "file"),
}

JSON_DEFAULTS = {
    "source": "Unknown",
    "type": "Event",
    "summary": "No description",
}

TEXT_FIELDS = ("source", "type", "summary", "path")


def render_row(row: dict[str, Any]) -> str:
    """Compact JSON rendering of a CSV row."""
    return json.dumps(row, ensure_ascii=False, separators=(",", ":"))


def determine_type_from_row(row: dict[str, Any]) -> str:
    """Guess an event type from the full content of a CSV row."""
    text = render_row(row).lower()
    for keywords, event_type in ROW_TYPE_RULES:
        if any(keyword in text for keyword in keywords):
            return event_type
    return "Unknown"


def _first_present(record: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class TimelineNormalizer:
    """Normalizes raw JSON and CSV input into CanonicalEvent lists.

    Args:
        clock: Source of "now" for missing or unparseable timestamps
        field_mapping: CSV column candidates
        strict_timestamps: Raise on unparseable timestamps instead of
            substituting the current instant
    """

    def __init__(
        self,
        clock: Clock = SYSTEM_CLOCK,
        field_mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
        strict_timestamps: bool = False,
    ) -> None:
        self.clock = clock
        self.field_mapping = field_mapping
        self.strict_timestamps = strict_timestamps

    def normalize_json(self, data: Any) -> list[CanonicalEvent]:
        """Normalize a decoded JSON document (object or array)."""
        return self.parse_json(data).events

    def normalize_json_text(self, text: str) -> list[CanonicalEvent]:
        """Decode JSON text and normalize it.

        Raises:
            ParseError: If the text is not valid JSON
        """
        return self.parse_json_text(text).events

    def normalize_csv(self, text: str) -> list[CanonicalEvent]:
        """Normalize CSV text with a header row."""
        return self.parse_csv(text).events

    def parse_json_text(self, text: str, source_name: str | None = None) -> ImportResult:
        """Decode JSON text and normalize it into an ImportResult."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed JSON: {e}", path=source_name)
        return self.parse_json(data, source_name=source_name)

    def parse_json(self, data: Any, source_name: str | None = None) -> ImportResult:
        """Normalize a decoded JSON document into an ImportResult.

        A single record is treated as a one-element array.
        """
        records = data if isinstance(data, list) else [data]
        ids = IdGenerator("json")

        events = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise ParseError(
                    f"Record {index} is a {type(record).__name__}, expected an object",
                    path=source_name,
                    index=index,
                )
            events.append(self._normalize_record(record, index, ids, source_name))

        logging.debug("Normalized JSON records", count=len(events), batch=ids.batch_id)
        return ImportResult(
            format="json",
            source_name=source_name,
            batch_id=ids.batch_id,
            events=events,
        )

    def parse_csv(self, text: str, source_name: str | None = None) -> ImportResult:
        """Normalize CSV text into an ImportResult.

        Structural anomalies are collected as warnings; rows read before
        a tokenizer error are still returned.
        """
        ids = IdGenerator("csv")
        warnings: list[str] = []
        events: list[CanonicalEvent] = []

        if text.startswith("\ufeff"):
            text = text[1:]

        reader = csv.DictReader(io.StringIO(text), restkey=EXTRA_CELLS_KEY)
        try:
            headers = list(reader.fieldnames or [])
        except csv.Error as e:
            warnings.append(f"Header row could not be read: {e}")
            headers = []

        if headers:
            columns = self.field_mapping.detect(headers)
            logging.debug("Detected CSV columns", **columns)

            index = 0
            while True:
                try:
                    row = next(reader)
                except StopIteration:
                    break
                except csv.Error as e:
                    warnings.append(f"Line {reader.line_num}: {e}; stopped reading")
                    break

                row = self._clean_row(row, reader.line_num, warnings)
                events.append(self._normalize_row(row, index, headers, columns, ids))
                index += 1

        for message in warnings:
            logging.warning("CSV parse warning", detail=message, source=source_name)

        return ImportResult(
            format="csv",
            source_name=source_name,
            batch_id=ids.batch_id,
            events=events,
            warnings=warnings,
        )

    def _timestamp(self, value: Any) -> str:
        if not value:
            return format_timestamp(self.clock.now())
        return ensure_iso_timestamp(value, clock=self.clock, strict=self.strict_timestamps)

    def _normalize_record(
        self,
        record: dict[str, Any],
        index: int,
        ids: IdGenerator,
        source_name: str | None,
    ) -> CanonicalEvent:
        if record.get("id") and record.get("timestamp") and record.get("source"):
            data = dict(record)
            data["id"] = _as_text(record["id"])
            data["timestamp"] = self._timestamp(record["timestamp"])
            for field in TEXT_FIELDS:
                if field in data:
                    if data[field] is None:
                        del data[field]
                    else:
                        data[field] = _as_text(data[field])
        else:
            data = {
                "id": _as_text(record.get("id")) or ids.for_index(index),
                "timestamp": self._timestamp(_first_present(record, JSON_ALIASES["timestamp"])),
                "raw": record,
                "metadata": record.get("metadata") or {},
            }
            for field in TEXT_FIELDS:
                value = _as_text(_first_present(record, JSON_ALIASES[field]))
                data[field] = value or JSON_DEFAULTS.get(field)

        try:
            return CanonicalEvent.model_validate(data)
        except PydanticValidationError as e:
            raise ParseError(f"Record {index} is not a valid event: {e}", path=source_name, index=index)

    def _clean_row(self, row: dict[str, Any], line: int, warnings: list[str]) -> dict[str, Any]:
        if EXTRA_CELLS_KEY in row:
            warnings.append(f"Line {line}: too many fields, extra cells kept under {EXTRA_CELLS_KEY}")
        if any(value is None for value in row.values()):
            warnings.append(f"Line {line}: too few fields")
            row = {k: v for k, v in row.items() if v is not None}
        return row

    def _normalize_row(
        self,
        row: dict[str, Any],
        index: int,
        headers: list[str],
        columns: dict[str, str],
        ids: IdGenerator,
    ) -> CanonicalEvent:
        return CanonicalEvent(
            id=ids.for_index(index),
            timestamp=self._timestamp(row.get(columns["timestamp"])),
            source=row.get(columns["source"]) or "CSV",
            type=row.get(columns["type"]) or determine_type_from_row(row),
            summary=row.get(columns["summary"]) or render_row(row)[:SUMMARY_PREVIEW_LENGTH],
            path=row.get(columns["path"]) or None,
            raw=dict(row),
            metadata={
                "csvRow": dict(row),
                "headers": list(headers),
                "rowIndex": index,
            },
        )


_default_normalizer = TimelineNormalizer()


def normalize_json(data: Any) -> list[CanonicalEvent]:
    """Normalize a decoded JSON document with default settings."""
    return _default_normalizer.normalize_json(data)


def normalize_csv(text: str) -> list[CanonicalEvent]:
    """Normalize CSV text with default settings."""
    return _default_normalizer.normalize_csv(text)
