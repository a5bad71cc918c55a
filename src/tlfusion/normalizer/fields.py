"""Column-name heuristics for CSV timeline exports.

The candidate lists are ordinary data: inspect them, extend them with
``FieldMapping.extended`` or load additions from YAML with
``load_field_mapping``.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from tlfusion.core.errors import ValidationError

CANONICAL_FIELDS = ("timestamp", "source", "type", "summary", "path")

# Column looked up literally when no header matches a field's candidates.
FALLBACK_COLUMNS = {
    "timestamp": "timestamp",
    "source": "source",
    "type": "type",
    "summary": "description",
    "path": "path",
}


class FieldMapping(BaseModel):
    """Ordered candidate substrings per canonical field."""

    timestamp: list[str] = Field(
        default_factory=lambda: ["date", "time", "timestamp", "datetime", "Date/Time", "MACB"]
    )
    source: list[str] = Field(
        default_factory=lambda: ["source", "type", "source_type", "Artifact"]
    )
    type: list[str] = Field(
        default_factory=lambda: ["type", "activity", "desc", "Description", "Short", "Activity"]
    )
    summary: list[str] = Field(
        default_factory=lambda: ["description", "summary", "message", "Short Description", "Long"]
    )
    path: list[str] = Field(
        default_factory=lambda: ["path", "file", "File Name", "file_name", "Filename"]
    )

    model_config = {"extra": "forbid", "frozen": True}

    def candidates(self, field: str) -> list[str]:
        """Return the candidate list for a canonical field."""
        if field not in CANONICAL_FIELDS:
            raise ValidationError(f"Unknown canonical field: {field}", field=field)
        return list(getattr(self, field))

    def extended(self, **additions: list[str]) -> "FieldMapping":
        """Return a mapping with extra candidates appended per field."""
        updates = {}
        for field, extra in additions.items():
            current = self.candidates(field)
            updates[field] = current + [c for c in extra if c not in current]
        return self.model_copy(update=updates)

    def find_column(self, field: str, headers: list[str]) -> str | None:
        """Detect the header holding a canonical field.

        A header equal to a candidate (case-insensitive, candidates in
        list order) wins. Otherwise the first header in file order that
        contains any candidate is used.

        Returns:
            Matching header, or None
        """
        candidates = [c.lower() for c in self.candidates(field)]
        lowered = [(h, h.lower()) for h in headers]

        for candidate in candidates:
            for header, low in lowered:
                if low == candidate:
                    return header

        for header, low in lowered:
            if any(c in low for c in candidates):
                return header

        return None

    def detect(self, headers: list[str]) -> dict[str, str]:
        """Resolve the column to read for every canonical field.

        Fields with no matching header map to their literal fallback
        column name, which is usually absent from the rows.
        """
        return {
            field: self.find_column(field, headers) or FALLBACK_COLUMNS[field]
            for field in CANONICAL_FIELDS
        }


DEFAULT_FIELD_MAPPING = FieldMapping()


def load_field_mapping(path: Path, base: FieldMapping = DEFAULT_FIELD_MAPPING) -> FieldMapping:
    """Load column candidates from a YAML file.

    The file maps canonical field names to lists of substrings. They are
    appended to ``base`` unless the top-level key ``replace`` is true.

    Example::

        replace: false
        timestamp: ["Created"]
        path: ["Location"]

    Raises:
        ValidationError: If the file is missing, malformed or names an
            unknown field
    """
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"Mapping file not found: {path}", field="mapping")

    try:
        with open(path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Mapping YAML parse error: {e}", field="mapping")

    if not isinstance(data, dict):
        raise ValidationError("Mapping file must contain a mapping", field="mapping")

    replace = bool(data.pop("replace", False))
    unknown = [k for k in data if k not in CANONICAL_FIELDS]
    if unknown:
        raise ValidationError(
            f"Unknown fields in mapping file: {', '.join(map(str, unknown))}",
            field="mapping",
        )

    for field, values in data.items():
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ValidationError(f"Candidates for '{field}' must be a list of strings", field=field)

    if replace:
        return base.model_copy(update=data)
    return base.extended(**data)
