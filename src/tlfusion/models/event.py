"""CanonicalEvent and ImportResult models for tlfusion."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

CANONICAL_TIMESTAMP_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$"
OPTIONAL_FIELDS = ("path", "raw", "metadata")


class CanonicalEvent(BaseModel):
    """Normalized, format-independent representation of one timeline occurrence.

    Events are immutable once created. Fields carried by a pre-canonical
    JSON record that are not part of the schema are preserved as extras
    and take part in hashing.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique identifier within a working set",
    )

    timestamp: str = Field(
        ...,
        pattern=CANONICAL_TIMESTAMP_PATTERN,
        description="UTC instant, millisecond precision, Z suffix",
    )

    source: str = Field(
        default="Unknown",
        min_length=1,
        description="Free-text origin label",
    )

    type: str = Field(
        default="Event",
        description="Free-text category label",
    )

    summary: str = Field(
        default="No description",
        description="One-line human-readable description",
    )

    path: str | None = Field(
        default=None,
        description="Filesystem or resource path associated with the event",
    )

    raw: Any = Field(
        default=None,
        description="Original input record verbatim",
    )

    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Import metadata (CSV row, headers, row index, ...)",
    )

    model_config = ConfigDict(frozen=True, extra="allow")

    def to_json_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict, omitting absent optional fields.

        Only the schema's optional fields are dropped when ``None``; null
        extras carried over from the input record are kept.
        """
        absent = {name for name in OPTIONAL_FIELDS if getattr(self, name) is None}
        return self.model_dump(mode="json", exclude=absent)


class ImportResult(BaseModel):
    """Outcome of importing one input document."""

    format: Literal["json", "csv"] = Field(
        ...,
        description="Detected input format",
    )

    source_name: str | None = Field(
        default=None,
        description="File name the events were read from",
    )

    batch_id: str = Field(
        ...,
        description="Identifier shared by all ids generated in this import",
    )

    events: list[CanonicalEvent] = Field(
        default_factory=list,
        description="Normalized events in input order",
    )

    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal structural anomalies found while parsing",
    )
