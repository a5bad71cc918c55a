"""Case file models for persisted working sets."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tlfusion.models.event import CanonicalEvent

CASE_FORMAT_VERSION = "1.0"


class CaseMetadata(BaseModel):
    """Metadata block written alongside the saved events."""

    saved_at: str = Field(
        ...,
        alias="savedAt",
        description="ISO-8601 save timestamp",
    )

    version: str = Field(
        default=CASE_FORMAT_VERSION,
        description="Case file format version",
    )

    event_count: int = Field(
        ...,
        alias="eventCount",
        ge=0,
        description="Number of events in the case",
    )

    model_config = ConfigDict(populate_by_name=True)


class CaseFile(BaseModel):
    """Persisted case: the events of a working set and save metadata."""

    events: list[CanonicalEvent] = Field(
        default_factory=list,
        description="Canonical events in timeline order",
    )

    metadata: CaseMetadata | None = Field(
        default=None,
        description="Save metadata",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict matching the case file layout."""
        data: dict[str, Any] = {
            "events": [event.to_json_dict() for event in self.events],
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata.model_dump(mode="json", by_alias=True)
        return data
