"""Stories: curated, ordered event sequences with investigator notes.

A story's combined digest covers the events in story order, so moving an
item is detectable as tampering. Notes are annotations owned by the
story and never take part in hashing.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tlfusion.core.clock import SYSTEM_CLOCK, Clock
from tlfusion.core.errors import StoryError
from tlfusion.evidence.digest import DigestEngine
from tlfusion.models.event import CanonicalEvent
from tlfusion.normalizer.lanes import determine_lane
from tlfusion.normalizer.timestamps import format_timestamp


class StoryItem(BaseModel):
    """One event in a story."""

    event: CanonicalEvent
    note: str = ""
    hash: str = Field(..., pattern=r"^[a-f0-9]+$")


class Story:
    """Ordered subset of canonical events with notes."""

    def __init__(
        self,
        author: str | None = None,
        engine: DigestEngine | None = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> None:
        self.author = author
        self.engine = engine or DigestEngine()
        self.clock = clock
        self.items: list[StoryItem] = []

    def __len__(self) -> int:
        return len(self.items)

    @property
    def events(self) -> list[CanonicalEvent]:
        return [item.event for item in self.items]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.items):
            raise StoryError(f"Story has no item at position {index}")

    async def add(self, event: CanonicalEvent, note: str = "") -> StoryItem:
        """Append an event to the story.

        Raises:
            StoryError: If an event with the same id is already present
        """
        if any(item.event.id == event.id for item in self.items):
            raise StoryError("Event already in story", event_id=event.id)

        item = StoryItem(event=event, note=note, hash=await self.engine.hash_event(event))
        self.items.append(item)
        return item

    def remove(self, index: int) -> StoryItem:
        """Remove and return the item at ``index``."""
        self._check_index(index)
        return self.items.pop(index)

    def move(self, source: int, destination: int) -> None:
        """Move the item at ``source`` so it ends up at ``destination``."""
        self._check_index(source)
        self._check_index(destination)
        item = self.items.pop(source)
        self.items.insert(destination, item)

    def annotate(self, index: int, note: str) -> None:
        """Replace the investigator note of an item."""
        self._check_index(index)
        self.items[index] = self.items[index].model_copy(update={"note": note})

    async def digest(self) -> str:
        """Combined order-sensitive digest; empty string for an empty story."""
        if not self.items:
            return ""
        return await self.engine.hash_event_array(self.events)

    async def verify(self, expected: str) -> bool:
        """Check the current story against a recorded combined digest."""
        if not self.items:
            return expected.strip() == ""
        return await self.engine.verify_event_array(self.events, expected)

    async def to_report(self, generated_at: datetime | None = None) -> dict[str, Any]:
        """Build the data a report renderer needs for this story."""
        generated_at = generated_at or self.clock.now()
        return {
            "author": self.author or "Unknown",
            "generated": format_timestamp(generated_at),
            "total_events": len(self.items),
            "story_hash": await self.digest(),
            "items": [
                {
                    "position": position,
                    "lane": int(determine_lane(item.event)),
                    "event": item.event.to_json_dict(),
                    "note": item.note,
                    "hash": item.hash,
                }
                for position, item in enumerate(self.items, start=1)
            ],
        }
