"""Working set of canonical events built up from successive imports."""

from collections.abc import Iterable
from pathlib import Path

from tlfusion.core.case import CaseManager
from tlfusion.core.clock import SYSTEM_CLOCK, Clock
from tlfusion.models.case import CaseFile
from tlfusion.models.event import CanonicalEvent, ImportResult
from tlfusion.normalizer.formats import import_file
from tlfusion.normalizer.lanes import Lane, determine_lane
from tlfusion.normalizer.timeline import TimelineNormalizer


class Workspace:
    """Additive event store.

    Each import is independent: a failed import raises before anything
    is appended, so previously loaded events are never touched.
    """

    def __init__(
        self,
        events: Iterable[CanonicalEvent] = (),
        normalizer: TimelineNormalizer | None = None,
    ) -> None:
        self.events: list[CanonicalEvent] = list(events)
        self.normalizer = normalizer or TimelineNormalizer()

    def __len__(self) -> int:
        return len(self.events)

    def add(self, events: Iterable[CanonicalEvent]) -> int:
        """Append events; returns how many were added."""
        new_events = list(events)
        self.events.extend(new_events)
        return len(new_events)

    def import_file(self, path: Path) -> ImportResult:
        """Import a JSON or CSV file and append its events."""
        result = import_file(path, normalizer=self.normalizer)
        self.add(result.events)
        return result

    def get(self, event_id: str) -> CanonicalEvent | None:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def search(self, query: str) -> list[CanonicalEvent]:
        """Case-insensitive substring search over summary, type, source and path."""
        needle = query.strip().lower()
        if not needle:
            return list(self.events)
        return [
            event
            for event in self.events
            if needle in event.summary.lower()
            or needle in event.type.lower()
            or needle in event.source.lower()
            or (event.path is not None and needle in event.path.lower())
        ]

    def lanes(self) -> dict[Lane, list[CanonicalEvent]]:
        """Group events by display lane, keeping timeline order in each lane."""
        grouped: dict[Lane, list[CanonicalEvent]] = {lane: [] for lane in Lane}
        for event in self.events:
            grouped[determine_lane(event)].append(event)
        return grouped

    def to_case(self, clock: Clock = SYSTEM_CLOCK) -> CaseFile:
        """Snapshot the working set as a CaseFile."""
        return CaseManager(clock=clock).build(self.events)

    @classmethod
    def from_case(cls, case_file: CaseFile, normalizer: TimelineNormalizer | None = None) -> "Workspace":
        return cls(case_file.events, normalizer=normalizer)
