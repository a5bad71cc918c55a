"""Display lane classification for canonical events."""

from enum import IntEnum

from tlfusion.models.event import CanonicalEvent


class Lane(IntEnum):
    """Fixed timeline display lanes."""

    MEMORY = 1
    SYSTEM = 2
    USER = 3
    NETWORK = 4


# Checked in order; the first group with a keyword in the event text wins.
LANE_RULES: tuple[tuple[tuple[str, ...], Lane], ...] = (
    (("memory", "ram"), Lane.MEMORY),
    (("system", "process", "kernel"), Lane.SYSTEM),
    (("user", "login", "session"), Lane.USER),
    (("network", "http", "connection"), Lane.NETWORK),
)

DEFAULT_LANE = Lane.SYSTEM


def determine_lane(event: CanonicalEvent) -> Lane:
    """Assign an event to a display lane from its type, source and summary."""
    text = f"{event.type} {event.source} {event.summary}".lower()
    for keywords, lane in LANE_RULES:
        if any(keyword in text for keyword in keywords):
            return lane
    return DEFAULT_LANE
