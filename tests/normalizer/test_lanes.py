"""Tests for display lane classification."""

import pytest

from tlfusion.models.event import CanonicalEvent
from tlfusion.normalizer.lanes import Lane, determine_lane


def _event(type: str, source: str, summary: str = "No description") -> CanonicalEvent:
    return CanonicalEvent(
        id="e",
        timestamp="2024-01-01T00:00:00.000Z",
        type=type,
        source=source,
        summary=summary,
    )


@pytest.mark.parametrize(
    "type,source,expected",
    [
        ("Memory", "RAM", Lane.MEMORY),
        ("System", "Kernel", Lane.SYSTEM),
        ("User", "Auth", Lane.USER),
        ("Network", "TCP", Lane.NETWORK),
        ("Event", "Unknown", Lane.SYSTEM),
    ],
)
def test_lane_examples(type, source, expected):
    assert determine_lane(_event(type, source)) == expected


def test_lane_values():
    assert determine_lane(_event("Memory", "RAM")) == 1
    assert determine_lane(_event("Network", "TCP")) == 4


def test_summary_participates():
    assert determine_lane(_event("Event", "Sensor", "Outbound connection to 10.0.0.5")) == Lane.NETWORK


def test_precedence_memory_first():
    assert determine_lane(_event("Network", "TCP", "Process memory scan")) == Lane.MEMORY


def test_deterministic():
    event = _event("User", "Auth", "User login")
    assert {determine_lane(event) for _ in range(5)} == {Lane.USER}
