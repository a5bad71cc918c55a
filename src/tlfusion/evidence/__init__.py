"""Tamper-evidence: event digests and curated stories."""

from tlfusion.evidence.digest import (
    DigestEngine,
    Hasher,
    HashlibHasher,
    canonical_bytes,
    hash_event,
    hash_event_array,
)
from tlfusion.evidence.story import Story, StoryItem

__all__ = [
    "DigestEngine",
    "Hasher",
    "HashlibHasher",
    "Story",
    "StoryItem",
    "canonical_bytes",
    "hash_event",
    "hash_event_array",
]
