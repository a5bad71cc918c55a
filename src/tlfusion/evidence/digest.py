"""Content digests for tamper-evident event tracking.

Events are serialized with sorted keys and compact separators before
hashing, so a digest depends only on event content and is portable
across runs and implementations. Sequence digests are order-sensitive:
reordering a story changes its digest.
"""

import asyncio
import hashlib
import json
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from tlfusion.core.errors import DigestError
from tlfusion.models.event import CanonicalEvent

EventLike = CanonicalEvent | Mapping[str, Any]


class Hasher(Protocol):
    """Digest bytes to a lowercase hex string.

    Implementations signal failure with ValueError, TypeError, OSError or
    RuntimeError; anything else propagates unchanged.
    """

    def hexdigest(self, data: bytes) -> str:
        ...


class HashlibHasher:
    """Hasher backed by a hashlib algorithm."""

    def __init__(self, algorithm: str = "sha256") -> None:
        try:
            hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise DigestError(f"Hash algorithm unavailable: {e}", algorithm=algorithm)
        self.algorithm = algorithm

    def hexdigest(self, data: bytes) -> str:
        return hashlib.new(self.algorithm, data).hexdigest()


def canonical_bytes(event: EventLike) -> bytes:
    """Serialize an event deterministically for hashing.

    Absent optional fields (``None``) are omitted from CanonicalEvent
    instances; plain mappings are serialized as given.
    """
    if isinstance(event, CanonicalEvent):
        payload: Any = event.to_json_dict()
    else:
        payload = dict(event)
    try:
        text = json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise DigestError(f"Event is not serializable: {e}")
    return text.encode("utf-8")


class DigestEngine:
    """Computes event and event-sequence digests with an injected hasher."""

    def __init__(self, hasher: Hasher | None = None) -> None:
        self.hasher = hasher or HashlibHasher()

    def _digest(self, data: bytes) -> str:
        try:
            return self.hasher.hexdigest(data).lower()
        except DigestError:
            raise
        except (ValueError, TypeError, OSError, RuntimeError) as e:
            raise DigestError(f"Digest computation failed: {e}")

    async def hash_event(self, event: EventLike) -> str:
        """Hex digest of a single event."""
        return self._digest(canonical_bytes(event))

    async def hash_event_array(self, events: Sequence[EventLike]) -> str:
        """Order-sensitive digest of an event sequence.

        Per-event digests are computed concurrently, concatenated in
        sequence order, and hashed again.
        """
        hashes = await asyncio.gather(*(self.hash_event(e) for e in events))
        return self._digest("".join(hashes).encode("ascii"))

    async def verify_event_array(self, events: Sequence[EventLike], expected: str) -> bool:
        """Check a sequence against a previously recorded digest."""
        return await self.hash_event_array(events) == expected.strip().lower()

    def hash_event_sync(self, event: EventLike) -> str:
        """Blocking form of hash_event for non-async callers.

        Uses asyncio.run, so it raises RuntimeError inside a running event
        loop; async code awaits hash_event instead.
        """
        return asyncio.run(self.hash_event(event))

    def hash_event_array_sync(self, events: Sequence[EventLike]) -> str:
        """Blocking form of hash_event_array for non-async callers.

        Raises RuntimeError inside a running event loop, like hash_event_sync.
        """
        return asyncio.run(self.hash_event_array(events))


_default_engine = DigestEngine()


async def hash_event(event: EventLike) -> str:
    """SHA-256 hex digest of a single event."""
    return await _default_engine.hash_event(event)


async def hash_event_array(events: Sequence[EventLike]) -> str:
    """SHA-256 order-sensitive digest of an event sequence."""
    return await _default_engine.hash_event_array(events)
