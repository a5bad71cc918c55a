"""Batch-scoped event id generation."""

from uuid import uuid4


class IdGenerator:
    """Generates ids unique within and across normalization batches.

    Ids have the form ``{tag}-{batch}-{index}``. The batch part is random,
    so two imports run in the same millisecond still get distinct ids.
    """

    def __init__(self, tag: str, batch_id: str | None = None) -> None:
        self.tag = tag
        self.batch_id = batch_id or uuid4().hex[:12]

    def for_index(self, index: int) -> str:
        """Return the id for the record at ``index`` in this batch."""
        return f"{self.tag}-{self.batch_id}-{index}"
