"""Case file persistence."""

import json
import tempfile
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from tlfusion.core.clock import SYSTEM_CLOCK, Clock
from tlfusion.core.errors import CaseNotFoundError, IOError, ParseError
from tlfusion.models.case import CASE_FORMAT_VERSION, CaseFile, CaseMetadata
from tlfusion.models.event import CanonicalEvent
from tlfusion.normalizer.timestamps import format_timestamp


class CaseManager:
    """Saves and loads case files.

    A case file is a JSON document with the working set under ``events``
    and save metadata (``savedAt``, ``version``, ``eventCount``) under
    ``metadata``.
    """

    def __init__(self, clock: Clock = SYSTEM_CLOCK) -> None:
        self.clock = clock

    def build(self, events: Sequence[CanonicalEvent]) -> CaseFile:
        """Wrap events in a CaseFile stamped with the current time."""
        return CaseFile(
            events=list(events),
            metadata=CaseMetadata(
                saved_at=format_timestamp(self.clock.now()),
                version=CASE_FORMAT_VERSION,
                event_count=len(events),
            ),
        )

    def save(self, events: Sequence[CanonicalEvent], path: Path) -> CaseFile:
        """Write events to a case file.

        Args:
            events: Working set in timeline order
            path: Destination file

        Returns:
            The CaseFile that was written
        """
        case_file = self.build(events)
        path = Path(path)
        text = json.dumps(case_file.to_json_dict(), indent=2, ensure_ascii=False)
        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Destination is only ever replaced by a complete sibling file
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(text)
            tmp_path.replace(path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise IOError(f"Cannot write case file: {e}", path=str(path))
        return case_file

    def load(self, path: Path) -> CaseFile:
        """Load a case file.

        A missing ``events`` key loads as an empty working set.

        Raises:
            CaseNotFoundError: If the file does not exist
            ParseError: If the file is not a valid case document
        """
        path = Path(path)
        if not path.exists():
            raise CaseNotFoundError(str(path))

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Malformed case file: {e}", path=str(path))

        if not isinstance(data, dict):
            raise ParseError("Case file must contain a JSON object", path=str(path))

        try:
            return CaseFile.model_validate(data)
        except PydanticValidationError as e:
            raise ParseError(f"Invalid case file: {e}", path=str(path))
