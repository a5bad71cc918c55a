"""Input format detection and file-level import."""

from pathlib import Path
from typing import Literal

from tlfusion.core import logging
from tlfusion.core.errors import IOError, ParseError, UnsupportedFormatError
from tlfusion.models.event import ImportResult
from tlfusion.normalizer.timeline import TimelineNormalizer

InputFormat = Literal["json", "csv"]

SUPPORTED_EXTENSIONS: dict[str, InputFormat] = {
    ".json": "json",
    ".csv": "csv",
}


def detect_format(path: Path | str) -> InputFormat:
    """Detect the input format from a file extension.

    Raises:
        UnsupportedFormatError: If the extension is not recognized
    """
    suffix = Path(path).suffix.lower()
    try:
        return SUPPORTED_EXTENSIONS[suffix]
    except KeyError:
        raise UnsupportedFormatError(str(path), sorted(SUPPORTED_EXTENSIONS))


def import_file(path: Path | str, normalizer: TimelineNormalizer | None = None) -> ImportResult:
    """Read and normalize one event log file.

    The format is checked before the file is opened.

    Args:
        path: JSON or CSV file
        normalizer: Configured normalizer (defaults to lenient settings)

    Returns:
        ImportResult with the normalized events and any CSV warnings

    Raises:
        UnsupportedFormatError: Unknown extension
        ParseError: Malformed JSON or undecodable text
        IOError: File cannot be read
    """
    path = Path(path)
    input_format = detect_format(path)
    normalizer = normalizer or TimelineNormalizer()

    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8: {e}", path=str(path))
    except OSError as e:
        raise IOError(f"Cannot read {path}: {e}", path=str(path))

    if input_format == "json":
        result = normalizer.parse_json_text(text, source_name=path.name)
    else:
        result = normalizer.parse_csv(text, source_name=path.name)

    logging.info(
        f"Imported {len(result.events)} events from {input_format.upper()}",
        file=path.name,
        warnings=len(result.warnings),
    )
    return result
