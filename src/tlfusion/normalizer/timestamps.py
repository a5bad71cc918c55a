"""Timestamp canonicalization.

Every CanonicalEvent timestamp is rendered as a UTC instant with
millisecond precision and a ``Z`` suffix, e.g. ``2024-01-01T10:00:00.000Z``.
"""

import math
import re
from datetime import UTC, date, datetime, time
from typing import Any

from dateutil import parser as dt_parser

from tlfusion.core import logging
from tlfusion.core.clock import SYSTEM_CLOCK, Clock
from tlfusion.core.errors import TimestampError

ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T")


def format_timestamp(ts: datetime) -> str:
    """Render a datetime in canonical form.

    Naive datetimes are taken to be UTC. Sub-millisecond precision is
    truncated.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    ts = ts.astimezone(UTC)
    return (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}.{ts.microsecond // 1000:03d}Z"
    )


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a raw timestamp value into an aware datetime.

    Accepts ISO-8601 strings, free-form date strings, epoch
    milliseconds (int/float) and date/datetime values.

    Returns:
        Parsed datetime, or None if the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=UTC)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if ISO_PREFIX.match(text):
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            try:
                return dt_parser.isoparse(text)
            except ValueError:
                pass

    try:
        return dt_parser.parse(text)
    except (ValueError, OverflowError, TypeError):
        return None


def ensure_iso_timestamp(
    value: Any,
    clock: Clock = SYSTEM_CLOCK,
    strict: bool = False,
) -> str:
    """Canonicalize a timestamp value.

    Unparseable values are replaced by the clock's current instant and
    reported with a warning log. In strict mode they raise instead.

    Args:
        value: Raw timestamp (string, epoch milliseconds, date/datetime)
        clock: Source of the fallback instant
        strict: Raise TimestampError instead of substituting now

    Returns:
        Canonical UTC timestamp string

    Raises:
        TimestampError: If strict and the value cannot be parsed
    """
    parsed = parse_timestamp(value)
    if parsed is not None:
        try:
            return format_timestamp(parsed)
        except (OverflowError, ValueError):
            parsed = None

    if strict:
        raise TimestampError(value)

    logging.warning("Failed to parse timestamp, using current time", value=repr(value))
    return format_timestamp(clock.now())
