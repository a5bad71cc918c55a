"""Normalization pipeline for heterogeneous event logs.

Provides:
- TimelineNormalizer: JSON / CSV input to CanonicalEvent lists
- ensure_iso_timestamp: timestamp canonicalization
- FieldMapping: CSV column-name heuristics
- determine_lane: display lane classification
- import_file: extension-based format detection and file import
"""

from tlfusion.normalizer.fields import DEFAULT_FIELD_MAPPING, FieldMapping, load_field_mapping
from tlfusion.normalizer.formats import detect_format, import_file
from tlfusion.normalizer.lanes import Lane, determine_lane
from tlfusion.normalizer.timeline import (
    TimelineNormalizer,
    determine_type_from_row,
    normalize_csv,
    normalize_json,
)
from tlfusion.normalizer.timestamps import ensure_iso_timestamp

__all__ = [
    "DEFAULT_FIELD_MAPPING",
    "FieldMapping",
    "Lane",
    "TimelineNormalizer",
    "detect_format",
    "determine_lane",
    "determine_type_from_row",
    "ensure_iso_timestamp",
    "import_file",
    "load_field_mapping",
    "normalize_csv",
    "normalize_json",
]
