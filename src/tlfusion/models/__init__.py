"""Pydantic models for tlfusion."""

from tlfusion.models.case import CaseFile, CaseMetadata
from tlfusion.models.error import StructuredError
from tlfusion.models.event import CanonicalEvent, ImportResult

__all__ = [
    "CanonicalEvent",
    "CaseFile",
    "CaseMetadata",
    "ImportResult",
    "StructuredError",
]
