"""Structured error model for tlfusion."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Structured error response format.

    All errors emitted by tlfusion follow this schema so callers can
    handle them programmatically and show an actionable remediation.
    """

    code: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Error code (e.g., PARSE_ERROR)",
        examples=[
            "PARSE_ERROR",
            "UNSUPPORTED_FORMAT",
            "INVALID_TIMESTAMP",
            "DIGEST_ERROR",
        ],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    remediation: str = Field(
        ...,
        description="Suggested fix or next step",
    )

    retryable: bool = Field(
        ...,
        description="Whether retry may succeed",
    )

    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (path, index, etc.)",
    )

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Standard error codes for tlfusion."""

    PARSE_ERROR = "PARSE_ERROR"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    DIGEST_ERROR = "DIGEST_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CASE_NOT_FOUND = "CASE_NOT_FOUND"
    STORY_ERROR = "STORY_ERROR"
    IO_ERROR = "IO_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
