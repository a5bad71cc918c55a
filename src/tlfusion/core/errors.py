"""Structured error handling for tlfusion."""

import sys
from typing import Any, NoReturn

from tlfusion.models.error import ErrorCode, StructuredError


class TlfusionError(Exception):
    """Base exception for tlfusion errors.

    Wraps a StructuredError for consistent error handling.
    """

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured(self) -> StructuredError:
        """Convert to StructuredError."""
        return self.error

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class ParseError(TlfusionError):
    """Input could not be parsed as a whole."""

    def __init__(self, message: str, path: str | None = None, index: int | None = None):
        context: dict[str, Any] = {}
        if path:
            context["path"] = path
        if index is not None:
            context["index"] = index
        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=message,
            remediation="Check the input file for corruption or unsupported structure",
            retryable=False,
            context=context or None,
        )


class UnsupportedFormatError(TlfusionError):
    """File extension not recognized as an importable format."""

    def __init__(self, path: str, supported: list[str]):
        super().__init__(
            code=ErrorCode.UNSUPPORTED_FORMAT,
            message=f"Unsupported file format: {path}",
            remediation=f"Supported extensions: {', '.join(supported)}",
            retryable=False,
            context={"path": path, "supported": supported},
        )


class TimestampError(TlfusionError):
    """Timestamp could not be parsed (strict mode only)."""

    def __init__(self, value: Any):
        super().__init__(
            code=ErrorCode.INVALID_TIMESTAMP,
            message=f"Unparseable timestamp: {value!r}",
            remediation="Fix the timestamp column or disable strict timestamps",
            retryable=False,
            context={"value": repr(value)},
        )


class DigestError(TlfusionError):
    """Hash computation failed."""

    def __init__(self, message: str, algorithm: str | None = None):
        super().__init__(
            code=ErrorCode.DIGEST_ERROR,
            message=message,
            remediation="Use a hash algorithm available in this Python build",
            retryable=False,
            context={"algorithm": algorithm} if algorithm else None,
        )


class ValidationError(TlfusionError):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            remediation="Check the input parameters and try again",
            retryable=False,
            context={"field": field} if field else None,
        )


class CaseNotFoundError(TlfusionError):
    """Case file not found."""

    def __init__(self, path: str):
        super().__init__(
            code=ErrorCode.CASE_NOT_FOUND,
            message=f"No case file found at {path}",
            remediation="Create one with 'tlfusion case save'",
            retryable=False,
            context={"path": path},
        )


class StoryError(TlfusionError):
    """Invalid story operation."""

    def __init__(self, message: str, event_id: str | None = None):
        super().__init__(
            code=ErrorCode.STORY_ERROR,
            message=message,
            remediation="Check the story contents and try again",
            retryable=False,
            context={"event_id": event_id} if event_id else None,
        )


class IOError(TlfusionError):
    """I/O error."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            code=ErrorCode.IO_ERROR,
            message=message,
            remediation="Check file permissions and path accessibility",
            retryable=True,
            context={"path": path} if path else None,
        )


def handle_error(error: TlfusionError | Exception, exit_code: int = 1) -> NoReturn:
    """Handle an error by outputting it and exiting.

    Args:
        error: The error to handle
        exit_code: Exit code to use
    """
    from tlfusion.cli.output import output_error

    if isinstance(error, TlfusionError):
        output_error(error.to_structured())
    else:
        structured = StructuredError(
            code=ErrorCode.INTERNAL_ERROR,
            message=str(error),
            remediation="This is an unexpected error. Please report it.",
            retryable=False,
            context={"type": type(error).__name__},
        )
        output_error(structured)

    sys.exit(exit_code)
