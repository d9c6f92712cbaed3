"""Exception types raised by the report pipeline."""

from __future__ import annotations


class ReportError(RuntimeError):
    """Base class for request-level report failures."""


class ReportValidationError(ReportError):
    """Raised when a report request is missing required input."""


class ReportGenerationError(ReportError):
    """Raised when a report request fails after validation."""

    DEFAULT_MESSAGE = "Failed to generate summary"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class MalformedLogLine(ValueError):
    """Raised when a git log line does not match the expected field layout."""


class LLMError(RuntimeError):
    """Raised when the text-generation backend fails."""


__all__ = [
    "LLMError",
    "MalformedLogLine",
    "ReportError",
    "ReportGenerationError",
    "ReportValidationError",
]
