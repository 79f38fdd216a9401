"""Error kinds raised by the ingestion pipeline.

Every error is a deterministic function of the input; nothing here is
retryable.
"""

from typing import Any, Optional


class IngestionError(Exception):
    """Base class for ingestion failures.

    Args:
        message: Human-readable description
        details: Optional list of machine-readable diagnostics
    """

    def __init__(self, message: str, details: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-compatible payload."""
        payload: dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class UnsupportedFormatError(IngestionError):
    """Raised when no decoder is registered for a file's extension."""

    def __init__(self, file_name: str, extension: str):
        shown = f".{extension}" if extension else "(none)"
        super().__init__(f"Unsupported file format: {shown} ({file_name})")
        self.file_name = file_name
        self.extension = extension


class InvalidFormatError(IngestionError):
    """Raised when content fails to parse under its format's grammar."""

    pass


class ConversionError(IngestionError):
    """Raised when a cell cannot be coerced to its column type."""

    def __init__(self, value: Any, column_type: str, reason: str = ""):
        message = f"Cannot convert {value!r} to {column_type}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.value = value
        self.column_type = column_type


class InputTooLargeError(IngestionError):
    """Raised when raw input exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Input is {size} bytes, exceeds limit of {limit} bytes")
        self.size = size
        self.limit = limit
