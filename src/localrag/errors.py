"""Exception types raised by LocalRAG."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class LocalRAGError(Exception):
    """Base class for every error raised by this package."""


class NotFoundError(LocalRAGError):
    """Raised when a source file or folder does not exist."""

    def __init__(self, path: Path | str, what: str = "File") -> None:
        self.path = Path(path)
        super().__init__(f"{what} not found: {self.path}")


class ExtractionErrorKind(str, Enum):
    EMPTY_CONTENT = "empty_content"
    DECODE_FAILURE = "decode_failure"
    UNSUPPORTED_TYPE = "unsupported_type"


class ExtractionError(LocalRAGError):
    """Raised when text cannot be extracted from a document."""

    def __init__(self, path: Path | str, kind: ExtractionErrorKind, message: str) -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(message)


class UnsupportedTypeError(ExtractionError, ValueError):
    """Raised for file extensions outside the supported set."""

    def __init__(self, path: Path | str, file_type: str) -> None:
        self.file_type = file_type
        super().__init__(
            path, ExtractionErrorKind.UNSUPPORTED_TYPE, f"Unsupported file type: {file_type}"
        )


class StorageCorruptionError(LocalRAGError):
    """Raised when a table file exists but does not hold a JSON array."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Corrupt table file {self.path}: {reason}")


class FilterError(LocalRAGError, ValueError):
    """Raised for filter expressions the store does not understand."""
