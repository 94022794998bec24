"""
Custom exceptions for the redbook converters.

Document-level misses never raise; these cover the cases a caller or the
bulk converter has to act on.
"""

from typing import Any, Dict, Optional


class RedbookError(Exception):
    """Base exception for all redbook errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class UnsupportedFormatError(RedbookError):
    """The bulk file format could not be resolved or is not handled."""

    pass


class UnparsableDocumentError(RedbookError):
    """A grant document is still malformed after markup clean-up.

    Raised by the PATDOC extractor; the bulk converter treats it as a failure
    of the whole bulk file.
    """

    def __init__(self, message: str, chunk_index: Optional[int] = None, reason: Optional[str] = None) -> None:
        super().__init__(message, {"chunk_index": chunk_index, "reason": reason})
        self.chunk_index = chunk_index
        self.reason = reason
