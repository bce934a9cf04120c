"""
Exceptions raised while decoding puzzle data.

Every fatal condition surfaces as a PuzzleFormatError (a ValueError) carrying
the byte offset where it happened and the operation that was attempted.
"""

from __future__ import annotations

from enum import Enum


class FormatErrorKind(Enum):
    MAGIC_NOT_FOUND = "magic not found"
    TRUNCATED_DATA = "truncated data"
    MALFORMED_DIRECTIVE = "malformed directive"
    UNTERMINATED_STRING = "unterminated string"
    INVALID_TEXT = "invalid text"
    CHECKSUM_MISMATCH = "checksum mismatch"


class PuzzleFormatError(ValueError):
    """
    Indicates a format error in puzzle data: missing magic, truncation,
    an unterminated string, a bad directive string or undecodable text.
    """

    def __init__(
        self,
        message: str,
        kind: FormatErrorKind,
        offset: int | None = None,
        operation: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.offset = offset
        self.operation = operation

    def __str__(self) -> str:
        where = f" at offset {self.offset}" if self.offset is not None else ""
        op = f" during {self.operation}" if self.operation else ""
        return f"{self.kind.value}{where}{op}: {self.message}"


class DirectiveError(PuzzleFormatError):
    """Raised by the directive codec for bad format strings or short buffers."""

    def __init__(
        self,
        message: str,
        kind: FormatErrorKind = FormatErrorKind.MALFORMED_DIRECTIVE,
        offset: int | None = None,
        operation: str = "",
    ) -> None:
        super().__init__(message, kind, offset, operation)


class ChecksumError(PuzzleFormatError):
    """Raised only by strict loads when a stored checksum disagrees."""

    def __init__(self, message: str, mismatches: list | None = None) -> None:
        super().__init__(message, FormatErrorKind.CHECKSUM_MISMATCH, operation="verify checksums")
        self.mismatches = mismatches or []
