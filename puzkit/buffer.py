"""
ByteCursor - sequential reader over an immutable byte buffer.

Wraps puzzle data with a read position and the .puz-specific reads:
magic-string seek, NUL-terminated strings, fixed-length reads and
directive decoding through the codec.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from puzkit import codec
from puzkit.codec import FormatSpec
from puzkit.errors import FormatErrorKind, PuzzleFormatError
from puzkit.spec import ENCODING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    """seek_to() located the marker; position is where the cursor now sits."""

    position: int


@dataclass(frozen=True)
class NotFound:
    """seek_to() did not locate the marker; the cursor is at end of buffer."""


NOT_FOUND = NotFound()

SeekResult = Union[Found, NotFound]


class ByteCursor:
    """
    Read-only view of a byte buffer with a moving position.

    Usage:
        cur = ByteCursor(data)
        if isinstance(cur.seek_to(b"ACROSS&DOWN", -2), NotFound):
            ...
        cksum, magic = cur.decode("<H 11s x")[:2]
        title = cur.read_string()
    """

    def __init__(self, data: bytes, encoding: str = ENCODING) -> None:
        self._data = bytes(data)
        self._pos = 0
        self.encoding = encoding

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._pos, 0)

    def can_read(self, n_bytes: int = 1) -> bool:
        return self._pos >= 0 and self._pos + n_bytes <= len(self._data)

    def _require(self, n_bytes: int, operation: str) -> None:
        if not self.can_read(n_bytes):
            raise PuzzleFormatError(
                f"need {n_bytes} bytes, {self.remaining} remain",
                FormatErrorKind.TRUNCATED_DATA,
                offset=self._pos,
                operation=operation,
            )

    def seek_to(self, marker: bytes | str, offset: int = 0) -> SeekResult:
        """Move to the first occurrence of `marker` in the buffer, plus `offset`.

        The search always starts at the beginning of the buffer.
        """
        if isinstance(marker, str):
            marker = marker.encode(self.encoding)
        index = self._data.find(marker) if marker else -1
        if index < 0:
            self._pos = len(self._data)
            return NOT_FOUND
        self._pos = index + offset
        return Found(self._pos)

    def skip(self, n_bytes: int) -> None:
        self._require(n_bytes, "skip")
        self._pos += n_bytes

    def read_bytes(self, n_bytes: int) -> bytes:
        self._require(n_bytes, "read")
        start = self._pos
        self._pos += n_bytes
        chunk = self._data[start:self._pos]
        logger.debug("read %d bytes at %d", n_bytes, start)
        return chunk

    def _text(self, chunk: bytes, start: int, operation: str) -> str:
        try:
            return chunk.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise PuzzleFormatError(
                f"cannot decode as {self.encoding}: {exc.reason}",
                FormatErrorKind.INVALID_TEXT,
                offset=start + exc.start,
                operation=operation,
            ) from exc

    def read_fixed(self, n_bytes: int) -> str:
        start = self._pos
        return self._text(self.read_bytes(n_bytes), start, "read")

    def read_terminated(self, terminator: int = 0) -> str:
        """Read up to (not including) `terminator` and step past it."""
        start = self._pos
        end = self._data.find(bytes([terminator]), max(start, 0))
        if start < 0 or end < 0:
            raise PuzzleFormatError(
                f"no terminator {terminator:#04x} before end of data",
                FormatErrorKind.UNTERMINATED_STRING,
                offset=start,
                operation="read string",
            )
        value = self._text(self._data[start:end], start, "read string")
        self._pos = end + 1
        return value

    def read_string(self) -> str:
        return self.read_terminated(0)

    def can_decode(self, spec: str | FormatSpec) -> bool:
        return self.can_read(codec.size_of(spec))

    def decode(self, spec: str | FormatSpec) -> list[Any]:
        values = codec.decode(spec, self._data, self._pos, self.encoding)
        self._pos += codec.size_of(spec)
        return values

    def read_remaining(self) -> bytes:
        return self.read_bytes(self.remaining)

    def read_to_end(self) -> str:
        start = self._pos
        return self._text(self.read_remaining(), start, "read")

    def preceding(self) -> bytes:
        """Bytes before the current position."""
        return self._data[:max(self._pos, 0)]
