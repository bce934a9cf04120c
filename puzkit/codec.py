"""
Directive Codec - decode/encode byte spans against a compact format string.

Grammar (whitespace is ignored anywhere):
    [<|>] directive*

    b / B   signed / unsigned 8-bit integer
    h / H   signed / unsigned 16-bit integer
    l / L   signed / unsigned 32-bit integer
    q / Q   signed / unsigned 64-bit integer
    x       one pad byte (consumed on decode, zero on encode)
    Ns      fixed-length string of N bytes, decoded as text

Usage:
    values = decode("<H 11s x H", data, offset=0)
    raw, fmt = encode([Value(DirectiveKind.UINT16, 7), Value(DirectiveKind.FIXED_STRING, "abc")])
    decode(fmt, raw)  # [7, "abc"]

The format language has no puzzle knowledge; text encoding is always passed in
by the caller.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, Sequence

from puzkit.errors import DirectiveError, FormatErrorKind
from puzkit.spec import ENCODING

logger = logging.getLogger(__name__)


class DirectiveKind(Enum):
    INT8 = "b"
    UINT8 = "B"
    INT16 = "h"
    UINT16 = "H"
    INT32 = "l"
    UINT32 = "L"
    INT64 = "q"
    UINT64 = "Q"
    FIXED_STRING = "s"
    PAD = "x"


_WIDTHS = {
    DirectiveKind.INT8: 1,
    DirectiveKind.UINT8: 1,
    DirectiveKind.INT16: 2,
    DirectiveKind.UINT16: 2,
    DirectiveKind.INT32: 4,
    DirectiveKind.UINT32: 4,
    DirectiveKind.INT64: 8,
    DirectiveKind.UINT64: 8,
    DirectiveKind.PAD: 1,
}

_BY_CHAR = {kind.value: kind for kind in _WIDTHS}


@dataclass(frozen=True)
class Directive:
    """One instruction of a format string."""

    kind: DirectiveKind
    width: int
    length: int | None = None  # only for FIXED_STRING

    @property
    def code(self) -> str:
        if self.kind is DirectiveKind.FIXED_STRING:
            return f"{self.length}s"
        return self.kind.value

    @property
    def is_value(self) -> bool:
        return self.kind is not DirectiveKind.PAD


@dataclass(frozen=True)
class FormatSpec:
    """A parsed format string: ordered directives plus byte order."""

    directives: tuple[Directive, ...]
    little_endian: bool = True

    @property
    def size(self) -> int:
        return sum(d.width for d in self.directives)

    @property
    def text(self) -> str:
        return ("<" if self.little_endian else ">") + "".join(d.code for d in self.directives)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Value:
    """A value tagged with the directive that encodes it.

    The caller picks the kind; nothing is inferred from the Python type.
    """

    kind: DirectiveKind
    data: Any = None

    def directive(self, encoding: str = ENCODING) -> Directive:
        if self.kind is DirectiveKind.FIXED_STRING:
            length = len(_to_bytes(self.data, encoding))
            return Directive(self.kind, length, length)
        return Directive(self.kind, _WIDTHS[self.kind])


# =============================================================================
# Parsing
# =============================================================================

@lru_cache(maxsize=128)
def parse_format(fmt: str) -> FormatSpec:
    """Parse a format string into a FormatSpec. Raises DirectiveError."""
    text = "".join(fmt.split())
    little_endian = True
    if text[:1] in ("<", ">"):
        little_endian = text[0] == "<"
        text = text[1:]

    directives: list[Directive] = []
    digits = ""
    for pos, c in enumerate(text):
        if c in "0123456789":
            digits += c
            continue
        if c == "s":
            if not digits:
                raise DirectiveError(
                    f"string directive at position {pos} has no length in {fmt!r}",
                    operation="parse format",
                )
            length = int(digits)
            directives.append(Directive(DirectiveKind.FIXED_STRING, length, length))
            digits = ""
            continue
        if digits:
            raise DirectiveError(
                f"length {digits} must be followed by 's', got {c!r} in {fmt!r}",
                operation="parse format",
            )
        kind = _BY_CHAR.get(c)
        if kind is None:
            raise DirectiveError(
                f"unsupported directive {c!r} in {fmt!r}",
                operation="parse format",
            )
        directives.append(Directive(kind, _WIDTHS[kind]))

    if digits:
        raise DirectiveError(
            f"format {fmt!r} ends with an unterminated length {digits}",
            operation="parse format",
        )
    spec = FormatSpec(tuple(directives), little_endian)
    logger.debug("format %r: %d directives, %d bytes", fmt, len(directives), spec.size)
    return spec


def _as_spec(spec: str | FormatSpec) -> FormatSpec:
    if isinstance(spec, FormatSpec):
        return spec
    return parse_format(spec)


@lru_cache(maxsize=128)
def _compile(spec: FormatSpec) -> struct.Struct:
    return struct.Struct(spec.text)


def size_of(spec: str | FormatSpec) -> int:
    """Total byte width of a format; never looks at data."""
    return _as_spec(spec).size


# =============================================================================
# Decoding
# =============================================================================

def decode(
    spec: str | FormatSpec,
    data: bytes,
    offset: int = 0,
    encoding: str = ENCODING,
) -> list[Any]:
    """Decode `data` at `offset` into a list of ints and strings.

    Pad bytes produce no value. Raises DirectiveError if fewer than
    size_of(spec) bytes are available from `offset`.
    """
    fs = _as_spec(spec)
    size = fs.size
    if offset < 0 or len(data) - offset < size:
        raise DirectiveError(
            f"need {size} bytes for {fs.text!r}, {max(len(data) - offset, 0)} available",
            kind=FormatErrorKind.TRUNCATED_DATA,
            offset=offset,
            operation="decode",
        )

    raw = _compile(fs).unpack_from(data, offset)
    values: list[Any] = []
    pos = offset
    for directive in fs.directives:
        if directive.kind is DirectiveKind.FIXED_STRING:
            item = raw[len(values)]
            try:
                item = item.decode(encoding)
            except UnicodeDecodeError as exc:
                raise DirectiveError(
                    f"cannot decode {directive.code!r} as {encoding}: {exc.reason}",
                    kind=FormatErrorKind.INVALID_TEXT,
                    offset=pos + exc.start,
                    operation="decode",
                ) from exc
            values.append(item)
        elif directive.is_value:
            values.append(raw[len(values)])
        pos += directive.width
    return values


def decode_values(
    spec: str | FormatSpec,
    data: bytes,
    offset: int = 0,
    encoding: str = ENCODING,
) -> list[Value]:
    """Like decode(), but each result is tagged with its directive kind."""
    fs = _as_spec(spec)
    plain = decode(fs, data, offset, encoding)
    kinds = [d.kind for d in fs.directives if d.is_value]
    return [Value(kind, item) for kind, item in zip(kinds, plain)]


# =============================================================================
# Encoding
# =============================================================================

def _to_bytes(data: Any, encoding: str) -> bytes:
    if data is None:
        return b""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return str(data).encode(encoding)


def encode(
    values: Iterable[Value],
    little_endian: bool = True,
    encoding: str = ENCODING,
) -> tuple[bytes, str]:
    """Encode tagged values. Returns the bytes and a format string that decodes them.

    Strings are written at exactly their encoded length.
    """
    values = list(values)
    directives = tuple(v.directive(encoding) for v in values)
    fs = FormatSpec(directives, little_endian)
    return _pack(fs, [v.data for v in values if v.kind is not DirectiveKind.PAD], encoding), fs.text


def pack(spec: str | FormatSpec, values: Sequence[Any], encoding: str = ENCODING) -> bytes:
    """Encode plain values against an existing format (pad bytes take no value)."""
    return _pack(_as_spec(spec), values, encoding)


def _pack(fs: FormatSpec, values: Sequence[Any], encoding: str) -> bytes:
    slots = [d for d in fs.directives if d.is_value]
    if len(slots) != len(values):
        raise DirectiveError(
            f"{fs.text!r} takes {len(slots)} values, got {len(values)}",
            operation="encode",
        )

    prepared: list[Any] = []
    for directive, item in zip(slots, values):
        if directive.kind is DirectiveKind.FIXED_STRING:
            item = _to_bytes(item, encoding)
            if len(item) > directive.length:
                raise DirectiveError(
                    f"string of {len(item)} bytes does not fit {directive.code!r}",
                    operation="encode",
                )
        prepared.append(item)

    try:
        return _compile(fs).pack(*prepared)
    except struct.error as exc:
        raise DirectiveError(f"cannot encode {fs.text!r}: {exc}", operation="encode") from exc
