"""
Puzzle Reader - load .puz bytes into a PuzzleDocument.

Load protocol:
  - Resync on the ACROSS&DOWN magic; the two bytes before it are the
    overall checksum and anything earlier is kept as the preamble
  - Fixed header, then solution and fill grids (width*height each)
  - title, author, copyright, one string per clue, notes
  - Extension sections until no full sub-header is left
  - Leftover bytes are kept as the postscript
  - Checksums are recomputed and compared; mismatches are logged, and only
    raise when the caller asks for a strict load
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Type, TypeVar

from puzkit import checksum
from puzkit.buffer import ByteCursor, NotFound
from puzkit.document import PuzzleDocument
from puzkit.errors import ChecksumError, FormatErrorKind, PuzzleFormatError
from puzkit.spec import (
    ACROSSDOWN,
    ENCODING,
    EXTENSION_HEADER_FORMAT,
    HEADER_FORMAT,
    MAX_FILE_SIZE,
    PuzzleType,
    SolutionState,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", PuzzleType, SolutionState)


def _enum_or_int(enum: Type[E], value: int) -> E | int:
    try:
        return enum(value)
    except ValueError:
        logger.warning("unknown %s value %#06x, keeping raw value", enum.__name__, value)
        return value


class PuzzleReader:
    """
    .puz file reader.

    Usage:
        doc = PuzzleReader.read("crossword.puz")
        doc = PuzzleReader.parse(data)
        doc = PuzzleReader.parse(data, strict=True)  # raise on bad checksums
    """

    @staticmethod
    def is_puz(path: str | Path) -> bool:
        """Check if a file contains the puzzle magic string."""
        with open(path, "rb") as f:
            return ACROSSDOWN in f.read(MAX_FILE_SIZE)

    @staticmethod
    def is_puz_bytes(data: bytes) -> bool:
        """Check if bytes contain the puzzle magic string."""
        return ACROSSDOWN in data

    @classmethod
    def read(
        cls,
        path: str | Path,
        max_size: int = MAX_FILE_SIZE,
        encoding: str = ENCODING,
        strict: bool = False,
    ) -> PuzzleDocument:
        """Read and parse a .puz file."""
        size = Path(path).stat().st_size
        if size > max_size:
            raise ValueError(f"File size {size} exceeds maximum of {max_size} bytes")
        with open(path, "rb") as f:
            data = f.read()
        return cls.parse(data, encoding=encoding, strict=strict)

    @classmethod
    def parse(cls, data: bytes, encoding: str = ENCODING, strict: bool = False) -> PuzzleDocument:
        """Parse puzzle bytes into a PuzzleDocument.

        Raises PuzzleFormatError for missing magic, truncation, an
        unterminated string or text that does not decode. With strict=True
        a checksum mismatch raises ChecksumError; otherwise it is only
        logged and recorded.
        """
        s = ByteCursor(data, encoding)

        # files may contain some data before the start of the puzzle;
        # use the magic string as a waypoint
        if isinstance(s.seek_to(ACROSSDOWN, -2), NotFound):
            raise PuzzleFormatError(
                "data does not appear to represent a puzzle",
                FormatErrorKind.MAGIC_NOT_FOUND,
                offset=len(data),
                operation="seek magic",
            )
        if s.position < 0:
            raise PuzzleFormatError(
                "no room for the overall checksum before the magic string",
                FormatErrorKind.TRUNCATED_DATA,
                offset=s.position,
                operation="seek magic",
            )

        doc = PuzzleDocument(encoding=encoding)
        doc.preamble = s.preceding()

        (
            doc.global_cksum,
            _magic,
            doc.header_cksum,
            doc.magic_cksum,
            doc.file_version,
            doc.reserved1,
            doc.scrambled_cksum,
            doc.reserved2,
            doc.width,
            doc.height,
            numclues,
            puzzle_type,
            solution_state,
        ) = s.decode(HEADER_FORMAT)

        doc.puzzle_type = _enum_or_int(PuzzleType, puzzle_type)
        doc.solution_state = _enum_or_int(SolutionState, solution_state)
        logger.debug(
            "header: version=%r size=%dx%d clues=%d type=%#06x state=%#06x",
            doc.file_version, doc.width, doc.height, numclues, puzzle_type, solution_state,
        )

        cells = doc.width * doc.height
        grid_start = s.position
        doc.solution = s.read_fixed(cells)
        doc.fill = s.read_fixed(cells)
        # multi-byte encodings can decode a grid to fewer cells than bytes
        if len(doc.solution) != cells or len(doc.fill) != cells:
            raise PuzzleFormatError(
                f"grids decode to {len(doc.solution)} and {len(doc.fill)} cells "
                f"as {encoding}, expected {cells}",
                FormatErrorKind.INVALID_TEXT,
                offset=grid_start,
                operation="read grid",
            )

        doc.title = s.read_string()
        doc.author = s.read_string()
        doc.copyright = s.read_string()

        doc.clues = [s.read_string() for _ in range(numclues)]

        doc.notes = s.read_string()

        ext_cksum: dict[str, int] = {}
        while s.can_decode(EXTENSION_HEADER_FORMAT):
            code, length, cksum = s.decode(EXTENSION_HEADER_FORMAT)
            # payloads may contain NULs, so read by length rather than as a string
            doc.extensions[code] = s.read_bytes(length)
            ext_cksum[code] = cksum
            # extensions have a trailing byte
            s.skip(1)
            logger.debug("extension %r: %d bytes, cksum %#06x", code, length, cksum)

        # sometimes there's some extra garbage at the end of the file,
        # usually \r\n
        if s.can_read():
            doc.postscript = s.read_remaining()

        doc.checksums = checksum.verify(doc, ext_cksum, encoding)
        for result in doc.checksums.mismatches:
            logger.warning(
                "%s checksum mismatch: stored %#x, calculated %#x",
                result.name, result.stored, result.computed,
            )

        if strict and not doc.checksums.ok:
            names = ", ".join(r.name for r in doc.checksums.mismatches)
            raise ChecksumError(f"checksum mismatch: {names}", doc.checksums.mismatches)

        return doc


def read(path: str | Path, **kwargs) -> PuzzleDocument:
    """Read a .puz file and return the PuzzleDocument."""
    return PuzzleReader.read(path, **kwargs)


def load(data: bytes, **kwargs) -> PuzzleDocument:
    """Parse .puz data and return the PuzzleDocument."""
    return PuzzleReader.parse(data, **kwargs)
