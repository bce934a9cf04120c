"""puzkit - Across Lite .puz crossword reader."""

from puzkit.document import PuzzleDocument
from puzkit.errors import ChecksumError, DirectiveError, FormatErrorKind, PuzzleFormatError
from puzkit.numbering import ClueEntry, ClueNumbering, Direction
from puzkit.reader import PuzzleReader, load, read
from puzkit.spec import Extensions, GridMarkup, PuzzleType, SolutionState
from puzkit.writer import PuzzleWriter

__version__ = "0.1.0"

__all__ = [
    "ChecksumError",
    "ClueEntry",
    "ClueNumbering",
    "Direction",
    "DirectiveError",
    "Extensions",
    "FormatErrorKind",
    "GridMarkup",
    "PuzzleDocument",
    "PuzzleFormatError",
    "PuzzleReader",
    "PuzzleType",
    "PuzzleWriter",
    "SolutionState",
    "load",
    "read",
]
