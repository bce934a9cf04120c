"""
PuzzleDocument - the parsed contents of a .puz file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from puzkit.spec import (
    BLACKSQUARE,
    ENCODING,
    PuzzleType,
    SolutionState,
)

if TYPE_CHECKING:
    from puzkit.checksum import ChecksumReport
    from puzkit.numbering import ClueNumbering


@dataclass
class PuzzleDocument:
    """
    A loaded puzzle.

    Stored checksums are kept exactly as read, even when they disagree with
    the recomputed values in `checksums`.
    """

    # round-trip padding around the recognized region
    preamble: bytes = b""
    postscript: bytes = b""

    # checksums as stored in the header
    global_cksum: int = 0
    header_cksum: int = 0
    magic_cksum: int = 0

    file_version: str = "1.3"
    reserved1: str = "\0" * 2
    scrambled_cksum: int = 0
    reserved2: str = "\0" * 12

    width: int = 0
    height: int = 0
    solution: str = ""
    fill: str = ""

    title: str = ""
    author: str = ""
    copyright: str = ""
    clues: list[str] = field(default_factory=list)
    notes: str = ""

    # code -> raw payload, in the order the sections appeared in the file
    extensions: dict[str, bytes] = field(default_factory=dict)

    puzzle_type: PuzzleType | int = PuzzleType.NORMAL
    solution_state: SolutionState | int = SolutionState.UNLOCKED

    encoding: str = ENCODING
    checksums: ChecksumReport | None = None

    @property
    def version(self) -> str:
        return self.file_version

    @property
    def numclues(self) -> int:
        return len(self.clues)

    @property
    def grid(self) -> list[str]:
        """Fill grid as a list of row strings."""
        return [self.fill[r * self.width:(r + 1) * self.width] for r in range(self.height)]

    @property
    def solution_grid(self) -> list[str]:
        return [self.solution[r * self.width:(r + 1) * self.width] for r in range(self.height)]

    def cell(self, row: int, col: int) -> str:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"cell ({row}, {col}) outside {self.width}x{self.height} grid")
        return self.fill[row * self.width + col]

    def is_black(self, index: int) -> bool:
        return self.solution[index] == BLACKSQUARE

    def is_solution_locked(self) -> bool:
        return self.solution_state != SolutionState.UNLOCKED

    def is_diagramless(self) -> bool:
        return self.puzzle_type == PuzzleType.DIAGRAMLESS

    def has_extension(self, code: str) -> bool:
        return code in self.extensions

    def get_extension(self, code: str) -> bytes | None:
        return self.extensions.get(code)

    def clue_numbering(self) -> ClueNumbering:
        from puzkit.numbering import ClueNumbering

        return ClueNumbering(self.fill, self.clues, self.width, self.height)

    def __repr__(self) -> str:
        exts = ", ".join(self.extensions)
        return (
            f"PuzzleDocument(title={self.title!r}, size={self.width}x{self.height}, "
            f"clues={len(self.clues)}, extensions=[{exts}])"
        )
