"""
Clue numbering - assign standard crossword numbers to across/down entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from puzkit.spec import BLACKSQUARE


class Direction(Enum):
    ACROSS = "Across"
    DOWN = "Down"


@dataclass(frozen=True)
class ClueEntry:
    direction: Direction
    number: int
    text: str
    row: int
    col: int
    cell: int  # row-major index of the first cell
    length: int


class ClueNumbering:
    """
    Walks a row-major grid and pairs every entry with the next clue.

    A cell starts an across (down) entry when it is in the first column (row)
    or follows a black square, and the run it starts is longer than one cell.
    Every starting cell takes the next number; across is assigned before down.

        numbering = ClueNumbering(doc.fill, doc.clues, doc.width, doc.height)
        for entry in numbering.across:
            print(entry.number, entry.text)
    """

    def __init__(
        self,
        grid: str,
        clues: Sequence[str],
        width: int,
        height: int,
        blacksquare: str = BLACKSQUARE,
    ) -> None:
        self.grid = grid
        self.clues = clues
        self.width = width
        self.height = height
        if len(grid) != width * height:
            raise ValueError(
                f"grid has {len(grid)} cells, expected {width * height} for {width}x{height}"
            )
        self.blacksquare = blacksquare

        self.across: list[ClueEntry] = []
        self.down: list[ClueEntry] = []

        clue_index = 0
        number = 1
        for index in range(width * height):
            if self.is_black(index):
                continue

            started = False
            if self.col(index) == 0 or self.is_black(index - 1):
                length = self.len_across(index)
                if length > 1:
                    self.across.append(self._entry(Direction.ACROSS, number, clue_index, index, length))
                    clue_index += 1
                    started = True

            if self.row(index) == 0 or self.is_black(index - width):
                length = self.len_down(index)
                if length > 1:
                    self.down.append(self._entry(Direction.DOWN, number, clue_index, index, length))
                    clue_index += 1
                    started = True

            if started:
                number += 1

    def _entry(self, direction: Direction, number: int, clue_index: int, index: int, length: int) -> ClueEntry:
        if clue_index >= len(self.clues):
            raise ValueError(
                f"grid needs more than {len(self.clues)} clues "
                f"({direction.value.lower()} {number} has none)"
            )
        return ClueEntry(
            direction=direction,
            number=number,
            text=self.clues[clue_index],
            row=self.row(index),
            col=self.col(index),
            cell=index,
            length=length,
        )

    def is_black(self, index: int) -> bool:
        return self.grid[index] == self.blacksquare

    def col(self, index: int) -> int:
        return index % self.width

    def row(self, index: int) -> int:
        return index // self.width

    def len_across(self, index: int) -> int:
        length = 0
        for c in range(self.width - self.col(index)):
            if self.is_black(index + c):
                break
            length += 1
        return length

    def len_down(self, index: int) -> int:
        length = 0
        for r in range(self.height - self.row(index)):
            if self.is_black(index + r * self.width):
                break
            length += 1
        return length

    @property
    def entries(self) -> list[ClueEntry]:
        """All entries ordered by number, across before down."""
        return sorted(self.across + self.down, key=lambda e: (e.number, e.direction is Direction.DOWN))


def number_clues(
    grid: str,
    clues: Sequence[str],
    width: int,
    height: int,
) -> tuple[list[ClueEntry], list[ClueEntry]]:
    """Return (across, down) entries for a grid."""
    numbering = ClueNumbering(grid, clues, width, height)
    return numbering.across, numbering.down
