"""
Checksums - the rolling 16-bit checksum and the composite puzzle checksums.

    data_cksum()    rotate right one bit, add the byte, keep 16 bits
    header_cksum()  width, height, clue count, puzzle type, solution state
    text_cksum()    title/author/copyright (NUL-terminated), clues, notes (v1.3)
    global_cksum()  header -> solution -> fill -> text, chained
    magic_cksum()   four component checksums XOR-ed with "ICHEATED"

All functions are pure and take the text encoding explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping

from puzkit import codec
from puzkit.spec import ENCODING, HEADER_CKSUM_FORMAT, MASKSTRING, NOTES_CKSUM_VERSION

if TYPE_CHECKING:
    from puzkit.document import PuzzleDocument


def data_cksum(data: Iterable[int], cksum: int = 0) -> int:
    for b in data:
        # right-shift one with wrap-around
        lowbit = cksum & 0x0001
        cksum = cksum >> 1
        if lowbit:
            cksum = cksum | 0x8000

        # then add in the data and clear any carried bit past 16
        cksum = (cksum + b) & 0xFFFF

    return cksum


def header_cksum(doc: PuzzleDocument, cksum: int = 0) -> int:
    packed = codec.pack(
        HEADER_CKSUM_FORMAT,
        [doc.width, doc.height, len(doc.clues), int(doc.puzzle_type), int(doc.solution_state)],
    )
    return data_cksum(packed, cksum)


def text_cksum(doc: PuzzleDocument, cksum: int = 0, encoding: str = ENCODING) -> int:
    # for the checksum to work these fields must be added in order with
    # null termination, followed by all clues without null termination,
    # followed by notes (but only for version 1.3)
    if doc.title is not None:
        cksum = data_cksum((doc.title + "\0").encode(encoding), cksum)
    if doc.author is not None:
        cksum = data_cksum((doc.author + "\0").encode(encoding), cksum)
    if doc.copyright is not None:
        cksum = data_cksum((doc.copyright + "\0").encode(encoding), cksum)

    for clue in doc.clues:
        if clue is not None:
            cksum = data_cksum(clue.encode(encoding), cksum)

    if doc.version == NOTES_CKSUM_VERSION and doc.notes:
        cksum = data_cksum(doc.notes.encode(encoding), cksum)

    return cksum


def global_cksum(doc: PuzzleDocument, encoding: str = ENCODING) -> int:
    cksum = header_cksum(doc)
    cksum = data_cksum(doc.solution.encode(encoding), cksum)
    cksum = data_cksum(doc.fill.encode(encoding), cksum)
    # extensions are not part of the global checksum
    return text_cksum(doc, cksum, encoding)


def magic_cksum(doc: PuzzleDocument, encoding: str = ENCODING) -> int:
    cksums = [
        text_cksum(doc, encoding=encoding),
        data_cksum(doc.fill.encode(encoding)),
        data_cksum(doc.solution.encode(encoding)),
        header_cksum(doc),
    ]

    cksum_magic = 0
    for i, cksum in enumerate(cksums):
        cksum_magic <<= 8
        cksum_magic |= ord(MASKSTRING[len(cksums) - i - 1]) ^ (cksum & 0x00FF)
        cksum_magic |= (ord(MASKSTRING[len(cksums) - i - 1 + 4]) ^ (cksum >> 8)) << 32

    return cksum_magic


# =============================================================================
# Verification
# =============================================================================

@dataclass(frozen=True)
class ChecksumResult:
    name: str
    stored: int
    computed: int

    @property
    def ok(self) -> bool:
        return self.stored == self.computed


@dataclass
class ChecksumReport:
    """Stored vs. recomputed checksums for one document."""

    results: list[ChecksumResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def mismatches(self) -> list[ChecksumResult]:
        return [r for r in self.results if not r.ok]

    def get(self, name: str) -> ChecksumResult | None:
        for result in self.results:
            if result.name == name:
                return result
        return None


def verify(
    doc: PuzzleDocument,
    extension_cksums: Mapping[str, int] | None = None,
    encoding: str = ENCODING,
) -> ChecksumReport:
    """Compare the checksums stored on `doc` (and its extensions) to fresh ones."""
    report = ChecksumReport([
        ChecksumResult("global", doc.global_cksum, global_cksum(doc, encoding)),
        ChecksumResult("header", doc.header_cksum, header_cksum(doc)),
        ChecksumResult("magic", doc.magic_cksum, magic_cksum(doc, encoding)),
    ])
    for code, stored in (extension_cksums or {}).items():
        payload = doc.extensions.get(code, b"")
        report.results.append(ChecksumResult(f"extension:{code}", stored, data_cksum(payload)))
    return report
