"""
Shared fixtures: build .puz bytes by hand so reader tests don't depend on the writer.
"""

import struct

import pytest

from puzkit import checksum
from puzkit.document import PuzzleDocument

# C A T
# A . E
# B E D
SOLUTION = "CATA.EBED"
FILL = "----.----"
CLUES = ["Feline", "Taxi", "Football player, briefly", "Place to sleep"]


def build_puz(
    width=3,
    height=3,
    solution=SOLUTION,
    fill=FILL,
    title="Tiny",
    author="Ann Author",
    copyright="(c) 2026",
    clues=CLUES,
    notes="",
    version="1.3",
    puzzle_type=0x0001,
    solution_state=0x0000,
    extensions=(),
    preamble=b"",
    postscript=b"",
):
    doc = PuzzleDocument(
        width=width,
        height=height,
        solution=solution,
        fill=fill,
        title=title,
        author=author,
        copyright=copyright,
        clues=list(clues),
        notes=notes,
        file_version=version,
        puzzle_type=puzzle_type,
        solution_state=solution_state,
    )
    header = struct.pack(
        "<H11sxHQ3sx2sH12sBBHHH",
        checksum.global_cksum(doc),
        b"ACROSS&DOWN",
        checksum.header_cksum(doc),
        checksum.magic_cksum(doc),
        version.encode("latin-1"),
        b"\0\0",
        0,
        b"\0" * 12,
        width,
        height,
        len(clues),
        puzzle_type,
        solution_state,
    )
    body = solution.encode("latin-1") + fill.encode("latin-1")
    for text in [title, author, copyright, *clues, notes]:
        body += text.encode("latin-1") + b"\0"
    for code, payload in extensions:
        body += struct.pack("<4sHH", code.encode("latin-1"), len(payload), checksum.data_cksum(payload))
        body += payload + b"\0"
    return preamble + header + body + postscript


@pytest.fixture
def make_puz():
    return build_puz


@pytest.fixture
def puz_bytes():
    return build_puz()
