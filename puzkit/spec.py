"""
PUZ Format Specification (Across Lite binary)
=============================================

Layout (little-endian, offsets relative to the magic string):
    -2   H      <- Overall (global) checksum
     0   11s x  <- Magic "ACROSS&DOWN" + NUL
    12   H      <- Header checksum
    14   Q      <- Magic checksum (masked with "ICHEATED")
    22   3s x   <- File version, e.g. "1.3" + NUL
    26   2s     <- Reserved
    28   H      <- Scrambled checksum
    30   12s    <- Reserved
    42   B B    <- Width, height
    44   H      <- Clue count
    46   H      <- Puzzle type bitmask
    48   H      <- Solution state
    50   ...    <- Solution grid (width*height), fill grid (width*height)
         ...    <- title, author, copyright, clues..., notes (NUL-terminated)
         ...    <- Extensions: 4s code, H length, H checksum, payload, NUL
         ...    <- Postscript (anything left over, usually "\\r\\n")

Design Decisions:
    - Bytes before the overall checksum are kept as a preamble for round-tripping
    - Extension payloads stay raw bytes (they can contain NULs)
    - Checksum mismatches are diagnostics, not load failures
    - Grids use "." for black squares and "-" for empty fill
"""

from enum import IntEnum

# Magic bytes - every puzzle contains this, possibly after some junk
ACROSSDOWN = b"ACROSS&DOWN"

# Header layout: overall cksum, magic, header cksum, magic cksum, version,
# reserved, scrambled cksum, reserved, width, height, clue count,
# puzzle type, solution state
HEADER_FORMAT = """<
    H 11s x H
    Q 3s x 2s H
    12s B B H
    H H
"""

# Tuple covered by the header checksum
HEADER_CKSUM_FORMAT = "<BBH H H"

# Extension sub-header: code, payload length, payload checksum
EXTENSION_HEADER_FORMAT = "< 4s H H"

# XOR mask applied to the four component checksums of the magic checksum
MASKSTRING = "ICHEATED"

# Latin-1 maps all 256 byte values, so no grid or reserved field fails to decode
ENCODING = "ISO-8859-1"

BLACKSQUARE = "."

# Notes only take part in the text checksum from this version on
NOTES_CKSUM_VERSION = "1.3"

# Refuse to read anything larger (bytes); real puzzles are a few KB
MAX_FILE_SIZE = 4 * 1024 * 1024


class PuzzleType(IntEnum):
    NORMAL = 0x0001
    DIAGRAMLESS = 0x0401


# the following diverges from the published notes
# but matches the files seen in practice
class SolutionState(IntEnum):
    UNLOCKED = 0x0000  # solution is available in plaintext
    LOCKED = 0x0004  # solution is scrambled with a key


class GridMarkup(IntEnum):
    DEFAULT = 0x00
    PREVIOUSLY_INCORRECT = 0x10
    INCORRECT = 0x20
    REVEALED = 0x40
    CIRCLED = 0x80


class Extensions:
    """Known extension section codes. Payloads are opaque to the parser."""

    # grid of rebus indices: 0 for none, i+1 for key i of REBUS_SOLUTIONS
    REBUS = "GRBS"
    # rebus solution table, e.g. "0:HEART;1:DIAMOND;17:CLUB;"
    REBUS_SOLUTIONS = "RTBL"
    # user's rebus entries
    REBUS_FILL = "RUSR"
    # timer state "seconds,running"
    TIMER = "LTIM"
    # per-cell GridMarkup bitmask
    MARKUP = "GEXT"


EXTENSION_TYPES = {
    Extensions.REBUS: "Rebus grid indices",
    Extensions.REBUS_SOLUTIONS: "Rebus solution table",
    Extensions.REBUS_FILL: "User rebus fill",
    Extensions.TIMER: "Timer state",
    Extensions.MARKUP: "Per-cell markup bitmask",
}
