"""
Reader Tests - load protocol, resync, extensions, postscript, checksum diagnostics.
"""

import logging

import pytest

from puzkit import checksum, load, read
from puzkit.errors import ChecksumError, FormatErrorKind, PuzzleFormatError
from puzkit.reader import PuzzleReader
from puzkit.spec import Extensions, PuzzleType, SolutionState
from puzkit.writer import PuzzleWriter


# =============================================================================
# Basic parse
# =============================================================================

class TestParse:

    def test_fields(self, puz_bytes):
        doc = PuzzleReader.parse(puz_bytes)
        assert doc.width == 3
        assert doc.height == 3
        assert doc.solution == "CATA.EBED"
        assert doc.fill == "----.----"
        assert doc.title == "Tiny"
        assert doc.author == "Ann Author"
        assert doc.copyright == "(c) 2026"
        assert doc.clues == ["Feline", "Taxi", "Football player, briefly", "Place to sleep"]
        assert doc.notes == ""
        assert doc.file_version == "1.3"
        assert doc.reserved1 == "\0\0"
        assert doc.reserved2 == "\0" * 12
        assert doc.puzzle_type is PuzzleType.NORMAL
        assert doc.solution_state is SolutionState.UNLOCKED
        assert doc.preamble == b""
        assert doc.postscript == b""
        assert doc.extensions == {}

    def test_grid_invariants(self, puz_bytes):
        doc = PuzzleReader.parse(puz_bytes)
        assert len(doc.solution) == len(doc.fill) == doc.width * doc.height
        assert doc.grid == ["---", "-.-", "---"]
        assert doc.solution_grid == ["CAT", "A.E", "BED"]

    def test_checksums_ok(self, puz_bytes):
        doc = PuzzleReader.parse(puz_bytes)
        assert doc.checksums.ok
        assert doc.header_cksum == doc.checksums.get("header").computed

    def test_notes(self, make_puz):
        doc = PuzzleReader.parse(make_puz(notes="Theme: pets"))
        assert doc.notes == "Theme: pets"
        assert doc.checksums.ok

    def test_clue_numbering(self, puz_bytes):
        numbering = PuzzleReader.parse(puz_bytes).clue_numbering()
        assert [(e.number, e.text) for e in numbering.across] == [(1, "Feline"), (3, "Place to sleep")]
        assert [(e.number, e.text) for e in numbering.down] == [(1, "Taxi"), (2, "Football player, briefly")]

    def test_locked_diagramless(self, make_puz):
        doc = PuzzleReader.parse(make_puz(puzzle_type=0x0401, solution_state=0x0004))
        assert doc.is_diagramless()
        assert doc.is_solution_locked()

    def test_unknown_puzzle_type_kept(self, make_puz, caplog):
        with caplog.at_level(logging.WARNING, logger="puzkit.reader"):
            doc = PuzzleReader.parse(make_puz(puzzle_type=0x0002))
        assert doc.puzzle_type == 0x0002
        assert "unknown PuzzleType" in caplog.text

    def test_module_load(self, puz_bytes):
        assert load(puz_bytes).title == "Tiny"

    def test_is_puz_bytes(self, puz_bytes):
        assert PuzzleReader.is_puz_bytes(puz_bytes)
        assert not PuzzleReader.is_puz_bytes(b"not a puzzle")


# =============================================================================
# Preamble, extensions, postscript
# =============================================================================

class TestRoundTripRegions:

    def test_preamble_preserved(self, make_puz):
        doc = PuzzleReader.parse(make_puz(preamble=b"\x00junk before\r\n"))
        assert doc.preamble == b"\x00junk before\r\n"
        assert doc.title == "Tiny"
        assert doc.checksums.ok

    def test_postscript_preserved(self, make_puz):
        doc = PuzzleReader.parse(make_puz(postscript=b"\r\n"))
        assert doc.postscript == b"\r\n"

    def test_extensions_in_order(self, make_puz):
        data = make_puz(extensions=[
            (Extensions.TIMER, b"125,1"),
            (Extensions.MARKUP, b"\x00\x80\x00\x00\x00\x00\x40\x00\x00"),
            (Extensions.REBUS_SOLUTIONS, b" 0:HEART;"),
        ])
        doc = PuzzleReader.parse(data)
        assert list(doc.extensions) == ["LTIM", "GEXT", "RTBL"]
        assert doc.get_extension("LTIM") == b"125,1"
        assert doc.has_extension(Extensions.MARKUP)
        assert not doc.has_extension(Extensions.REBUS)
        assert doc.get_extension(Extensions.REBUS) is None

    def test_extension_payload_keeps_nuls(self, make_puz):
        payload = b"\x00\x01\x00\x00\x02\x00\x00\x00\x00"
        doc = PuzzleReader.parse(make_puz(extensions=[(Extensions.REBUS, payload)]))
        assert doc.extensions["GRBS"] == payload
        assert len(doc.extensions["GRBS"]) == 9

    def test_extension_checksums_checked(self, make_puz):
        doc = PuzzleReader.parse(make_puz(extensions=[(Extensions.TIMER, b"5,0")]))
        assert doc.checksums.get("extension:LTIM").ok

    def test_short_tail_becomes_postscript(self, make_puz):
        # seven bytes cannot hold a 4+2+2 sub-header
        data = make_puz(extensions=[(Extensions.TIMER, b"5,0")], postscript=b"GEXT\x01\x00\x00")
        doc = PuzzleReader.parse(data)
        assert list(doc.extensions) == ["LTIM"]
        assert doc.postscript == b"GEXT\x01\x00\x00"


# =============================================================================
# Fatal errors
# =============================================================================

class TestFormatErrors:

    def test_magic_not_found(self):
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(b"\x00" * 100)
        assert info.value.kind is FormatErrorKind.MAGIC_NOT_FOUND

    def test_magic_at_start(self, puz_bytes):
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(puz_bytes[2:])
        assert info.value.kind is FormatErrorKind.TRUNCATED_DATA

    def test_truncated_header(self, puz_bytes):
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(puz_bytes[:30])
        assert info.value.kind is FormatErrorKind.TRUNCATED_DATA
        assert info.value.offset == 0

    def test_truncated_grid(self, puz_bytes):
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(puz_bytes[:55])
        assert info.value.kind is FormatErrorKind.TRUNCATED_DATA
        assert info.value.offset == 52

    def test_unterminated_notes(self, puz_bytes):
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(puz_bytes[:-1])
        assert info.value.kind is FormatErrorKind.UNTERMINATED_STRING

    def test_missing_clues(self, make_puz):
        data = make_puz(clues=["only one"])
        # declare four clues while only one (plus notes) is present
        data = data[:46] + (4).to_bytes(2, "little") + data[48:]
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(data)
        assert info.value.kind is FormatErrorKind.UNTERMINATED_STRING

    def test_truncated_extension_payload(self, make_puz):
        data = make_puz(extensions=[(Extensions.TIMER, b"125,1")])
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(data[:-3])
        assert info.value.kind is FormatErrorKind.TRUNCATED_DATA

    def test_title_not_valid_in_encoding(self, make_puz):
        data = make_puz(title="Caf\xe9")
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(data, encoding="ascii")
        assert info.value.kind is FormatErrorKind.INVALID_TEXT
        # 52-byte header, two 9-cell grids, then "Caf"
        assert info.value.offset == 73

    def test_solution_not_valid_utf8(self, make_puz):
        data = make_puz(solution="\xe9\xe9TA.EBED")
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(data, encoding="utf-8")
        assert info.value.kind is FormatErrorKind.INVALID_TEXT
        assert info.value.offset == 52

    def test_multibyte_solution_too_short(self, make_puz):
        # bytes C3 A9 are one character in utf-8, so the grid decodes to 8 cells
        data = make_puz(solution="\xc3\xa9TA.EBED")
        with pytest.raises(PuzzleFormatError) as info:
            PuzzleReader.parse(data, encoding="utf-8")
        assert info.value.kind is FormatErrorKind.INVALID_TEXT
        assert info.value.offset == 52
        assert info.value.operation == "read grid"


# =============================================================================
# Checksum diagnostics
# =============================================================================

class TestChecksumDiagnostics:

    @pytest.fixture
    def corrupted(self, puz_bytes):
        data = bytearray(puz_bytes)
        data[0] ^= 0xFF  # overall checksum
        return bytes(data)

    def test_mismatch_does_not_abort(self, corrupted, caplog):
        with caplog.at_level(logging.WARNING, logger="puzkit.reader"):
            doc = PuzzleReader.parse(corrupted)
        assert doc.title == "Tiny"
        assert not doc.checksums.ok
        assert [r.name for r in doc.checksums.mismatches] == ["global"]
        assert "global checksum mismatch" in caplog.text

    def test_stored_value_kept_verbatim(self, corrupted, puz_bytes):
        good = PuzzleReader.parse(puz_bytes)
        bad = PuzzleReader.parse(corrupted)
        assert bad.global_cksum == good.global_cksum ^ 0xFF

    def test_strict_raises(self, corrupted):
        with pytest.raises(ChecksumError, match="global") as info:
            PuzzleReader.parse(corrupted, strict=True)
        assert info.value.kind is FormatErrorKind.CHECKSUM_MISMATCH
        assert info.value.mismatches[0].name == "global"

    def test_strict_accepts_valid(self, puz_bytes):
        assert PuzzleReader.parse(puz_bytes, strict=True).checksums.ok

    def test_bad_extension_checksum(self, make_puz):
        data = bytearray(make_puz(extensions=[(Extensions.TIMER, b"5,0")]))
        # sub-header is code(4) length(2) checksum(2) payload(3) pad(1)
        data[-5] ^= 0x01
        doc = PuzzleReader.parse(bytes(data))
        assert [r.name for r in doc.checksums.mismatches] == ["extension:LTIM"]


# =============================================================================
# Files
# =============================================================================

class TestReadFile:

    def test_read(self, tmp_path, puz_bytes):
        path = tmp_path / "tiny.puz"
        path.write_bytes(puz_bytes)
        doc = read(path)
        assert doc.title == "Tiny"
        assert PuzzleReader.is_puz(path)

    def test_file_size_limit_enforced(self, tmp_path, puz_bytes):
        path = tmp_path / "big.puz"
        path.write_bytes(puz_bytes)
        with pytest.raises(ValueError, match="exceeds maximum"):
            PuzzleReader.read(path, max_size=50)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PuzzleReader.read(tmp_path / "nope.puz")


# =============================================================================
# Reference bytes
# =============================================================================

# 2x1 puzzle "AB", one clue "X", empty title/author/copyright/notes.
# Checksums worked out by hand from the rotate-and-add rule.
REFERENCE_PUZ = (
    b"\x8d\xc2"                              # global 0xC28D
    + b"ACROSS&DOWN\0"
    + b"\x00\x30"                            # header 0x3000
    + b"\x49\x21\x0b\x1d\x71\xd4\xc5\x44"    # magic
    + b"1.3\0"
    + b"\0\0"                                # reserved1
    + b"\0\0"                                # scrambled checksum
    + b"\0" * 12                             # reserved2
    + b"\x02\x01"                            # width, height
    + b"\x01\x00"                            # clue count
    + b"\x01\x00"                            # puzzle type
    + b"\x00\x00"                            # solution state
    + b"AB" + b"--"
    + b"\0\0\0"                              # title, author, copyright
    + b"X\0"
    + b"\0"                                  # notes
)


class TestReferenceVector:

    def test_length(self):
        assert len(REFERENCE_PUZ) == 52 + 4 + 6

    def test_parses_with_valid_checksums(self):
        doc = PuzzleReader.parse(REFERENCE_PUZ, strict=True)
        assert doc.checksums.ok
        assert doc.width == 2
        assert doc.height == 1
        assert doc.solution == "AB"
        assert doc.fill == "--"
        assert doc.clues == ["X"]

    def test_stored_checksums(self):
        doc = PuzzleReader.parse(REFERENCE_PUZ)
        assert doc.global_cksum == 0xC28D
        assert doc.header_cksum == 0x3000
        assert doc.magic_cksum == 0x44C5D4711D0B2149

    def test_computed_components(self):
        doc = PuzzleReader.parse(REFERENCE_PUZ)
        assert checksum.header_cksum(doc) == 0x3000
        assert checksum.data_cksum(b"AB") == 0x8062
        assert checksum.data_cksum(b"--") == 0x8043
        assert checksum.text_cksum(doc) == 0x0058
        assert checksum.global_cksum(doc) == 0xC28D
        assert checksum.magic_cksum(doc) == 0x44C5D4711D0B2149

    def test_serializes_to_same_bytes(self):
        doc = PuzzleReader.parse(REFERENCE_PUZ)
        assert PuzzleWriter.serialize(doc) == REFERENCE_PUZ
