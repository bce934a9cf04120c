"""
Puzzle Writer - serialize a PuzzleDocument back to .puz bytes.

The header checksums are recomputed from the document fields, and every
extension is written with a fresh payload checksum in the order it was read.
A document loaded from a well-formed file serializes back to the same bytes.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

from puzkit import checksum, codec
from puzkit.document import PuzzleDocument
from puzkit.spec import ACROSSDOWN, EXTENSION_HEADER_FORMAT, HEADER_FORMAT


class PuzzleWriter:
    """
    Serializes PuzzleDocument objects.

    Usage:
        data = PuzzleWriter.serialize(doc)
        PuzzleWriter.write(doc, "copy.puz")
    """

    @staticmethod
    def serialize(doc: PuzzleDocument) -> bytes:
        # missing text fields are written as empty strings, so checksum them that way
        doc = dataclasses.replace(
            doc,
            title=doc.title or "",
            author=doc.author or "",
            copyright=doc.copyright or "",
            clues=[clue or "" for clue in doc.clues],
            notes=doc.notes or "",
        )
        enc = doc.encoding
        parts: list[bytes] = [doc.preamble]

        parts.append(codec.pack(
            HEADER_FORMAT,
            [
                checksum.global_cksum(doc, enc),
                ACROSSDOWN,
                checksum.header_cksum(doc),
                checksum.magic_cksum(doc, enc),
                doc.file_version,
                doc.reserved1,
                doc.scrambled_cksum,
                doc.reserved2,
                doc.width,
                doc.height,
                len(doc.clues),
                int(doc.puzzle_type),
                int(doc.solution_state),
            ],
            enc,
        ))

        parts.append(doc.solution.encode(enc))
        parts.append(doc.fill.encode(enc))

        for text in (doc.title, doc.author, doc.copyright, *doc.clues, doc.notes):
            parts.append(text.encode(enc) + b"\0")

        for code, payload in doc.extensions.items():
            parts.append(codec.pack(
                EXTENSION_HEADER_FORMAT,
                [code, len(payload), checksum.data_cksum(payload)],
                enc,
            ))
            parts.append(payload + b"\0")

        parts.append(doc.postscript)
        return b"".join(parts)

    @classmethod
    def write(cls, doc: PuzzleDocument, path: str | Path) -> int:
        """Write to disk. Returns the number of bytes written."""
        data = cls.serialize(doc)
        with open(path, "wb") as f:
            f.write(data)
        return len(data)
