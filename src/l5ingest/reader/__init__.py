"""Structural readers for the two export grammars.

``read_structure`` turns raw bytes into a ``StructuralTree`` of nested
``Block`` nodes and knows nothing about tags, rungs or any other entity.
"""

from __future__ import annotations

from l5ingest.model.project import FileFormat

from ._markup import read_markup
from ._sniff import detect_content, format_for_filename, sniff_format
from ._text import decode_text, find_closing, find_top_level, read_text, split_attributes, unescape
from ._tree import STATEMENT, Block, MarkupTree, StructuralTree, TextTree


def read_structure(data: bytes, file_format: FileFormat) -> MarkupTree | TextTree:
    """Build the structural tree for *data* in the given grammar.

    Raises:
        MalformedInput: the input cannot be parsed.
    """
    if file_format == FileFormat.MARKUP:
        return read_markup(data)
    return read_text(data)


__all__ = [
    "Block",
    "MarkupTree",
    "STATEMENT",
    "StructuralTree",
    "TextTree",
    "decode_text",
    "detect_content",
    "find_closing",
    "find_top_level",
    "format_for_filename",
    "read_markup",
    "read_structure",
    "read_text",
    "sniff_format",
    "split_attributes",
    "unescape",
]
