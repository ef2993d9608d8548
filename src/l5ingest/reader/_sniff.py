"""Format detection from file extension and leading content."""

from __future__ import annotations

import logging
import os

from l5ingest.errors import UnsupportedFormat
from l5ingest.model.project import FileFormat

logger = logging.getLogger(__name__)

EXTENSIONS = {
    ".l5x": FileFormat.MARKUP,
    ".l5k": FileFormat.TEXT,
}

# The header comment block of a text export can run to a few kilobytes.
_SNIFF_BYTES = 64 * 1024

_MARKUP_PREFIXES = ("<?xml", "<RSLogix5000Content")
_TEXT_PREFIXES = ("IE_VER", "CONTROLLER")


def format_for_filename(filename: str) -> FileFormat | None:
    """Map a filename's extension onto a format, case-insensitively."""
    ext = os.path.splitext(filename)[1].lower()
    return EXTENSIONS.get(ext)


def _skip_comments(text: str) -> str:
    text = text.lstrip()
    while text.startswith("(*"):
        end = text.find("*)", 2)
        if end == -1:
            return ""
        text = text[end + 2:].lstrip()
    return text


def detect_content(data: bytes) -> FileFormat | None:
    """Guess the grammar from the first bytes, or None when neither fits."""
    head = data[:_SNIFF_BYTES].decode("utf-8", errors="replace")
    head = head.lstrip("\ufeff").lstrip()
    if head.startswith(_MARKUP_PREFIXES):
        return FileFormat.MARKUP
    if _skip_comments(head).startswith(_TEXT_PREFIXES):
        return FileFormat.TEXT
    return None


def sniff_format(data: bytes, filename: str | None = None) -> FileFormat:
    """Decide which reader handles *data*.

    The extension (when a filename is given) and the content must agree.

    Raises:
        UnsupportedFormat: unknown extension, unrecognized content, or an
            extension that contradicts the content.
    """
    detected = detect_content(data)
    if filename is not None:
        expected = format_for_filename(filename)
        if expected is None:
            raise UnsupportedFormat(
                f"{filename!r}: unsupported extension; expected one of "
                f"{', '.join(sorted(EXTENSIONS))}"
            )
        if detected is None:
            raise UnsupportedFormat(
                f"{filename!r}: content does not look like a .{expected.value.upper()} export"
            )
        if detected != expected:
            raise UnsupportedFormat(
                f"{filename!r}: extension says .{expected.value.upper()} "
                f"but content looks like .{detected.value.upper()}"
            )
        return expected
    if detected is None:
        raise UnsupportedFormat("content is neither an .L5X nor an .L5K export")
    logger.debug("sniffed format %s from content", detected.value)
    return detected
