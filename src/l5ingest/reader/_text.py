"""Plain-text (.L5K) reader.

The grammar has no closing-tag names to match against, so the reader
tracks nesting itself:

- A logical line at depth 0 that does not end in ``;`` and looks like
  ``KEYWORD [Name] [(Key := Value, ...)]`` opens a block.
- ``END_KEYWORD`` closes the innermost open block, which must carry the
  same keyword.
- Anything else terminated by a top-level ``;`` is a statement.

Parentheses/brackets, quoted strings and ``(* ... *)`` comments are
tracked character by character so that statements and headers may span
lines.  Bodies of the blocks in ``OPAQUE_BLOCKS`` are not tokenized; their
lines are kept verbatim.

Descriptions are double-quoted and may double the quote; STRING data is
single-quoted.  Both honor ``$`` escapes.
"""

from __future__ import annotations

import logging
import re

from l5ingest.errors import MalformedInput

from ._tree import STATEMENT, Block, TextTree

logger = logging.getLogger(__name__)

OPAQUE_BLOCKS = frozenset({"ST_ROUTINE", "FBD_ROUTINE", "SFC_ROUTINE", "ENCODED_DATA"})

_HEADER_RE = re.compile(
    r"^(?P<kw>[A-Z][A-Z0-9_]+)"
    r"(?:[ \t]+(?P<name>[^\s(:;]+))?"
    r"\s*(?P<attrs>\(.*\))?\s*$",
    re.DOTALL,
)
_END_RE = re.compile(r"^END_(?P<kw>[A-Z][A-Z0-9_]*)\s*;?\s*$")
_CONTINUATION_PREFIXES = ("(", ":=", ":", "OF ")
_QUOTES = "\"'"

_ESCAPES = {
    "$": "$",
    '"': '"',
    "'": "'",
    "N": "\n",
    "L": "\n",
    "R": "\r",
    "T": "\t",
    "P": "\f",
}


# ---------------------------------------------------------------------------
# String / attribute syntax helpers (shared with the text extractors)
# ---------------------------------------------------------------------------

def decode_text(data: bytes) -> str:
    """Decode export bytes: UTF-8 (BOM tolerated), falling back to cp1252."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("input is not UTF-8, decoding as cp1252")
        return data.decode("cp1252", errors="replace")


def unescape(body: str) -> str:
    """Resolve ``$`` escapes and doubled quotes inside a quoted string body."""
    out: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch == "$" and i + 1 < n:
            nxt = body[i + 1]
            if nxt.upper() in _ESCAPES:
                out.append(_ESCAPES[nxt.upper()])
                i += 2
                continue
            hexpair = body[i + 1:i + 3]
            if len(hexpair) == 2 and all(c in "0123456789abcdefABCDEF" for c in hexpair):
                out.append(chr(int(hexpair, 16)))
                i += 3
                continue
        if ch == '"' and i + 1 < n and body[i + 1] == '"':
            out.append('"')
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def string_end(text: str, start: int) -> int:
    """Index of the quote closing the string opened at *start*, or -1."""
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "$":
            i += 2
            continue
        if ch == quote:
            if quote == '"' and i + 1 < n and text[i + 1] == '"':
                i += 2
                continue
            return i
        i += 1
    return -1


def find_closing(text: str, start: int) -> int:
    """Index of the bracket closing the one at *start*, or -1.

    Quoted strings are skipped.  ``(`` and ``[`` nest together.
    """
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            end = string_end(text, i)
            if end == -1:
                return -1
            i = end + 1
            continue
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def find_top_level(text: str, target: str, start: int = 0) -> int:
    """Index of *target* outside quotes and brackets, or -1."""
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            end = string_end(text, i)
            if end == -1:
                return -1
            i = end + 1
            continue
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(0, depth - 1)
        elif depth == 0 and text.startswith(target, i):
            return i
        i += 1
    return -1


def split_attributes(text: str) -> dict[str, str]:
    """Parse ``(Key := Value, Key := "quoted", ...)`` into an ordered dict.

    Outer parentheses are optional.  Quoted values are unescaped; bare
    values run to the next top-level comma and may contain spaces,
    slashes, or bracketed lists.
    """
    attrs: dict[str, str] = {}
    s = text.strip()
    if s.startswith("(") and find_closing(s, 0) == len(s) - 1:
        s = s[1:-1]
    pos = 0
    n = len(s)
    while pos < n:
        while pos < n and (s[pos].isspace() or s[pos] == ","):
            pos += 1
        if pos >= n:
            break
        assign = s.find(":=", pos)
        if assign == -1:
            break
        key = s[pos:assign].strip()
        pos = assign + 2
        while pos < n and s[pos] in " \t\r\n":
            pos += 1
        if pos < n and s[pos] in _QUOTES:
            end = string_end(s, pos)
            if end == -1:
                end = n
            value = unescape(s[pos + 1:end])
            pos = end + 1
        else:
            depth = 0
            start = pos
            while pos < n:
                ch = s[pos]
                if ch in _QUOTES:
                    end = string_end(s, pos)
                    pos = n if end == -1 else end + 1
                    continue
                if ch in "([":
                    depth += 1
                elif ch in ")]":
                    if depth == 0:
                        break
                    depth -= 1
                elif ch == "," and depth == 0:
                    break
                pos += 1
            value = s[start:pos].strip()
        if key:
            attrs[key] = value
    return attrs


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class _TextReader:
    """Single-use line scanner building the block tree."""

    def __init__(self, text: str) -> None:
        self._lines = text.splitlines()
        self._root = Block(keyword="FILE", line=1)
        self._stack: list[Block] = [self._root]
        self._buf: list[str] = []
        self._buf_line: int | None = None
        self._depth = 0
        self._quote: str | None = None
        self._string_line: int | None = None
        self._in_comment = False
        self._comment_line: int | None = None
        self._opaque_body: list[str] | None = None

    def read(self) -> Block:
        for index, line in enumerate(self._lines):
            lineno = index + 1
            if self._opaque_body is not None:
                self._feed_opaque(line, lineno)
            else:
                self._feed_line(line, lineno)
                self._line_end(index, lineno)
        self._finish()
        return self._root

    # -- Character level -----------------------------------------------------

    def _append(self, ch: str, lineno: int) -> None:
        if not self._buf and ch.isspace():
            return
        if not self._buf:
            self._buf_line = lineno
        self._buf.append(ch)

    def _feed_line(self, line: str, lineno: int) -> None:
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            if self._in_comment:
                if line.startswith("*)", i):
                    self._in_comment = False
                    i += 2
                else:
                    i += 1
                continue
            if self._quote:
                self._append(ch, lineno)
                if ch == "$" and i + 1 < n:
                    self._append(line[i + 1], lineno)
                    i += 2
                    continue
                if ch == self._quote:
                    if ch == '"' and i + 1 < n and line[i + 1] == '"':
                        self._append('"', lineno)
                        i += 2
                        continue
                    self._quote = None
                i += 1
                continue
            if line.startswith("(*", i):
                self._in_comment = True
                self._comment_line = lineno
                i += 2
                continue
            if ch in _QUOTES:
                self._quote = ch
                self._string_line = lineno
            elif ch in "([":
                self._depth += 1
            elif ch in ")]":
                self._depth = max(0, self._depth - 1)
            elif ch == ";" and self._depth == 0:
                self._complete_statement(lineno)
                i += 1
                continue
            self._append(ch, lineno)
            i += 1

    # -- Statement level -----------------------------------------------------

    def _take_buffer(self) -> tuple[str, int | None]:
        text = "".join(self._buf).strip()
        line = self._buf_line
        self._buf = []
        self._buf_line = None
        return text, line

    def _complete_statement(self, lineno: int) -> None:
        text, line = self._take_buffer()
        if not text:
            return
        m = _END_RE.match(text)
        if m:
            self._close(m["kw"], line or lineno)
            return
        self._stack[-1].children.append(Block(keyword=STATEMENT, text=text, line=line))

    def _line_end(self, index: int, lineno: int) -> None:
        if self._in_comment:
            return
        if self._quote or self._depth > 0:
            if self._buf:
                self._buf.append("\n")
            return
        text = "".join(self._buf).strip()
        if not text:
            self._buf = []
            self._buf_line = None
            return
        m = _END_RE.match(text)
        if m:
            _, line = self._take_buffer()
            self._close(m["kw"], line or lineno)
            return
        m = _HEADER_RE.match(text)
        if m and not self._continues(index):
            _, line = self._take_buffer()
            self._open(m, line or lineno)
            return
        self._buf.append("\n")

    def _continues(self, index: int) -> bool:
        """True when the next non-blank line continues the current one."""
        for nxt in self._lines[index + 1:]:
            stripped = nxt.strip()
            if stripped:
                return stripped.startswith(_CONTINUATION_PREFIXES) and not stripped.startswith("(*")
        return False

    # -- Block level ---------------------------------------------------------

    def _open(self, m: re.Match[str], line: int) -> None:
        attrs = m["attrs"]
        block = Block(
            keyword=m["kw"],
            name=m["name"],
            attributes=split_attributes(attrs) if attrs else {},
            line=line,
        )
        self._stack[-1].children.append(block)
        self._stack.append(block)
        if block.keyword in OPAQUE_BLOCKS:
            self._opaque_body = []

    def _close(self, keyword: str, line: int) -> None:
        if len(self._stack) == 1:
            raise MalformedInput(f"END_{keyword} has no matching {keyword} block", line=line)
        top = self._stack[-1]
        if top.keyword != keyword:
            raise MalformedInput(
                f"END_{keyword} found while {top.keyword} (opened at line {top.line}) is still open",
                line=line,
            )
        self._stack.pop()

    def _feed_opaque(self, line: str, lineno: int) -> None:
        top = self._stack[-1]
        if re.match(rf"^\s*END_{top.keyword}\b", line):
            top.text = "\n".join(self._opaque_body or [])
            self._opaque_body = None
            self._stack.pop()
            return
        self._opaque_body.append(line)

    def _finish(self) -> None:
        last = len(self._lines)
        if self._in_comment:
            raise MalformedInput("unterminated (* comment", line=self._comment_line)
        if self._quote:
            raise MalformedInput("unterminated string", line=self._string_line)
        text = "".join(self._buf).strip()
        if text:
            raise MalformedInput("statement truncated at end of file", line=self._buf_line or last)
        if len(self._stack) > 1:
            top = self._stack[-1]
            raise MalformedInput(f"{top.keyword} block is never closed", line=top.line)


def read_text(data: bytes) -> TextTree:
    """Parse *data* as plain-text export into a ``TextTree``.

    Raises ``MalformedInput`` on unbalanced nesting or truncation.
    """
    text = decode_text(data)
    if not text.strip():
        raise MalformedInput("empty text document", offset=0)
    root = _TextReader(text).read()
    if not root.children:
        raise MalformedInput("text document contains no statements or blocks", line=1)
    logger.debug("read text tree with %d top-level entries", len(root.children))
    return TextTree(root=root)
