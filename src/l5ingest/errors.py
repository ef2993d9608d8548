"""Exception hierarchy for the ingestion pipeline.

Only ``MalformedInput`` and ``UnsupportedFormat`` ever escape ``ingest()``;
``RejectedUpload`` comes from the upload check.  ``InvalidRulePattern``
is raised while compiling a naming rule and recovered by the naming
analyzer.  Unrecognized blocks and unresolved operands are not
exceptions at all; they become diagnostics and plain reference rows.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for all l5ingest errors."""


class MalformedInput(IngestError):
    """The structural reader could not build a tree from the input."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        offset: int | None = None,
    ):
        self.reason = message
        self.line = line
        self.column = column
        self.offset = offset
        loc = ""
        if line is not None:
            loc = f" (line {line}" + (f", column {column}" if column is not None else "") + ")"
        elif offset is not None:
            loc = f" (offset {offset})"
        super().__init__(f"{message}{loc}")


class UnsupportedFormat(IngestError):
    """The file failed the extension/content sniff and was not parsed."""


class RejectedUpload(IngestError):
    """The upload-layer size or extension check failed."""


class InvalidRulePattern(IngestError):
    """A naming rule's pattern is not a valid regular expression."""

    def __init__(self, rule_name: str, pattern: str, detail: str):
        self.rule_name = rule_name
        self.pattern = pattern
        super().__init__(f"Rule {rule_name!r} has an invalid pattern {pattern!r}: {detail}")
