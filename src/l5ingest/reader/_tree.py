"""Format-agnostic structural tree.

Both readers emit the same ``Block`` shape.  The vocabulary differs by
grammar (markup element names vs. plain-text keywords), so the tree is a
discriminated union tagged by ``format``; extractors dispatch on it once
and never look at raw bytes.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from l5ingest.model.project import FileFormat

# Keyword given to plain-text statements (anything terminated by ';' that
# is not a block header).
STATEMENT = "STATEMENT"


class Block(BaseModel):
    """A named block with ordered attributes and ordered children."""

    keyword: str
    name: str | None = None
    attributes: dict[str, str] = {}
    text: str | None = None
    children: list[Block] = []
    line: int | None = None

    def child(self, keyword: str) -> Block | None:
        """First direct child with *keyword*, or None."""
        for c in self.children:
            if c.keyword == keyword:
                return c
        return None

    def children_named(self, keyword: str) -> list[Block]:
        return [c for c in self.children if c.keyword == keyword]

    def grandchildren(self, container: str, keyword: str) -> list[Block]:
        """``<container><keyword/>...</container>`` lookups in one call."""
        holder = self.child(container)
        if holder is None:
            return []
        return holder.children_named(keyword)

    def child_text(self, keyword: str) -> str | None:
        """Text of the first *keyword* child.

        Multi-language exports wrap the text in ``Localized<keyword>``
        children (``<Description><LocalizedDescription Lang=..>``); the
        first of those is used.
        """
        c = self.child(keyword)
        if c is None:
            return None
        if c.text is None:
            localized = c.child(f"Localized{keyword}")
            if localized is not None:
                return localized.text
        return c.text

    def attr(self, key: str, default: str | None = None) -> str | None:
        """Attribute lookup, exact key first, then case-insensitive."""
        if key in self.attributes:
            return self.attributes[key]
        lowered = key.lower()
        for k, v in self.attributes.items():
            if k.lower() == lowered:
                return v
        return default

    def walk(self) -> Iterator[Block]:
        """Depth-first pre-order traversal, self included."""
        yield self
        for c in self.children:
            yield from c.walk()


class MarkupTree(BaseModel):
    """Tree read from the structured-markup (.L5X) grammar."""

    format: Literal[FileFormat.MARKUP] = FileFormat.MARKUP
    root: Block


class TextTree(BaseModel):
    """Tree read from the plain-text (.L5K) grammar.

    ``root`` is a synthetic ``FILE`` block whose children are the file's
    top-level statements and blocks.
    """

    format: Literal[FileFormat.TEXT] = FileFormat.TEXT
    root: Block


StructuralTree = Annotated[
    Union[MarkupTree, TextTree],
    Field(discriminator="format"),
]


Block.model_rebuild()
