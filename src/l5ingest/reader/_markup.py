"""Structured-markup (.L5X) reader.

Parses the XML with lxml and mirrors it into ``Block`` nodes.  Leaf
element text is kept verbatim, CDATA included, because rung logic and
comments routinely contain characters that look like markup.
"""

from __future__ import annotations

import logging

from lxml import etree

from l5ingest.errors import MalformedInput

from ._tree import Block, MarkupTree

logger = logging.getLogger(__name__)


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
        remove_comments=True,
        remove_pis=True,
    )


def read_markup(data: bytes) -> MarkupTree:
    """Parse *data* as XML into a ``MarkupTree``.

    Raises ``MalformedInput`` with the parser's line/column on any
    syntax error, including truncated documents.
    """
    if not data.strip():
        raise MalformedInput("empty markup document", offset=0)
    try:
        root = etree.fromstring(data, parser=_make_parser())
    except etree.XMLSyntaxError as exc:
        line, column = exc.position if exc.position else (None, None)
        raise MalformedInput(f"invalid markup: {exc.msg}", line=line, column=column) from exc
    if root is None:
        raise MalformedInput("markup document has no root element", offset=0)
    tree = MarkupTree(root=_convert(root))
    logger.debug("read markup tree rooted at <%s>", tree.root.keyword)
    return tree


def _convert(element: etree._Element) -> Block:
    children = [_convert(c) for c in element if isinstance(c.tag, str)]
    text: str | None = None
    if not children and element.text is not None:
        text = element.text
    attributes = {etree.QName(k).localname: v for k, v in element.attrib.items()}
    return Block(
        keyword=etree.QName(element).localname,
        name=attributes.get("Name"),
        attributes=attributes,
        text=text,
        children=children,
        line=element.sourceline,
    )
