"""Tag extraction (controller, program and instruction-local scopes)."""

from __future__ import annotations

import logging
from typing import Any

from l5ingest.model.tags import Tag, TagType
from l5ingest.reader import STATEMENT, Block

from ._context import (
    CONTROLLER_OWNER,
    ControllerView,
    ExtractContext,
    Owner,
    clean_text,
    lookup,
    parse_bool,
    parse_dimensions,
)
from ._declarations import Declaration, parse_declaration

logger = logging.getLogger(__name__)

# Text-grammar attributes that describe a produced/consumed connection.
_CONNECTION_KEYS = (
    "Producer",
    "RemoteTag",
    "RemoteInstance",
    "RPI",
    "Unicast",
    "ProduceCount",
    "PLC5C",
    "ProgrammaticallySendEventTrigger",
)


def classify(tag_type: str | None, alias_for: str | None, attrs: dict[str, str]) -> TagType:
    """Pick the tag flavor from the declared type and connection attributes."""
    if alias_for:
        return TagType.ALIAS
    if tag_type:
        for member in TagType:
            if member.value.lower() == tag_type.strip().lower():
                return member
        raise ValueError(f"unknown tag type {tag_type!r}")
    if lookup(attrs, "Producer", "RemoteTag") is not None:
        return TagType.CONSUMED
    if lookup(attrs, "ProduceCount") is not None:
        return TagType.PRODUCED
    return TagType.BASE


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

def _markup_value(block: Block) -> str | None:
    for data in block.children_named("Data"):
        if data.attr("Format") == "L5K":
            return clean_text(data.text)
    for data in block.children_named("Data"):
        value = data.child("DataValue")
        if value is not None and value.attr("Value") is not None:
            return value.attr("Value")
    return None


def _markup_connection(block: Block, flavor: TagType) -> dict[str, Any] | None:
    if flavor == TagType.CONSUMED:
        info = block.child("ConsumeInfo")
    elif flavor == TagType.PRODUCED:
        info = block.child("ProduceInfo")
    else:
        return None
    return dict(info.attributes) if info is not None else {}


def tag_from_element(block: Block, owner: Owner) -> Tag:
    """Build a ``Tag`` from a ``<Tag>`` or ``<LocalTag>`` element."""
    attrs = block.attributes
    alias_for = block.attr("AliasFor")
    info_attrs = {}
    for name in ("ConsumeInfo", "ProduceInfo"):
        info = block.child(name)
        if info is not None:
            info_attrs.update(info.attributes)
    flavor = classify(block.attr("TagType"), alias_for, {**info_attrs, **attrs})
    return Tag(
        name=block.name or "",
        data_type=block.attr("DataType") or "Unknown",
        program=owner.name,
        description=clean_text(block.child_text("Description")),
        radix=block.attr("Radix"),
        external_access=block.attr("ExternalAccess"),
        alias_for=alias_for,
        dimensions=parse_dimensions(block.attr("Dimensions")),
        usage=block.attr("Usage"),
        tag_type=flavor,
        value=_markup_value(block),
        constant=parse_bool(block.attr("Constant"), False),
        connection=_markup_connection(block, flavor),
    )


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def tag_from_declaration(decl: Declaration, owner: Owner) -> Tag:
    """Build a ``Tag`` from a parsed text declaration."""
    attrs = decl.attributes
    flavor = classify(decl.attr("TagType"), decl.alias_for, attrs)
    connection = None
    if flavor in (TagType.PRODUCED, TagType.CONSUMED):
        connection = {}
        for key in _CONNECTION_KEYS:
            value = lookup(attrs, key)
            if value is not None:
                connection[key] = value
    dimensions = decl.dimensions or parse_dimensions(decl.attr("Dimensions", "Dimension"))
    return Tag(
        name=decl.name,
        data_type=decl.data_type or decl.attr("DataType") or "Unknown",
        program=owner.name,
        description=clean_text(decl.attr("Description")),
        radix=decl.attr("Radix"),
        external_access=decl.attr("ExternalAccess"),
        alias_for=decl.alias_for,
        dimensions=dimensions,
        usage=decl.attr("Usage"),
        tag_type=flavor,
        value=decl.value,
        constant=parse_bool(decl.attr("Constant"), False),
        connection=connection,
    )


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

def tags_in(container: Block, owner: Owner, ctx: ExtractContext, *, markup: bool) -> list[Tag]:
    """Tags declared directly in *container* (a controller, program or AOI).

    Markup containers hold ``<Tags><Tag/>...</Tags>`` (``<LocalTags>``
    for instructions); text containers hold ``TAG`` / ``LOCAL_TAGS``
    blocks of declaration statements.  Names are unique within the
    container; a later tag reusing a name is dropped.
    """
    tags: list[Tag] = []
    seen: set[str] = set()

    def keep(tag: Tag) -> None:
        if tag.name in seen:
            raise ValueError(f"duplicate tag name {tag.name!r} in {owner.label}")
        seen.add(tag.name)
        tags.append(tag)

    if markup:
        elements = container.grandchildren("Tags", "Tag")
        if owner.is_instruction:
            elements = container.grandchildren("LocalTags", "LocalTag")
        for element in elements:
            with ctx.entity(element):
                keep(tag_from_element(element, owner))
        return tags

    keyword = "LOCAL_TAGS" if owner.is_instruction else "TAG"
    for section in container.children_named(keyword):
        for stmt in section.children:
            if stmt.keyword != STATEMENT:
                ctx.unrecognized(stmt, f"{keyword} section of {owner.label}")
                continue
            with ctx.entity(stmt):
                keep(tag_from_declaration(parse_declaration(stmt.text or ""), owner))
    return tags


def extract_tags(view: ControllerView, ctx: ExtractContext) -> list[Tag]:
    """Controller-scoped tags followed by each program's tags."""
    tags = tags_in(view.controller, CONTROLLER_OWNER, ctx, markup=view.is_markup)
    for program in view.programs():
        owner = Owner(name=program.name or "Unknown")
        tags.extend(tags_in(program, owner, ctx, markup=view.is_markup))
    logger.debug("extracted %d tags", len(tags))
    return tags
