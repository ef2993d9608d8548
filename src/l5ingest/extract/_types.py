"""User-defined data type extraction.

Members are kept in declaration order.  Hidden backing members (the
``SINT`` words that host ``BIT`` overlays) are dropped; the overlays keep
the host's name in ``target``.
"""

from __future__ import annotations

import logging

from l5ingest.model.types import DataTypeMember, UserDefinedType
from l5ingest.reader import STATEMENT, Block

from ._context import ControllerView, ExtractContext, clean_text, lookup, parse_bool, parse_int
from ._declarations import parse_member

logger = logging.getLogger(__name__)


def _markup_member(block: Block) -> DataTypeMember | None:
    if parse_bool(block.attr("Hidden"), False):
        return None
    dimension = parse_int(block.attr("Dimension"))
    return DataTypeMember(
        name=block.name or "",
        data_type=block.attr("DataType") or "Unknown",
        dimension=dimension or None,
        radix=block.attr("Radix"),
        external_access=block.attr("ExternalAccess"),
        description=clean_text(block.child_text("Description")),
        target=block.attr("Target"),
        bit_number=parse_int(block.attr("BitNumber")),
    )


def _markup_type(block: Block, ctx: ExtractContext) -> UserDefinedType:
    members: list[DataTypeMember] = []
    for element in block.grandchildren("Members", "Member"):
        with ctx.entity(element):
            member = _markup_member(element)
            if member is not None:
                members.append(member)
    return UserDefinedType(
        name=block.name or "",
        description=clean_text(block.child_text("Description")),
        family=block.attr("Family"),
        members=members,
    )


def _text_type(block: Block, ctx: ExtractContext) -> UserDefinedType:
    members: list[DataTypeMember] = []
    for stmt in block.children:
        if stmt.keyword != STATEMENT:
            ctx.unrecognized(stmt, f"data type {block.name!r}")
            continue
        with ctx.entity(stmt):
            decl = parse_member(stmt.text or "")
            if decl.hidden:
                continue
            members.append(DataTypeMember(
                name=decl.name,
                data_type=decl.data_type,
                dimension=decl.dimension,
                radix=decl.attr("Radix"),
                external_access=decl.attr("ExternalAccess"),
                description=clean_text(decl.attr("Description")),
                target=decl.target,
                bit_number=decl.bit_number,
            ))
    return UserDefinedType(
        name=block.name or "",
        description=clean_text(lookup(block.attributes, "Description")),
        family=lookup(block.attributes, "FamilyType", "Family"),
        members=members,
    )


def extract_data_types(view: ControllerView, ctx: ExtractContext) -> list[UserDefinedType]:
    if view.is_markup:
        blocks = view.controller.grandchildren("DataTypes", "DataType")
        build = _markup_type
    else:
        blocks = view.controller.children_named("DATATYPE")
        build = _text_type
    types: list[UserDefinedType] = []
    for block in blocks:
        with ctx.entity(block):
            types.append(build(block, ctx))
    logger.debug("extracted %d data types", len(types))
    return types
