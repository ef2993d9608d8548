"""Add-On Instruction extraction.

An instruction is extracted like a small program: its local tags,
routines and rungs go through the tag and routine extractors with the
instruction as ``Owner``.
"""

from __future__ import annotations

import logging

from l5ingest.model.aoi import AddOnInstruction, AOIParameter, ParameterUsage
from l5ingest.reader import STATEMENT, Block

from ._context import ControllerView, ExtractContext, Owner, clean_text, lookup, parse_bool
from ._declarations import parse_declaration
from ._routines import routines_in
from ._tags import tags_in

logger = logging.getLogger(__name__)

_STAMPS = {
    "revision": "Revision",
    "vendor": "Vendor",
    "created_date": "CreatedDate",
    "created_by": "CreatedBy",
    "edited_date": "EditedDate",
    "edited_by": "EditedBy",
}


def _markup_parameter(block: Block) -> AOIParameter:
    default = None
    for data in block.children_named("DefaultData"):
        if data.attr("Format") == "L5K":
            default = clean_text(data.text)
    return AOIParameter(
        name=block.name or "",
        data_type=block.attr("DataType") or "Unknown",
        usage=ParameterUsage.parse(block.attr("Usage")),
        required=parse_bool(block.attr("Required"), False),
        visible=parse_bool(block.attr("Visible"), True),
        external_access=block.attr("ExternalAccess"),
        description=clean_text(block.child_text("Description")),
        default_value=default if default is not None else block.attr("DefaultValue"),
    )


def _text_parameter(text: str) -> AOIParameter:
    decl = parse_declaration(text)
    return AOIParameter(
        name=decl.name,
        data_type=decl.data_type or "Unknown",
        usage=ParameterUsage.parse(decl.attr("Usage")),
        required=parse_bool(decl.attr("Required"), False),
        visible=parse_bool(decl.attr("Visible"), True),
        external_access=decl.attr("ExternalAccess"),
        description=clean_text(decl.attr("Description")),
        default_value=decl.value if decl.value is not None else decl.attr("DefaultValue"),
    )


def _parameters(block: Block, ctx: ExtractContext, *, markup: bool) -> list[AOIParameter]:
    params: list[AOIParameter] = []
    if markup:
        for element in block.grandchildren("Parameters", "Parameter"):
            with ctx.entity(element):
                params.append(_markup_parameter(element))
        return params
    for section in block.children_named("PARAMETERS"):
        for stmt in section.children:
            if stmt.keyword != STATEMENT:
                ctx.unrecognized(stmt, f"parameters of instruction {block.name!r}")
                continue
            with ctx.entity(stmt):
                params.append(_text_parameter(stmt.text or ""))
    return params


def _instruction(block: Block, ctx: ExtractContext, *, markup: bool) -> AddOnInstruction:
    name = block.name or ""
    if not name:
        raise ValueError("instruction has no name")
    owner = Owner(name=name, is_instruction=True)
    attrs = block.attributes
    description = block.child_text("Description") if markup else lookup(attrs, "Description")
    routines, rungs = routines_in(block, owner, ctx, markup=markup)
    return AddOnInstruction(
        name=name,
        description=clean_text(description),
        execute_prescan=parse_bool(lookup(attrs, "ExecutePrescan"), False),
        execute_postscan=parse_bool(lookup(attrs, "ExecutePostscan"), False),
        execute_enable_in_false=parse_bool(lookup(attrs, "ExecuteEnableInFalse"), False),
        parameters=_parameters(block, ctx, markup=markup),
        local_tags=tags_in(block, owner, ctx, markup=markup),
        routines=routines,
        rungs=rungs,
        **{field: lookup(attrs, key) for field, key in _STAMPS.items()},
    )


def extract_instructions(view: ControllerView, ctx: ExtractContext) -> list[AddOnInstruction]:
    if view.is_markup:
        blocks = view.controller.grandchildren(
            "AddOnInstructionDefinitions", "AddOnInstructionDefinition"
        )
    else:
        blocks = view.controller.children_named("ADD_ON_INSTRUCTION_DEFINITION")
    instructions: list[AddOnInstruction] = []
    for block in blocks:
        with ctx.entity(block):
            instructions.append(_instruction(block, ctx, markup=view.is_markup))
    logger.debug("extracted %d add-on instructions", len(instructions))
    return instructions
