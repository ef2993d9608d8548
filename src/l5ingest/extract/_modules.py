"""I/O module extraction."""

from __future__ import annotations

import logging
from typing import Any

from l5ingest.model.hardware import Module
from l5ingest.reader import Block

from ._context import ControllerView, ExtractContext, lookup, parse_bool, parse_int

logger = logging.getLogger(__name__)


def _parent(name: str, parent: str | None) -> str | None:
    # The root module names itself as parent.
    if not parent or parent == name:
        return None
    return parent


def _markup_slot(block: Block) -> int | None:
    slot = parse_int(block.attr("Slot"))
    if slot is not None:
        return slot
    for port in block.grandchildren("Ports", "Port"):
        if parse_bool(port.attr("Upstream"), False):
            address = port.attr("Address") or ""
            if address.isdigit():
                return int(address)
    return None


def _markup_connection(block: Block) -> dict[str, Any] | None:
    comms = block.child("Communications")
    if comms is None:
        return None
    connection: dict[str, Any] = dict(comms.attributes)
    connections = [dict(c.attributes) for c in comms.grandchildren("Connections", "Connection")]
    if connections:
        connection["connections"] = connections
    return connection or None


def _markup_module(block: Block) -> Module:
    name = block.name or ""
    return Module(
        name=name,
        catalog_number=block.attr("CatalogNumber"),
        vendor=block.attr("Vendor"),
        parent_module=_parent(name, block.attr("ParentModule")),
        parent_port_id=parse_int(block.attr("ParentModPortId")),
        slot=_markup_slot(block),
        inhibited=parse_bool(block.attr("Inhibited"), False),
        connection=_markup_connection(block),
    )


def _text_module(block: Block) -> Module:
    name = block.name or ""
    attrs = block.attributes
    connections = [
        {"Name": c.name, **c.attributes} for c in block.children_named("CONNECTION")
    ]
    return Module(
        name=name,
        catalog_number=lookup(attrs, "CatalogNumber"),
        vendor=lookup(attrs, "Vendor"),
        parent_module=_parent(name, lookup(attrs, "ParentModule", "Parent")),
        parent_port_id=parse_int(lookup(attrs, "ParentModPortId")),
        slot=parse_int(lookup(attrs, "Slot")),
        inhibited=parse_bool(lookup(attrs, "Inhibited"), False),
        connection={"connections": connections} if connections else None,
    )


def extract_modules(view: ControllerView, ctx: ExtractContext) -> list[Module]:
    if view.is_markup:
        blocks = view.controller.grandchildren("Modules", "Module")
        build = _markup_module
    else:
        blocks = view.controller.children_named("MODULE")
        build = _text_module
    modules: list[Module] = []
    for block in blocks:
        with ctx.entity(block):
            modules.append(build(block))
    logger.debug("extracted %d modules", len(modules))
    return modules
