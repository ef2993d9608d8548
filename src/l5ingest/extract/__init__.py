"""Entity extractors: structural tree to typed records.

One extractor per entity family, each with a markup and a text adapter
emitting identical record types.  Families only read the tree, so they
can run concurrently; their output and diagnostics are merged in a fixed
family order either way.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from l5ingest.model.project import ProjectRecords
from l5ingest.reader import MarkupTree, TextTree

from ._aoi import extract_instructions
from ._context import ControllerView, ExtractContext, Owner, parse_bool, parse_dimensions
from ._controller import controller_info, extract_controller
from ._declarations import Declaration, MemberDeclaration, parse_declaration, parse_member
from ._modules import extract_modules
from ._routines import extract_programs, routines_in, rung_content
from ._tags import classify, extract_tags, tags_in
from ._tasks import extract_tasks
from ._types import extract_data_types

logger = logging.getLogger(__name__)

FAMILIES: tuple[tuple[str, Callable[[ControllerView, ExtractContext], Any]], ...] = (
    ("controller", extract_controller),
    ("data_types", extract_data_types),
    ("modules", extract_modules),
    ("add_on_instructions", extract_instructions),
    ("tags", extract_tags),
    ("programs", extract_programs),
    ("tasks", extract_tasks),
)


def _run_family(family: str, extractor: Callable[[ControllerView, ExtractContext], Any], view: ControllerView):
    ctx = ExtractContext(family=family)
    return extractor(view, ctx), ctx.diagnostics


def extract_project(tree: MarkupTree | TextTree, *, parallel: bool = False) -> ProjectRecords:
    """Run every family extractor over *tree*.

    The returned record set has no tag references yet; those are derived
    once all rungs exist.

    Raises:
        MalformedInput: the tree has no controller block.
    """
    view = ControllerView.of(tree)
    if parallel:
        with ThreadPoolExecutor(max_workers=len(FAMILIES), thread_name_prefix="l5ingest") as pool:
            futures = [pool.submit(_run_family, family, fn, view) for family, fn in FAMILIES]
            results = [f.result() for f in futures]
    else:
        results = [_run_family(family, fn, view) for family, fn in FAMILIES]

    outputs = {family: output for (family, _), (output, _) in zip(FAMILIES, results)}
    diagnostics = [d for _, family_diagnostics in results for d in family_diagnostics]
    routines, rungs = outputs["programs"]
    records = ProjectRecords(
        file_format=tree.format,
        controller=outputs["controller"],
        tags=outputs["tags"],
        modules=outputs["modules"],
        routines=routines,
        rungs=rungs,
        data_types=outputs["data_types"],
        add_on_instructions=outputs["add_on_instructions"],
        tasks=outputs["tasks"],
        diagnostics=diagnostics,
    )
    logger.info(
        "extracted %s from %s tree (%d diagnostics)",
        ", ".join(f"{n} {k}" for k, n in records.counts().items() if n),
        tree.format.value.upper(),
        len(diagnostics),
    )
    return records


__all__ = [
    "ControllerView",
    "Declaration",
    "ExtractContext",
    "FAMILIES",
    "MemberDeclaration",
    "Owner",
    "classify",
    "controller_info",
    "extract_project",
    "parse_bool",
    "parse_declaration",
    "parse_dimensions",
    "parse_member",
    "routines_in",
    "rung_content",
    "tags_in",
]
