"""Routine and rung extraction.

Rung logic is kept verbatim; nothing here looks inside it.  In the
plain-text grammar a ladder routine is a sequence of statements::

    RC: "Start the pump when the tank is full";
    N: XIC(TankFull)OTE(PumpRun);

An ``RC:`` comment belongs to the ``N:`` rung that follows it.  Rungs are
numbered from 0 in order of appearance.
"""

from __future__ import annotations

import logging

from l5ingest.model.routines import Routine, RoutineType, Rung
from l5ingest.reader import STATEMENT, Block, unescape

from ._context import ControllerView, ExtractContext, Owner, clean_text, parse_int

logger = logging.getLogger(__name__)

TEXT_ROUTINE_TYPES = {
    "ROUTINE": RoutineType.RLL,
    "ST_ROUTINE": RoutineType.ST,
    "FBD_ROUTINE": RoutineType.FBD,
    "SFC_ROUTINE": RoutineType.SFC,
}

_MARKUP_CONTENT_TYPES = {
    "RLLContent": RoutineType.RLL,
    "STContent": RoutineType.ST,
    "FBDContent": RoutineType.FBD,
    "SFCContent": RoutineType.SFC,
}


def rung_content(text: str | None) -> str:
    """Strip the logic text and its terminating semicolon."""
    content = (text or "").strip()
    if content.endswith(";"):
        content = content[:-1].rstrip()
    return content


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return unescape(text[1:-1])
    return text


class _RungCollector:
    """Enforces unique rung numbers within one routine."""

    def __init__(self, owner: Owner, routine: str, ctx: ExtractContext) -> None:
        self.owner = owner
        self.routine = routine
        self.ctx = ctx
        self.rungs: list[Rung] = []
        self._numbers: set[int] = set()

    def add(self, block: Block, number: int, content: str, comment: str | None, rung_type: str) -> None:
        if number in self._numbers:
            self.ctx.invalid(
                block,
                f"duplicate rung number {number} in routine {self.routine!r} of {self.owner.label}",
            )
            return
        with self.ctx.entity(block):
            self.rungs.append(Rung(
                program=self.owner.name or "",
                routine=self.routine,
                number=number,
                content=content,
                comment=clean_text(comment),
                rung_type=rung_type or "N",
            ))
            self._numbers.add(number)


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

def _markup_routine(block: Block, owner: Owner, ctx: ExtractContext) -> tuple[Routine, list[Rung]]:
    name = block.name or ""
    routine_type = RoutineType.parse(block.attr("Type"))
    if routine_type == RoutineType.UNKNOWN:
        for keyword, inferred in _MARKUP_CONTENT_TYPES.items():
            if block.child(keyword) is not None:
                routine_type = inferred
                break

    collector = _RungCollector(owner, name, ctx)
    content = block.child("RLLContent")
    if content is not None:
        for index, rung in enumerate(content.children_named("Rung")):
            with ctx.entity(rung):
                number = parse_int(rung.attr("Number"))
                collector.add(
                    rung,
                    index if number is None else number,
                    rung_content(rung.child_text("Text")),
                    rung.child_text("Comment"),
                    rung.attr("Type") or "N",
                )

    routine = Routine(
        name=name,
        program=owner.name or "",
        routine_type=routine_type,
        rung_count=len(collector.rungs) or None,
        description=clean_text(block.child_text("Description")),
    )
    return routine, collector.rungs


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def _text_routine(block: Block, owner: Owner, ctx: ExtractContext) -> tuple[Routine, list[Rung]]:
    name = block.name or ""
    declared = block.attr("Type")
    routine_type = RoutineType.parse(declared) if declared else TEXT_ROUTINE_TYPES[block.keyword]

    collector = _RungCollector(owner, name, ctx)
    pending_comment: str | None = None
    number = 0
    for stmt in block.children:
        if stmt.keyword != STATEMENT:
            ctx.unrecognized(stmt, f"routine {name!r} of {owner.label}")
            continue
        text = (stmt.text or "").strip()
        if text.startswith("RC:"):
            comment = _unquote(text[3:])
            pending_comment = comment if pending_comment is None else f"{pending_comment}\n{comment}"
        elif text.startswith("N:"):
            collector.add(stmt, number, rung_content(text[2:]), pending_comment, "N")
            pending_comment = None
            number += 1
        else:
            logger.debug("ignoring statement in routine %r: %.40s", name, text)

    routine = Routine(
        name=name,
        program=owner.name or "",
        routine_type=routine_type,
        rung_count=len(collector.rungs) or None,
        description=clean_text(block.attr("Description")),
    )
    return routine, collector.rungs


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

def routines_in(
    container: Block,
    owner: Owner,
    ctx: ExtractContext,
    *,
    markup: bool,
) -> tuple[list[Routine], list[Rung]]:
    """Routines (and their rungs) declared directly in a program or AOI.

    A later routine reusing a name already seen in the container is
    dropped along with its rungs.
    """
    routines: list[Routine] = []
    rungs: list[Rung] = []
    seen: set[str] = set()
    if markup:
        blocks = container.grandchildren("Routines", "Routine")
        build = _markup_routine
    else:
        blocks = [c for c in container.children if c.keyword in TEXT_ROUTINE_TYPES]
        build = _text_routine
    for block in blocks:
        with ctx.entity(block):
            if (block.name or "") in seen:
                raise ValueError(f"duplicate routine name {block.name!r} in {owner.label}")
            routine, routine_rungs = build(block, owner, ctx)
            seen.add(routine.name)
            routines.append(routine)
            rungs.extend(routine_rungs)
    return routines, rungs


# Program children that belong to other families or carry nothing to extract.
_MARKUP_PROGRAM_CHILDREN = {"Description", "Tags", "Routines", "ChildPrograms"}
_TEXT_PROGRAM_CHILDREN = {"TAG", "CHILD_PROGRAMS", *TEXT_ROUTINE_TYPES}


def extract_programs(view: ControllerView, ctx: ExtractContext) -> tuple[list[Routine], list[Rung]]:
    """Every program's routines and rungs, in program order."""
    routines: list[Routine] = []
    rungs: list[Rung] = []
    known = _MARKUP_PROGRAM_CHILDREN if view.is_markup else _TEXT_PROGRAM_CHILDREN
    for program in view.programs():
        owner = Owner(name=program.name or "Unknown")
        for child in program.children:
            if child.keyword != STATEMENT and child.keyword not in known:
                ctx.unrecognized(child, owner.label)
        found, found_rungs = routines_in(program, owner, ctx, markup=view.is_markup)
        routines.extend(found)
        rungs.extend(found_rungs)
    logger.debug("extracted %d routines, %d rungs", len(routines), len(rungs))
    return routines, rungs
