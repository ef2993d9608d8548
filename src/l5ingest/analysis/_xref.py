"""Project-wide tag cross-reference."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from l5ingest.model.references import TagReference, UsageKind
from l5ingest.model.routines import Rung
from l5ingest.model.tags import Tag

from ._ladder import extract_operands
from ._resolver import resolve_operand

logger = logging.getLogger(__name__)


def visible_names(tags: Iterable[Tag]) -> tuple[frozenset[str], dict[str, frozenset[str]]]:
    """Shared tag names, and per-program names (program tags plus shared)."""
    shared: set[str] = set()
    local: dict[str, set[str]] = {}
    for tag in tags:
        if tag.is_shared:
            shared.add(tag.name)
        else:
            local.setdefault(tag.program, set()).add(tag.name)
    shared_names = frozenset(shared)
    return shared_names, {p: frozenset(names | shared) for p, names in local.items()}


def build_cross_references(rungs: Iterable[Rung], tags: Iterable[Tag]) -> list[TagReference]:
    """One row per distinct tag identity per rung.

    Every row for a (tag, program, routine) triple carries the union of
    the usages seen anywhere in that routine.
    """
    shared, by_program = visible_names(tags)
    usage: dict[tuple[str, str, str], UsageKind] = {}
    rows: list[tuple[tuple[str, str, str], int]] = []

    for rung in rungs:
        declared = by_program.get(rung.program, shared)
        seen: set[str] = set()
        for use in extract_operands(rung.content):
            identity = resolve_operand(use.operand, declared)
            if not identity:
                continue
            key = (identity, rung.program, rung.routine)
            previous = usage.get(key)
            usage[key] = use.usage if previous is None else previous.combine(use.usage)
            if identity not in seen:
                seen.add(identity)
                rows.append((key, rung.number))

    references = [
        TagReference(
            tag_name=key[0],
            program=key[1],
            routine=key[2],
            rung_number=number,
            usage=usage[key],
        )
        for key, number in rows
    ]
    logger.debug("built %d tag references over %d identities", len(references), len(usage))
    return references
