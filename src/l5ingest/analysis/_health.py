"""Unused-tag detection, comment coverage and project health scores."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable

from l5ingest.model.project import ProjectRecords
from l5ingest.model.references import TagReference, UsageKind
from l5ingest.model.reports import (
    CommentCoverage,
    CoverageStats,
    HealthReport,
    HealthScores,
    ProgramCoverage,
    RoutineCoverage,
    TagUsageCount,
    UsageBreakdown,
)
from l5ingest.model.routines import Rung
from l5ingest.model.tags import Tag

from ._resolver import peel

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part * 100 / whole)


# ---------------------------------------------------------------------------
# Unused tags
# ---------------------------------------------------------------------------

def _path_prefixes(identity: str) -> Iterable[str]:
    candidate = peel(identity)
    while candidate:
        yield candidate
        candidate = peel(candidate)


def is_tag_used(tag: Tag, referenced: set[str], referenced_prefixes: set[str]) -> bool:
    name = tag.name
    if name in referenced or name in referenced_prefixes:
        return True
    parts = name.split(".")
    for i in range(1, len(parts)):
        if ".".join(parts[:i]) in referenced:
            return True
    return name.split("[")[0] in referenced


def find_unused_tags(tags: Iterable[Tag], references: Iterable[TagReference]) -> list[Tag]:
    """Tags with no reference to themselves, a parent path, or a member.

    ``Motor.Status`` counts as used when ``Motor.Status.Bit0`` is
    referenced, and when ``Motor`` is.
    """
    referenced = {r.tag_name for r in references}
    prefixes = {p for identity in referenced for p in _path_prefixes(identity)}
    unused = [t for t in tags if not is_tag_used(t, referenced, prefixes)]
    unused.sort(key=lambda t: (t.name, t.scope))
    return unused


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------

def _commented(rung: Rung) -> bool:
    return bool(rung.comment and rung.comment.strip())


def comment_coverage(rungs: Iterable[Rung]) -> CommentCoverage:
    """Share of rungs with a comment, overall, per program and per routine."""
    programs: dict[str, list[int]] = {}
    routines: dict[tuple[str, str], list[int]] = {}
    total = commented = 0
    for rung in rungs:
        hit = int(_commented(rung))
        total += 1
        commented += hit
        for counts in (
            programs.setdefault(rung.program, [0, 0]),
            routines.setdefault((rung.program, rung.routine), [0, 0]),
        ):
            counts[0] += 1
            counts[1] += hit

    return CommentCoverage(
        summary=CoverageStats(
            total_rungs=total,
            commented_rungs=commented,
            coverage_percent=percent(commented, total),
        ),
        by_program=[
            ProgramCoverage(
                program=program,
                total_rungs=n,
                commented_rungs=c,
                coverage_percent=percent(c, n),
            )
            for program, (n, c) in sorted(programs.items())
        ],
        by_routine=[
            RoutineCoverage(
                program=program,
                routine=routine,
                total_rungs=n,
                commented_rungs=c,
                coverage_percent=percent(c, n),
            )
            for (program, routine), (n, c) in sorted(routines.items())
        ],
    )


def usage_breakdown(references: Iterable[TagReference]) -> UsageBreakdown:
    counts = Counter(r.usage for r in references)
    return UsageBreakdown(
        read=counts[UsageKind.READ],
        write=counts[UsageKind.WRITE],
        both=counts[UsageKind.BOTH],
        total=sum(counts.values()),
    )


def most_referenced_tags(references: Iterable[TagReference], limit: int = 10) -> list[TagUsageCount]:
    """Identities with the most reference rows, ties broken by name."""
    counts: Counter[str] = Counter()
    routines: dict[str, set[tuple[str, str]]] = {}
    for ref in references:
        counts[ref.tag_name] += 1
        routines.setdefault(ref.tag_name, set()).add((ref.program, ref.routine))
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        TagUsageCount(tag_name=name, references=n, routines=len(routines[name]))
        for name, n in ranked[:limit]
    ]


def compute_health_scores(
    total_tags: int,
    unused_tags: int,
    comment_coverage_percent: int,
    total_references: int,
) -> HealthScores:
    """Weighted 0-100 scores.

    Tag efficiency loses two points per percent of unused tags; tag usage
    reaches 100 at five references per tag.  ``overall`` weights the
    unrounded components 0.4 / 0.35 / 0.25.
    """
    if total_tags > 0:
        tag_efficiency = max(0.0, 100 - unused_tags / total_tags * 200)
        tag_usage = min(100.0, total_references / total_tags * 20)
    else:
        tag_efficiency = 100.0
        tag_usage = 0.0
    documentation = float(comment_coverage_percent)
    overall = tag_efficiency * 0.4 + documentation * 0.35 + tag_usage * 0.25
    return HealthScores(
        overall=round_half_up(overall),
        tag_efficiency=round_half_up(tag_efficiency),
        documentation=round_half_up(documentation),
        tag_usage=round_half_up(tag_usage),
    )


def analyze_health(records: ProjectRecords, *, limit: int = 10) -> HealthReport:
    """Unused tags, coverage, usage mix and scores for one record set."""
    unused = find_unused_tags(records.tags, records.tag_references)
    coverage = comment_coverage(records.rungs)
    scores = compute_health_scores(
        total_tags=len(records.tags),
        unused_tags=len(unused),
        comment_coverage_percent=coverage.summary.coverage_percent,
        total_references=len(records.tag_references),
    )
    logger.debug("health: %d/%d tags unused, overall %d", len(unused), len(records.tags), scores.overall)
    return HealthReport(
        total_tags=len(records.tags),
        unused_tags=unused,
        comment_coverage=coverage,
        usage=usage_breakdown(records.tag_references),
        most_referenced=most_referenced_tags(records.tag_references, limit),
        scores=scores,
    )
