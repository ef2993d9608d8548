"""Naming-convention checks and scope-conflict detection."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from l5ingest.errors import InvalidRulePattern
from l5ingest.model.naming import (
    NamingReport,
    NamingRule,
    NamingSummary,
    NamingViolation,
    ScopeConflict,
    Severity,
    SkippedRule,
    Span,
)
from l5ingest.model.tags import Tag

logger = logging.getLogger(__name__)

_CHARACTER_CLASSES = (
    ("lowercase", re.compile(r"[a-z]")),
    ("uppercase", re.compile(r"[A-Z]")),
    ("underscore", re.compile(r"_")),
    ("numeric", re.compile(r"\d")),
    ("special", re.compile(r"[^a-zA-Z0-9_]")),
)


# ---------------------------------------------------------------------------
# Highlighting
# ---------------------------------------------------------------------------

def strip_anchors(pattern: str) -> str:
    """Drop one leading ``^`` and one unescaped trailing ``$``."""
    if pattern.startswith("^"):
        pattern = pattern[1:]
    if pattern.endswith("$") and not pattern.endswith("\\$"):
        pattern = pattern[:-1]
    return pattern


def _matched_runs(name: str, pattern: str) -> list[tuple[int, int]] | None:
    """Non-empty matches of the unanchored pattern; None when unusable."""
    inner = strip_anchors(pattern)
    if not inner:
        return None
    try:
        regex = re.compile(inner)
    except re.error:
        return None
    return [(m.start(), m.end()) for m in regex.finditer(name) if m.end() > m.start()]


def violation_spans(name: str, pattern: str) -> list[Span]:
    """Runs of *name* not covered by any match of the unanchored pattern.

    When the pattern is empty once unanchored, or nothing in the name
    matches it, the whole name is offending.
    """
    if not name:
        return []
    runs = _matched_runs(name, pattern)
    if not runs:
        return [Span(offset=0, length=len(name))]
    spans: list[Span] = []
    last = 0
    for start, end in runs:
        if start > last:
            spans.append(Span(offset=last, length=start - last))
        last = max(last, end)
    if last < len(name):
        spans.append(Span(offset=last, length=len(name) - last))
    return spans


def describe_violation(name: str, pattern: str, rule_name: str) -> str:
    """Human-readable reason a name fails a rule."""
    fallback = f'Does not match the "{rule_name}" pattern'
    if not strip_anchors(pattern):
        return fallback
    offending = [name[s.offset:s.end] for s in violation_spans(name, pattern)]
    if not offending:
        return fallback
    chars = "".join(offending)
    kinds = [label for label, regex in _CHARACTER_CLASSES if regex.search(chars)]
    if not kinds:
        return fallback
    quoted = ", ".join(f'"{s}"' for s in offending)
    return f"Contains {'/'.join(kinds)} characters ({quoted}) not permitted by this rule"


# ---------------------------------------------------------------------------
# Scope conflicts
# ---------------------------------------------------------------------------

def detect_scope_conflicts(tags: Iterable[Tag]) -> list[ScopeConflict]:
    """Shared tag names that a program also declares.

    Inside such a program the local tag shadows the shared one.
    """
    shared: set[str] = set()
    programs: dict[str, set[str]] = {}
    for tag in tags:
        if tag.is_shared:
            shared.add(tag.name)
        else:
            programs.setdefault(tag.name, set()).add(tag.program)
    return [
        ScopeConflict(tag_name=name, programs=sorted(programs[name]))
        for name in sorted(shared & programs.keys())
    ]


# ---------------------------------------------------------------------------
# Rule evaluation
# ---------------------------------------------------------------------------

def check_naming(tags: Sequence[Tag], rules: Sequence[NamingRule]) -> NamingReport:
    """Evaluate every applicable rule against every tag.

    A rule whose pattern does not compile is skipped and listed in
    ``skipped_rules``; the remaining rules still run.
    """
    compiled: list[tuple[NamingRule, re.Pattern[str]]] = []
    skipped: list[SkippedRule] = []
    for rule in rules:
        try:
            compiled.append((rule, rule.compile()))
        except InvalidRulePattern as exc:
            logger.warning("skipping naming rule: %s", exc)
            skipped.append(SkippedRule(rule_name=rule.name, pattern=rule.pattern, reason=str(exc)))

    violations: list[NamingViolation] = []
    for tag in tags:
        for rule, regex in compiled:
            if not rule.applies(tag.is_shared) or regex.search(tag.name):
                continue
            spans = violation_spans(tag.name, rule.pattern)
            violations.append(NamingViolation(
                tag_name=tag.name,
                tag_scope=tag.scope,
                rule_id=rule.id,
                rule_name=rule.name,
                severity=rule.severity,
                pattern=rule.pattern,
                spans=spans,
                offending=[tag.name[s.offset:s.end] for s in spans],
                message=describe_violation(tag.name, rule.pattern, rule.name),
            ))

    conflicts = detect_scope_conflicts(tags)
    by_severity = {severity: 0 for severity in Severity}
    for violation in violations:
        by_severity[violation.severity] += 1
    summary = NamingSummary(
        errors=by_severity[Severity.ERROR],
        warnings=by_severity[Severity.WARNING],
        info=by_severity[Severity.INFO],
        total=len(violations),
        scope_conflicts=len(conflicts),
    )
    logger.debug(
        "naming: %d violations, %d scope conflicts over %d tags",
        len(violations), len(conflicts), len(tags),
    )
    return NamingReport(
        violations=violations,
        scope_conflicts=conflicts,
        skipped_rules=skipped,
        summary=summary,
        tags_checked=len(tags),
        rules_applied=len(compiled),
    )
