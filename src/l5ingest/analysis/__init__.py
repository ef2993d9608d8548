"""Derived analyses over an extracted record set.

The cross-reference builder needs every rung, so it runs after
extraction.  Naming checks and health derivation only read the records
and are independent of each other.
"""

from ._health import (
    analyze_health,
    comment_coverage,
    compute_health_scores,
    find_unused_tags,
    most_referenced_tags,
    usage_breakdown,
)
from ._ladder import SIGNATURES, OperandUse, Signature, extract_operands, split_arguments
from ._naming import (
    check_naming,
    describe_violation,
    detect_scope_conflicts,
    strip_anchors,
    violation_spans,
)
from ._resolver import peel, resolve_operand
from ._xref import build_cross_references

__all__ = [
    "OperandUse",
    "SIGNATURES",
    "Signature",
    "analyze_health",
    "build_cross_references",
    "check_naming",
    "comment_coverage",
    "compute_health_scores",
    "describe_violation",
    "detect_scope_conflicts",
    "extract_operands",
    "find_unused_tags",
    "most_referenced_tags",
    "peel",
    "resolve_operand",
    "split_arguments",
    "strip_anchors",
    "usage_breakdown",
    "violation_spans",
]
