"""l5ingest: controller-project export ingestion.

Turns structured-markup (.L5X) and plain-text (.L5K) exports into typed
records, derives a project-wide tag cross-reference, and runs naming and
health analyses over the result.

Typical use::

    from l5ingest import ingest, check_naming, analyze_health

    records = ingest(data, filename="Plant.L5X")
    report = check_naming(records.tags, rules)
    health = analyze_health(records)
"""

from .analysis import (
    analyze_health,
    build_cross_references,
    check_naming,
    comment_coverage,
    compute_health_scores,
    describe_violation,
    detect_scope_conflicts,
    extract_operands,
    find_unused_tags,
    most_referenced_tags,
    resolve_operand,
    usage_breakdown,
    violation_spans,
)
from .config import IngestSettings, check_upload, load_naming_rules, resolve_rule_set
from .errors import IngestError, InvalidRulePattern, MalformedInput, RejectedUpload, UnsupportedFormat
from .extract import extract_project
from .model import (
    # Records
    AddOnInstruction,
    AOIParameter,
    ControllerInfo,
    DataTypeMember,
    Diagnostic,
    DiagnosticKind,
    FileFormat,
    Module,
    ProjectRecords,
    Routine,
    RoutineType,
    Rung,
    Tag,
    TagReference,
    TagType,
    Task,
    TaskType,
    UsageKind,
    UserDefinedType,
    # Analysis inputs and reports
    HealthReport,
    NamingReport,
    NamingRule,
    NamingViolation,
    RuleScope,
    ScopeConflict,
    Severity,
    Span,
)
from .pipeline import ParseOutcome, ingest, parse_version
from .reader import read_structure, sniff_format
from .store import InMemoryRecordStore, ParseStatus, RecordStore

__version__ = "0.1.0"

__all__ = [
    # Records
    "AOIParameter",
    "AddOnInstruction",
    "ControllerInfo",
    "DataTypeMember",
    "Diagnostic",
    "DiagnosticKind",
    "FileFormat",
    "Module",
    "ProjectRecords",
    "Routine",
    "RoutineType",
    "Rung",
    "Tag",
    "TagReference",
    "TagType",
    "Task",
    "TaskType",
    "UsageKind",
    "UserDefinedType",
    # Analysis inputs and reports
    "HealthReport",
    "NamingReport",
    "NamingRule",
    "NamingViolation",
    "RuleScope",
    "ScopeConflict",
    "Severity",
    "Span",
    # Pipeline
    "IngestError",
    "IngestSettings",
    "InMemoryRecordStore",
    "InvalidRulePattern",
    "MalformedInput",
    "ParseOutcome",
    "ParseStatus",
    "RecordStore",
    "RejectedUpload",
    "UnsupportedFormat",
    "analyze_health",
    "build_cross_references",
    "check_naming",
    "check_upload",
    "comment_coverage",
    "compute_health_scores",
    "describe_violation",
    "detect_scope_conflicts",
    "extract_operands",
    "extract_project",
    "find_unused_tags",
    "ingest",
    "load_naming_rules",
    "most_referenced_tags",
    "parse_version",
    "read_structure",
    "resolve_operand",
    "resolve_rule_set",
    "sniff_format",
    "usage_breakdown",
    "violation_spans",
]
