"""Typed records for parsed controller projects."""

from .aoi import AddOnInstruction, AOIParameter, ParameterUsage
from .hardware import Module
from .naming import (
    NamingReport,
    NamingRule,
    NamingSummary,
    NamingViolation,
    RuleScope,
    ScopeConflict,
    Severity,
    SkippedRule,
    Span,
)
from .project import (
    ControllerInfo,
    Diagnostic,
    DiagnosticKind,
    FileFormat,
    ProjectRecords,
)
from .references import TagReference, UsageKind
from .reports import (
    CommentCoverage,
    CoverageStats,
    HealthReport,
    HealthScores,
    ProgramCoverage,
    RoutineCoverage,
    TagUsageCount,
    UsageBreakdown,
)
from .routines import Routine, RoutineType, Rung
from .tags import CONTROLLER_SCOPE, Tag, TagType
from .task import Task, TaskType
from .types import DataTypeMember, UserDefinedType

__all__ = [
    "AOIParameter",
    "AddOnInstruction",
    "CONTROLLER_SCOPE",
    "CommentCoverage",
    "ControllerInfo",
    "CoverageStats",
    "DataTypeMember",
    "Diagnostic",
    "DiagnosticKind",
    "FileFormat",
    "HealthReport",
    "HealthScores",
    "Module",
    "NamingReport",
    "NamingRule",
    "NamingSummary",
    "NamingViolation",
    "ParameterUsage",
    "ProgramCoverage",
    "ProjectRecords",
    "Routine",
    "RoutineCoverage",
    "RoutineType",
    "Rung",
    "RuleScope",
    "ScopeConflict",
    "Severity",
    "SkippedRule",
    "Span",
    "Tag",
    "TagReference",
    "TagType",
    "TagUsageCount",
    "Task",
    "TaskType",
    "UsageBreakdown",
    "UserDefinedType",
]
