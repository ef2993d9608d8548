"""Naming rule inputs and naming / scope-conflict results."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, model_validator

from ..errors import InvalidRulePattern


class RuleScope(str, Enum):
    """Which tags a naming rule applies to."""

    ALL = "all"
    CONTROLLER = "controller"
    PROGRAM = "program"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class NamingRule(BaseModel):
    name: str
    pattern: str
    applies_to: RuleScope = RuleScope.ALL
    severity: Severity = Severity.WARNING
    id: str | None = None

    def compile(self) -> re.Pattern[str]:
        """Compile the rule's pattern, raising ``InvalidRulePattern`` on failure."""
        try:
            return re.compile(self.pattern)
        except re.error as exc:
            raise InvalidRulePattern(self.name, self.pattern, str(exc)) from exc

    def applies(self, is_shared: bool) -> bool:
        if self.applies_to == RuleScope.ALL:
            return True
        if self.applies_to == RuleScope.CONTROLLER:
            return is_shared
        return not is_shared


class Span(BaseModel):
    """A run of characters in a tag name, as (offset, length)."""

    offset: int
    length: int

    @model_validator(mode="after")
    def _bounds_check(self):
        if self.offset < 0 or self.length <= 0:
            raise ValueError(
                f"span must have offset >= 0 and length > 0, got ({self.offset}, {self.length})"
            )
        return self

    @property
    def end(self) -> int:
        return self.offset + self.length


class NamingViolation(BaseModel):
    tag_name: str
    tag_scope: str
    rule_id: str | None = None
    rule_name: str
    severity: Severity
    pattern: str
    spans: list[Span] = []
    offending: list[str] = []
    message: str


class ScopeConflict(BaseModel):
    """A tag name declared in the shared scope and shadowed by programs."""

    tag_name: str
    programs: list[str]


class SkippedRule(BaseModel):
    rule_name: str
    pattern: str
    reason: str


class NamingSummary(BaseModel):
    errors: int = 0
    warnings: int = 0
    info: int = 0
    total: int = 0
    scope_conflicts: int = 0


class NamingReport(BaseModel):
    violations: list[NamingViolation] = []
    scope_conflicts: list[ScopeConflict] = []
    skipped_rules: list[SkippedRule] = []
    summary: NamingSummary = NamingSummary()
    tags_checked: int = 0
    rules_applied: int = 0

    def filter(self, severity: Severity | str | None) -> list[NamingViolation]:
        """Violations of one severity; ``None`` or ``"all"`` returns everything."""
        if severity is None or severity == "all":
            return list(self.violations)
        wanted = Severity(severity)
        return [v for v in self.violations if v.severity == wanted]
