"""Tests for record model validators and helpers."""

import pytest
from pydantic import ValidationError

from conftest import make_tag
from l5ingest.errors import InvalidRulePattern
from l5ingest.model import (
    AOIParameter,
    DataTypeMember,
    FileFormat,
    Module,
    NamingReport,
    NamingRule,
    NamingViolation,
    ParameterUsage,
    ProjectRecords,
    Routine,
    RoutineType,
    RuleScope,
    Rung,
    Severity,
    Span,
    Task,
    TaskType,
    UsageKind,
)


# ===========================================================================
# Tag
# ===========================================================================

class TestTag:
    def test_scope(self):
        assert make_tag("A").scope == "Controller"
        assert make_tag("A").is_shared
        assert make_tag("A", "Main").scope == "Main"
        assert not make_tag("A", "Main").is_shared

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match=r"tag name must not be blank"):
            make_tag("   ")

    def test_non_positive_dimension_rejected(self):
        with pytest.raises(ValidationError, match=r"array dimension must be positive"):
            make_tag("Buf", dimensions=[4, 0])

    def test_is_array(self):
        assert make_tag("Buf", dimensions=[10]).is_array
        assert not make_tag("Run").is_array


# ===========================================================================
# Rung / Routine
# ===========================================================================

class TestRung:
    def test_negative_number_rejected(self):
        with pytest.raises(ValidationError, match=r"rung number must be >= 0"):
            Rung(program="P", routine="R", number=-1, content="NOP()")

    def test_defaults(self):
        rung = Rung(program="P", routine="R", number=0, content="NOP()")
        assert rung.comment is None
        assert rung.rung_type == "N"


class TestRoutineType:
    @pytest.mark.parametrize("raw, expected", [
        ("RLL", RoutineType.RLL),
        ("rll", RoutineType.RLL),
        ("LD", RoutineType.RLL),
        ("ST", RoutineType.ST),
        ("FBD", RoutineType.FBD),
        ("SFC", RoutineType.SFC),
        ("Typeless", RoutineType.UNKNOWN),
        (None, RoutineType.UNKNOWN),
        ("", RoutineType.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert RoutineType.parse(raw) == expected

    def test_routine_default_type(self):
        assert Routine(name="R", program="P").routine_type == RoutineType.UNKNOWN


# ===========================================================================
# Task
# ===========================================================================

class TestTask:
    def test_periodic_with_rate(self):
        task = Task(name="Fast", task_type=TaskType.PERIODIC, rate=10)
        assert task.rate == 10.0

    def test_continuous_with_rate_rejected(self):
        """Only periodic tasks carry a rate."""
        with pytest.raises(ValidationError, match=r"CONTINUOUS task must not have 'rate'"):
            Task(name="Main", rate=10)

    def test_non_positive_rate_rejected(self):
        with pytest.raises(ValidationError, match=r"task rate must be positive"):
            Task(name="Fast", task_type=TaskType.PERIODIC, rate=0)

    def test_duplicate_programs_rejected(self):
        with pytest.raises(ValidationError, match=r"duplicates"):
            Task(name="Main", scheduled_programs=["A", "B", "A"])

    def test_defaults(self):
        task = Task(name="Main")
        assert task.task_type == TaskType.CONTINUOUS
        assert task.priority == 10
        assert task.scheduled_programs == []


# ===========================================================================
# Types / modules / instructions
# ===========================================================================

class TestDataTypeMember:
    def test_bit_overlay_needs_both_fields(self):
        with pytest.raises(ValidationError, match=r"'target' and 'bit_number' must be set together"):
            DataTypeMember(name="Flag", data_type="BIT", target="Host")

    def test_bit_overlay(self):
        member = DataTypeMember(name="Flag", data_type="BIT", target="Host", bit_number=3)
        assert member.bit_number == 3

    def test_non_positive_dimension_rejected(self):
        with pytest.raises(ValidationError, match=r"dimension must be positive"):
            DataTypeMember(name="Buf", data_type="DINT", dimension=0)


class TestModule:
    def test_own_parent_rejected(self):
        with pytest.raises(ValidationError, match=r"cannot be its own parent"):
            Module(name="Local", parent_module="Local")

    def test_root_module(self):
        assert Module(name="Local").parent_module is None


class TestParameterUsage:
    @pytest.mark.parametrize("raw, expected", [
        ("Input", ParameterUsage.INPUT),
        ("output", ParameterUsage.OUTPUT),
        ("InOut", ParameterUsage.INOUT),
        (None, ParameterUsage.INPUT),
    ])
    def test_parse(self, raw, expected):
        assert ParameterUsage.parse(raw) == expected

    def test_unknown_usage(self):
        with pytest.raises(ValueError, match=r"unknown parameter usage"):
            ParameterUsage.parse("Sideways")

    def test_parameter_defaults(self):
        param = AOIParameter(name="Open")
        assert param.usage == ParameterUsage.INPUT
        assert param.visible is True
        assert param.required is False


# ===========================================================================
# References / naming
# ===========================================================================

class TestUsageKind:
    @pytest.mark.parametrize("a, b, expected", [
        (UsageKind.READ, UsageKind.READ, UsageKind.READ),
        (UsageKind.WRITE, UsageKind.WRITE, UsageKind.WRITE),
        (UsageKind.READ, UsageKind.WRITE, UsageKind.BOTH),
        (UsageKind.WRITE, UsageKind.BOTH, UsageKind.BOTH),
        (UsageKind.BOTH, UsageKind.READ, UsageKind.BOTH),
    ])
    def test_combine(self, a, b, expected):
        assert a.combine(b) == expected


class TestNamingRule:
    def test_compile(self):
        rule = NamingRule(name="Pascal", pattern=r"^[A-Z]\w*$")
        assert rule.compile().match("Speed")

    def test_invalid_pattern(self):
        rule = NamingRule(name="Broken", pattern="[A-Z")
        with pytest.raises(InvalidRulePattern, match=r"Rule 'Broken' has an invalid pattern") as exc_info:
            rule.compile()
        assert exc_info.value.rule_name == "Broken"
        assert exc_info.value.pattern == "[A-Z"

    @pytest.mark.parametrize("scope, shared, expected", [
        (RuleScope.ALL, True, True),
        (RuleScope.ALL, False, True),
        (RuleScope.CONTROLLER, True, True),
        (RuleScope.CONTROLLER, False, False),
        (RuleScope.PROGRAM, True, False),
        (RuleScope.PROGRAM, False, True),
    ])
    def test_applies(self, scope, shared, expected):
        rule = NamingRule(name="r", pattern=".*", applies_to=scope)
        assert rule.applies(shared) is expected

    def test_defaults(self):
        rule = NamingRule(name="r", pattern=".*")
        assert rule.applies_to == RuleScope.ALL
        assert rule.severity == Severity.WARNING


class TestSpan:
    def test_end(self):
        assert Span(offset=2, length=3).end == 5

    @pytest.mark.parametrize("offset, length", [(-1, 2), (0, 0)])
    def test_bounds(self, offset, length):
        with pytest.raises(ValidationError, match=r"span must have offset >= 0 and length > 0"):
            Span(offset=offset, length=length)


class TestNamingReport:
    def _violation(self, name, severity):
        return NamingViolation(
            tag_name=name,
            tag_scope="Controller",
            rule_name="r",
            severity=severity,
            pattern=".*",
            message="m",
        )

    def test_filter(self):
        report = NamingReport(violations=[
            self._violation("a", Severity.ERROR),
            self._violation("b", Severity.WARNING),
            self._violation("c", Severity.ERROR),
        ])
        assert [v.tag_name for v in report.filter("error")] == ["a", "c"]
        assert [v.tag_name for v in report.filter(Severity.WARNING)] == ["b"]
        assert len(report.filter("all")) == 3
        assert len(report.filter(None)) == 3
        assert report.filter(Severity.INFO) == []


# ===========================================================================
# ProjectRecords
# ===========================================================================

class TestProjectRecords:
    def test_empty_counts(self):
        records = ProjectRecords(file_format=FileFormat.TEXT)
        assert set(records.counts().values()) == {0}

    def test_program_names_first_seen_order(self):
        records = ProjectRecords(
            file_format=FileFormat.MARKUP,
            tags=[make_tag("A"), make_tag("B", "Line2"), make_tag("C", "Line1")],
            routines=[Routine(name="R", program="Line1"), Routine(name="R", program="Line3")],
        )
        assert records.program_names() == ["Line2", "Line1", "Line3"]

    def test_json_round_trip(self):
        records = ProjectRecords(file_format=FileFormat.MARKUP, tags=[make_tag("A", dimensions=[2])])
        assert ProjectRecords.model_validate_json(records.model_dump_json()) == records
