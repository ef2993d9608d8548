"""Aggregated health / coverage report records."""

from __future__ import annotations

from pydantic import BaseModel

from .tags import Tag


class CoverageStats(BaseModel):
    total_rungs: int = 0
    commented_rungs: int = 0
    coverage_percent: int = 0


class ProgramCoverage(CoverageStats):
    program: str


class RoutineCoverage(CoverageStats):
    program: str
    routine: str


class CommentCoverage(BaseModel):
    summary: CoverageStats = CoverageStats()
    by_program: list[ProgramCoverage] = []
    by_routine: list[RoutineCoverage] = []


class UsageBreakdown(BaseModel):
    read: int = 0
    write: int = 0
    both: int = 0
    total: int = 0


class TagUsageCount(BaseModel):
    tag_name: str
    references: int
    routines: int


class HealthScores(BaseModel):
    overall: int
    tag_efficiency: int
    documentation: int
    tag_usage: int


class HealthReport(BaseModel):
    total_tags: int
    unused_tags: list[Tag] = []
    comment_coverage: CommentCoverage = CommentCoverage()
    usage: UsageBreakdown = UsageBreakdown()
    most_referenced: list[TagUsageCount] = []
    scores: HealthScores
