"""Derived cross-reference records."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class UsageKind(str, Enum):
    READ = "read"
    WRITE = "write"
    BOTH = "both"

    def combine(self, other: UsageKind) -> UsageKind:
        """Union of two usage kinds: equal kinds stay, any mix is BOTH."""
        return self if self == other else UsageKind.BOTH


class TagReference(BaseModel):
    """One appearance of a tag identity in one rung.

    ``tag_name`` is the resolved identity and need not name a declared
    tag.  ``program`` is where the reference occurred, not where the tag
    is scoped.  ``usage`` is aggregated over the whole (tag, program,
    routine) triple, so every row for that triple carries the same kind.
    """

    tag_name: str
    routine: str
    program: str
    rung_number: int
    usage: UsageKind
