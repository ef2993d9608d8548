"""Routine and rung records."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, field_validator


class RoutineType(str, Enum):
    """Programming language of a routine body."""

    RLL = "RLL"
    ST = "ST"
    FBD = "FBD"
    SFC = "SFC"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> RoutineType:
        """Map an export's routine type string onto the enum.

        Unrecognized or missing values map to ``UNKNOWN``.
        """
        if not value:
            return cls.UNKNOWN
        key = value.strip().upper()
        if key in ("LD", "LADDER"):
            key = "RLL"
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class Routine(BaseModel):
    """A routine, unique by (program, name).

    ``rung_count`` is ``None`` for routines without ladder rungs.
    """

    name: str
    program: str
    routine_type: RoutineType = RoutineType.UNKNOWN
    rung_count: int | None = None
    description: str | None = None


class Rung(BaseModel):
    """One rung of ladder logic.

    ``content`` is the rung's logic text exactly as exported, minus the
    terminating semicolon.  Numbers are unique within a routine but need
    not be contiguous.
    """

    program: str
    routine: str
    number: int
    content: str
    comment: str | None = None
    rung_type: str = "N"

    @field_validator("number")
    @classmethod
    def _number_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"rung number must be >= 0, got {v}")
        return v
