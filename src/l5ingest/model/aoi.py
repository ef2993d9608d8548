"""Add-On Instruction (reusable instruction block) records.

An Add-On Instruction mirrors a miniature project: it owns parameters,
local tags, routines and rungs.  Local tags, routines and rungs use the
project-level record types with the instruction's name in their
``program`` field.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .routines import Routine, Rung
from .tags import Tag


class ParameterUsage(str, Enum):
    INPUT = "Input"
    OUTPUT = "Output"
    INOUT = "InOut"

    @classmethod
    def parse(cls, value: str | None) -> ParameterUsage:
        if not value:
            return cls.INPUT
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"unknown parameter usage {value!r}")


class AOIParameter(BaseModel):
    name: str
    data_type: str = "Unknown"
    usage: ParameterUsage = ParameterUsage.INPUT
    required: bool = False
    visible: bool = True
    external_access: str | None = None
    description: str | None = None
    default_value: str | None = None


class AddOnInstruction(BaseModel):
    name: str
    description: str | None = None
    revision: str | None = None
    vendor: str | None = None
    execute_prescan: bool = False
    execute_postscan: bool = False
    execute_enable_in_false: bool = False
    created_date: str | None = None
    created_by: str | None = None
    edited_date: str | None = None
    edited_by: str | None = None
    parameters: list[AOIParameter] = []
    local_tags: list[Tag] = []
    routines: list[Routine] = []
    rungs: list[Rung] = []
