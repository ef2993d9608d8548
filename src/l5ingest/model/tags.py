"""Tag records.

A tag's scope is encoded by ``program``: ``None`` means the shared
(controller) scope, otherwise the name of the owning program.  Tags owned
by an Add-On Instruction carry the instruction's name in ``program``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator

CONTROLLER_SCOPE = "Controller"


class TagType(str, Enum):
    BASE = "Base"
    ALIAS = "Alias"
    PRODUCED = "Produced"
    CONSUMED = "Consumed"


class Tag(BaseModel):
    """A declared, named data element."""

    name: str
    data_type: str = "Unknown"
    program: str | None = None
    description: str | None = None
    radix: str | None = None
    external_access: str | None = None
    alias_for: str | None = None
    dimensions: list[int] = []
    usage: str | None = None
    tag_type: TagType = TagType.BASE
    value: str | None = None
    constant: bool = False
    connection: dict[str, Any] | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("tag name must not be blank")
        return v

    @field_validator("dimensions")
    @classmethod
    def _dimensions_positive(cls, v: list[int]) -> list[int]:
        for dim in v:
            if dim <= 0:
                raise ValueError(f"array dimension must be positive, got {dim}")
        return v

    @property
    def scope(self) -> str:
        return CONTROLLER_SCOPE if self.program is None else self.program

    @property
    def is_shared(self) -> bool:
        return self.program is None

    @property
    def is_array(self) -> bool:
        return bool(self.dimensions)
