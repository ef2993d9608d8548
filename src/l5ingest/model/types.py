"""User-defined data type records.

A member's ``data_type`` may name another user-defined type; the records
keep that as a plain name and never follow it.
"""

from __future__ import annotations

from pydantic import BaseModel, model_validator


class DataTypeMember(BaseModel):
    """One ordered member of a user-defined type."""

    name: str
    data_type: str = "Unknown"
    dimension: int | None = None
    radix: str | None = None
    external_access: str | None = None
    description: str | None = None
    target: str | None = None
    bit_number: int | None = None

    @model_validator(mode="after")
    def _bit_overlay_check(self):
        if (self.target is None) != (self.bit_number is None):
            raise ValueError(
                f"member {self.name!r}: 'target' and 'bit_number' must be set together"
            )
        if self.dimension is not None and self.dimension <= 0:
            raise ValueError(
                f"member {self.name!r}: dimension must be positive, got {self.dimension}"
            )
        return self


class UserDefinedType(BaseModel):
    name: str
    description: str | None = None
    family: str | None = None
    members: list[DataTypeMember] = []
