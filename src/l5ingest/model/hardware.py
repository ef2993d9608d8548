"""I/O module records.

Modules form a tree through ``parent_module``.  The root module (the
controller's own backplane entry) has no parent; exports that list a
module as its own parent are normalized to ``None`` at extraction time.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator


class Module(BaseModel):
    name: str
    catalog_number: str | None = None
    vendor: str | None = None
    parent_module: str | None = None
    parent_port_id: int | None = None
    slot: int | None = None
    inhibited: bool = False
    connection: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _not_own_parent(self):
        if self.parent_module is not None and self.parent_module == self.name:
            raise ValueError(f"module {self.name!r} cannot be its own parent")
        return self
