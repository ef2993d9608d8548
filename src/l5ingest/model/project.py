"""Top-level record set produced by one parse pass."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .aoi import AddOnInstruction
from .hardware import Module
from .references import TagReference
from .routines import Routine, Rung
from .task import Task
from .tags import Tag
from .types import UserDefinedType


class FileFormat(str, Enum):
    """Interchange grammar of a project export."""

    MARKUP = "l5x"
    TEXT = "l5k"


class DiagnosticKind(str, Enum):
    UNRECOGNIZED_BLOCK = "unrecognized_block"
    INVALID_ENTITY = "invalid_entity"


class Diagnostic(BaseModel):
    """A recovered extraction problem.  Never fatal."""

    kind: DiagnosticKind
    family: str
    message: str
    block: str | None = None
    line: int | None = None


class ControllerInfo(BaseModel):
    name: str | None = None
    processor_type: str | None = None
    software_revision: str | None = None
    target_type: str | None = None
    target_name: str | None = None
    export_date: str | None = None
    interchange_version: str | None = None


class ProjectRecords(BaseModel):
    """Every entity extracted from one project file version.

    Records carry no version key; the store that persists them does.
    """

    file_format: FileFormat
    controller: ControllerInfo = ControllerInfo()
    tags: list[Tag] = []
    modules: list[Module] = []
    routines: list[Routine] = []
    rungs: list[Rung] = []
    tag_references: list[TagReference] = []
    data_types: list[UserDefinedType] = []
    add_on_instructions: list[AddOnInstruction] = []
    tasks: list[Task] = []
    diagnostics: list[Diagnostic] = []

    def counts(self) -> dict[str, int]:
        return {
            "tags": len(self.tags),
            "modules": len(self.modules),
            "routines": len(self.routines),
            "rungs": len(self.rungs),
            "tag_references": len(self.tag_references),
            "data_types": len(self.data_types),
            "add_on_instructions": len(self.add_on_instructions),
            "tasks": len(self.tasks),
        }

    def program_names(self) -> list[str]:
        """Programs seen in tags or routines, in first-seen order."""
        seen: dict[str, None] = {}
        for tag in self.tags:
            if tag.program is not None:
                seen.setdefault(tag.program, None)
        for routine in self.routines:
            seen.setdefault(routine.program, None)
        return list(seen)
