"""Task / scheduling records."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, model_validator


class TaskType(str, Enum):
    CONTINUOUS = "CONTINUOUS"
    PERIODIC = "PERIODIC"
    EVENT = "EVENT"


class Task(BaseModel):
    """A scheduling task.

    ``scheduled_programs`` is in execution order.  ``rate`` and
    ``watchdog`` are in milliseconds.
    """

    name: str
    task_type: TaskType = TaskType.CONTINUOUS
    rate: float | None = None
    priority: int = 10
    watchdog: float | None = None
    inhibited: bool = False
    disable_update_outputs: bool = False
    description: str | None = None
    scheduled_programs: list[str] = []

    @model_validator(mode="after")
    def _validate_task_config(self):
        if self.task_type != TaskType.PERIODIC and self.rate is not None:
            raise ValueError(f"{self.task_type.value} task must not have 'rate'")
        if self.rate is not None and self.rate <= 0:
            raise ValueError(f"task rate must be positive, got {self.rate}")
        if len(set(self.scheduled_programs)) != len(self.scheduled_programs):
            raise ValueError("scheduled_programs contains duplicates")
        return self
