"""Task extraction.

Text-grammar tasks list their scheduled programs as bare statements::

    TASK MainTask (Type := CONTINUOUS, Rate := 10, Priority := 10, Watchdog := 500)
        MainProgram;
    END_TASK
"""

from __future__ import annotations

import logging

from l5ingest.model.task import Task, TaskType
from l5ingest.reader import STATEMENT, Block

from ._context import ControllerView, ExtractContext, clean_text, lookup, parse_bool, parse_float, parse_int

logger = logging.getLogger(__name__)


def _task_type(value: str | None) -> TaskType:
    if not value:
        return TaskType.CONTINUOUS
    try:
        return TaskType(value.strip().upper())
    except ValueError:
        raise ValueError(f"unknown task type {value!r}") from None


def _build(name: str, attrs: dict[str, str], description: str | None, programs: list[str]) -> Task:
    task_type = _task_type(lookup(attrs, "Type"))
    rate = parse_float(lookup(attrs, "Rate"))
    if task_type != TaskType.PERIODIC and rate is not None:
        # Non-periodic tasks still carry a Rate attribute in exports.
        rate = None
    priority = parse_int(lookup(attrs, "Priority"))
    return Task(
        name=name,
        task_type=task_type,
        rate=rate,
        priority=10 if priority is None else priority,
        watchdog=parse_float(lookup(attrs, "Watchdog")),
        inhibited=parse_bool(lookup(attrs, "InhibitTask", "Inhibited"), False),
        disable_update_outputs=parse_bool(lookup(attrs, "DisableUpdateOutputs"), False),
        description=clean_text(description),
        scheduled_programs=programs,
    )


def _markup_task(block: Block, ctx: ExtractContext) -> Task:
    programs = [
        p.name for p in block.grandchildren("ScheduledPrograms", "ScheduledProgram") if p.name
    ]
    return _build(block.name or "", block.attributes, block.child_text("Description"), programs)


def _text_task(block: Block, ctx: ExtractContext) -> Task:
    programs: list[str] = []
    for stmt in block.children:
        if stmt.keyword != STATEMENT:
            ctx.unrecognized(stmt, f"task {block.name!r}")
            continue
        name = (stmt.text or "").strip()
        if name:
            programs.append(name)
    return _build(block.name or "", block.attributes, lookup(block.attributes, "Description"), programs)


def extract_tasks(view: ControllerView, ctx: ExtractContext) -> list[Task]:
    if view.is_markup:
        blocks = view.controller.grandchildren("Tasks", "Task")
        build = _markup_task
    else:
        blocks = view.controller.children_named("TASK")
        build = _text_task
    tasks: list[Task] = []
    for block in blocks:
        with ctx.entity(block):
            tasks.append(build(block, ctx))
    logger.debug("extracted %d tasks", len(tasks))
    return tasks
