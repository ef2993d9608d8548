"""Controller metadata and the controller-level block inventory."""

from __future__ import annotations

import logging
import re

from l5ingest.model.project import ControllerInfo
from l5ingest.reader import STATEMENT

from ._context import ControllerView, ExtractContext, lookup

logger = logging.getLogger(__name__)

_IE_VER_RE = re.compile(r"^IE_VER\s*:=\s*(?P<version>\S+)$")

# Controller children handled by a family extractor, plus sections that
# carry nothing the record set models.
MARKUP_SECTIONS = frozenset({
    "DataTypes",
    "Modules",
    "AddOnInstructionDefinitions",
    "Tags",
    "Programs",
    "Tasks",
    "Description",
    "RedundancyInfo",
    "Security",
    "SafetyInfo",
    "CST",
    "WallClockTime",
    "Trends",
    "DataLogs",
    "TimeSynchronize",
    "EthernetPorts",
    "QuickWatchLists",
    "ParameterConnections",
    "CommPorts",
})
TEXT_SECTIONS = frozenset({
    "DATATYPE",
    "MODULE",
    "ADD_ON_INSTRUCTION_DEFINITION",
    "TAG",
    "PROGRAM",
    "TASK",
    "CONFIG",
    "TREND",
    "QUICK_WATCH",
    "PARAMETER_CONNECTION",
})


def _revision(major: str | None, minor: str | None) -> str | None:
    if not major:
        return None
    return f"{major}.{minor or '0'}"


def controller_info(view: ControllerView) -> ControllerInfo:
    controller = view.controller
    if view.is_markup:
        root = view.root
        return ControllerInfo(
            name=controller.name,
            processor_type=controller.attr("ProcessorType"),
            software_revision=root.attr("SoftwareRevision")
            or _revision(controller.attr("MajorRev"), controller.attr("MinorRev")),
            target_type=root.attr("TargetType"),
            target_name=root.attr("TargetName"),
            export_date=root.attr("ExportDate"),
            interchange_version=root.attr("SchemaRevision"),
        )

    interchange_version = None
    for stmt in view.root.children_named(STATEMENT):
        m = _IE_VER_RE.match((stmt.text or "").strip())
        if m:
            interchange_version = m["version"]
            break
    attrs = controller.attributes
    return ControllerInfo(
        name=controller.name,
        processor_type=lookup(attrs, "ProcessorType"),
        software_revision=_revision(lookup(attrs, "Major"), lookup(attrs, "Minor")),
        target_type="Controller",
        target_name=controller.name,
        interchange_version=interchange_version,
    )


def extract_controller(view: ControllerView, ctx: ExtractContext) -> ControllerInfo:
    """Controller metadata; records controller-level blocks nobody extracts."""
    known = MARKUP_SECTIONS if view.is_markup else TEXT_SECTIONS
    for child in view.controller.children:
        if child.keyword != STATEMENT and child.keyword not in known:
            ctx.unrecognized(child, "controller")
    if not view.is_markup:
        for child in view.root.children:
            if child.keyword not in (STATEMENT, "CONTROLLER"):
                ctx.unrecognized(child, "file")
    info = controller_info(view)
    logger.debug("controller %r (%s)", info.name, info.processor_type)
    return info
