"""Shared test helpers for the l5ingest test suite."""

import textwrap
from pathlib import Path

from l5ingest.extract import extract_project
from l5ingest.model import ProjectRecords, Rung, Tag
from l5ingest.reader import read_markup, read_text

FIXTURES = Path(__file__).parent / "fixtures"


def fixture_bytes(name: str) -> bytes:
    """Raw bytes of a file under tests/fixtures."""
    return (FIXTURES / name).read_bytes()


def markup_doc(body: str, *, name: str = "Ctl") -> bytes:
    """Wrap controller-level markup in a minimal .L5X document."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        '<RSLogix5000Content SchemaRevision="1.0" SoftwareRevision="33.01" '
        f'TargetName="{name}" TargetType="Controller">\n'
        f'<Controller Use="Target" Name="{name}" ProcessorType="1769-L33ER">\n'
        f"{textwrap.dedent(body).strip()}\n"
        "</Controller>\n"
        "</RSLogix5000Content>\n"
    ).encode("utf-8")


def text_doc(body: str, *, name: str = "Ctl") -> bytes:
    """Wrap controller-level statements and blocks in a minimal .L5K document."""
    return (
        "IE_VER := 2.25;\n"
        "\n"
        f'CONTROLLER {name} (ProcessorType := "1769-L33ER", Major := 33, Minor := 1)\n'
        f"{textwrap.dedent(body).strip()}\n"
        "END_CONTROLLER\n"
    ).encode("utf-8")


def extract_markup(body: str, **kwargs) -> ProjectRecords:
    return extract_project(read_markup(markup_doc(body)), **kwargs)


def extract_text(body: str, **kwargs) -> ProjectRecords:
    return extract_project(read_text(text_doc(body)), **kwargs)


def make_tag(name: str, program: str | None = None, **kwargs) -> Tag:
    """Shorthand for a Tag; ``program=None`` is the shared scope."""
    return Tag(name=name, program=program, **kwargs)


def make_rung(
    content: str,
    *,
    program: str = "MainProgram",
    routine: str = "MainRoutine",
    number: int = 0,
    comment: str | None = None,
) -> Rung:
    return Rung(
        program=program,
        routine=routine,
        number=number,
        content=content,
        comment=comment,
    )
