"""Shared state and value coercion for the family extractors."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from pydantic import ValidationError

from l5ingest.errors import MalformedInput
from l5ingest.model.project import Diagnostic, DiagnosticKind, FileFormat
from l5ingest.reader import Block, MarkupTree, TextTree

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


# ---------------------------------------------------------------------------
# Owner / controller view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Owner:
    """Who owns the tags, routines and rungs being extracted.

    ``name`` is ``None`` for the controller (shared) scope, otherwise a
    program or Add-On Instruction name.
    """

    name: str | None = None
    is_instruction: bool = False

    @property
    def label(self) -> str:
        if self.name is None:
            return "controller"
        kind = "instruction" if self.is_instruction else "program"
        return f"{kind} {self.name!r}"


CONTROLLER_OWNER = Owner()


@dataclass(frozen=True)
class ControllerView:
    """The controller block plus the grammar it came from."""

    format: FileFormat
    root: Block
    controller: Block

    @property
    def is_markup(self) -> bool:
        return self.format == FileFormat.MARKUP

    def programs(self) -> list[Block]:
        if self.is_markup:
            return self.controller.grandchildren("Programs", "Program")
        return self.controller.children_named("PROGRAM")

    @classmethod
    def of(cls, tree: MarkupTree | TextTree) -> ControllerView:
        """Locate the controller block in *tree*.

        Raises:
            MalformedInput: the tree has no controller block.
        """
        root = tree.root
        if tree.format == FileFormat.MARKUP:
            controller = root if root.keyword == "Controller" else root.child("Controller")
        else:
            controller = root.child("CONTROLLER")
        if controller is None:
            raise MalformedInput(
                f"no controller block in {tree.format.value.upper()} document",
                line=root.line,
            )
        return cls(format=tree.format, root=root, controller=controller)


# ---------------------------------------------------------------------------
# ExtractContext
# ---------------------------------------------------------------------------

@dataclass
class ExtractContext:
    """Mutable state carried through one family's extraction."""

    family: str

    diagnostics: list[Diagnostic] = field(default_factory=list)
    """Recovered problems, in the order they were met"""

    def unrecognized(self, block: Block, where: str) -> None:
        label = block.keyword if block.name is None else f"{block.keyword} {block.name}"
        message = f"skipped unrecognized block {label!r} in {where}"
        logger.warning("%s: %s", self.family, message)
        self.diagnostics.append(Diagnostic(
            kind=DiagnosticKind.UNRECOGNIZED_BLOCK,
            family=self.family,
            message=message,
            block=block.keyword,
            line=block.line,
        ))

    def invalid(self, block: Block, reason: str) -> None:
        message = f"dropped {describe(block)}: {reason}"
        logger.warning("%s: %s", self.family, message)
        self.diagnostics.append(Diagnostic(
            kind=DiagnosticKind.INVALID_ENTITY,
            family=self.family,
            message=message,
            block=block.keyword,
            line=block.line,
        ))

    @contextmanager
    def entity(self, block: Block) -> Iterator[None]:
        """Isolate one entity: a ``ValueError`` drops it with a diagnostic."""
        try:
            yield
        except ValueError as exc:
            self.invalid(block, _first_line(exc))


def describe(block: Block) -> str:
    if block.name:
        return f"{block.keyword} {block.name!r}"
    if block.text:
        snippet = block.text.strip().splitlines()[0] if block.text.strip() else ""
        if len(snippet) > 60:
            snippet = snippet[:57] + "..."
        return f"{block.keyword} {snippet!r}"
    return block.keyword


def _first_line(exc: ValueError) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(e["msg"] for e in exc.errors())
    text = str(exc)
    return text.splitlines()[0] if text else type(exc).__name__


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

def parse_bool(value: str | None, default: bool = False) -> bool:
    """Yes/No, true/false and 1/0, case-insensitively."""
    if value is None or not value.strip():
        return default
    key = value.strip().lower()
    if key in _TRUE:
        return True
    if key in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def parse_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"expected an integer, got {value!r}") from None


def parse_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value.strip())
    except ValueError:
        raise ValueError(f"expected a number, got {value!r}") from None


def parse_dimensions(value: str | None) -> list[int]:
    """``"2 3"``, ``"2,3"`` or ``"[2,3]"`` to ``[2, 3]``.

    A lone ``0`` is how some exports spell "not an array".
    """
    if value is None:
        return []
    parts = [p for p in re.split(r"[\s,]+", value.strip().strip("[]")) if p]
    dims = [parse_int(p) for p in parts]
    if dims == [0]:
        return []
    return [d for d in dims if d is not None]


def clean_text(value: str | None) -> str | None:
    """Strip surrounding whitespace; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def lookup(attributes: dict[str, str], *keys: str) -> str | None:
    """First present key, exact match first and then case-insensitive."""
    for key in keys:
        if key in attributes:
            return attributes[key]
    lowered = {k.lower(): v for k, v in attributes.items()}
    for key in keys:
        if key.lower() in lowered:
            return lowered[key.lower()]
    return None
