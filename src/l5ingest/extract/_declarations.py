"""Declaration statements of the plain-text grammar.

Tag, parameter and local-tag blocks hold one declaration per statement::

    Speed : DINT (Description := "Line speed", RADIX := Decimal) := 0;
    Buffer : REAL[10,4] (RADIX := Float);
    RunCmd OF Local:1:O.Data.0 (RADIX := Decimal);

User-defined type members are written type-first::

    DINT Speed (Description := "Line speed");
    SINT ZZZZZZZZZZUDT_Motor0 (Hidden := 1);
    BIT Running ZZZZZZZZZZUDT_Motor0 : 0;
    MEMBER Speed (DataType := DINT, Dimension := 0);
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from l5ingest.reader import find_closing, split_attributes

from ._context import lookup, parse_bool, parse_dimensions, parse_int

_NAME_RE = re.compile(r"^\s*(?P<name>[^\s(]+)\s*")
_OF_RE = re.compile(r"OF\s+(?P<target>[^\s(]+)\s*")
_TYPE_RE = re.compile(
    r"(?P<type>[^\s(\[:;]+(?::[^\s(\[:;=]+)*)\s*(?:\[(?P<dims>[^\]]*)\])?\s*"
)
_BIT_MEMBER_RE = re.compile(
    r"^BIT\s+(?P<name>\w+)\s+(?P<target>\w+)\s*:\s*(?P<bit>\d+)\s*"
)
_MEMBER_RE = re.compile(r"^MEMBER\s+(?P<name>\w+)\s*")
_TYPED_MEMBER_RE = re.compile(
    r"^(?P<type>[^\s(\[]+)\s+(?P<name>\w+)\s*(?:\[(?P<dim>[^\]]*)\])?\s*"
)


@dataclass
class Declaration:
    """One ``Name : TYPE ...`` or ``Name OF target ...`` statement."""

    name: str
    data_type: str | None = None
    dimensions: list[int] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    value: str | None = None
    alias_for: str | None = None

    def attr(self, *keys: str) -> str | None:
        return lookup(self.attributes, *keys)


@dataclass
class MemberDeclaration:
    """One member statement inside a ``DATATYPE`` block."""

    name: str
    data_type: str
    dimension: int | None = None
    target: str | None = None
    bit_number: int | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    def attr(self, *keys: str) -> str | None:
        return lookup(self.attributes, *keys)

    @property
    def hidden(self) -> bool:
        return parse_bool(self.attr("Hidden"), False)


def _take_attributes(text: str, pos: int) -> tuple[dict[str, str], int]:
    """Parse a ``(...)`` attribute list starting at *pos*, if there is one."""
    if pos < len(text) and text[pos] == "(":
        end = find_closing(text, pos)
        if end == -1:
            raise ValueError("unbalanced attribute list")
        return split_attributes(text[pos:end + 1]), _skip_ws(text, end + 1)
    return {}, pos


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _take_value(text: str, pos: int) -> str | None:
    rest = text[pos:].strip()
    if not rest:
        return None
    if not rest.startswith(":="):
        raise ValueError(f"unexpected text {rest[:40]!r}")
    return rest[2:].strip() or None


def parse_declaration(text: str) -> Declaration:
    """Parse a tag, parameter or local-tag statement.

    Raises:
        ValueError: the statement is not a declaration.
    """
    text = text.strip().rstrip(";").strip()
    m = _NAME_RE.match(text)
    if m is None:
        raise ValueError("declaration has no name")
    name = m["name"]
    pos = m.end()

    if text.startswith("OF", pos) and (pos + 2 == len(text) or text[pos + 2].isspace()):
        alias = _OF_RE.match(text, pos)
        if alias is None:
            raise ValueError(f"alias {name!r} has no target")
        attrs, pos = _take_attributes(text, alias.end())
        return Declaration(
            name=name,
            attributes=attrs,
            alias_for=alias["target"],
            value=_take_value(text, pos),
        )

    if not text.startswith(":", pos) or text.startswith(":=", pos):
        raise ValueError(f"expected ':' or 'OF' after {name!r}")
    pos = _skip_ws(text, pos + 1)
    typed = _TYPE_RE.match(text, pos)
    if typed is None:
        raise ValueError(f"declaration {name!r} has no data type")
    attrs, pos = _take_attributes(text, typed.end())
    alias_for = lookup(attrs, "AliasFor")
    return Declaration(
        name=name,
        data_type=typed["type"],
        dimensions=parse_dimensions(typed["dims"]),
        attributes=attrs,
        value=_take_value(text, pos),
        alias_for=alias_for,
    )


def parse_member(text: str) -> MemberDeclaration:
    """Parse a user-defined type member statement.

    Raises:
        ValueError: the statement is not a member declaration.
    """
    text = text.strip().rstrip(";").strip()

    m = _BIT_MEMBER_RE.match(text)
    if m is not None:
        attrs, _ = _take_attributes(text, m.end())
        return MemberDeclaration(
            name=m["name"],
            data_type="BIT",
            target=m["target"],
            bit_number=int(m["bit"]),
            attributes=attrs,
        )

    m = _MEMBER_RE.match(text)
    if m is not None:
        attrs, _ = _take_attributes(text, m.end())
        target = lookup(attrs, "Target")
        bit = parse_int(lookup(attrs, "BitNumber"))
        return MemberDeclaration(
            name=m["name"],
            data_type=lookup(attrs, "DataType") or "Unknown",
            dimension=_member_dimension(lookup(attrs, "Dimension")),
            target=target,
            bit_number=bit,
            attributes=attrs,
        )

    m = _TYPED_MEMBER_RE.match(text)
    if m is None:
        raise ValueError("not a member declaration")
    attrs, _ = _take_attributes(text, m.end())
    return MemberDeclaration(
        name=m["name"],
        data_type=m["type"],
        dimension=_member_dimension(m["dim"]),
        attributes=attrs,
    )


def _member_dimension(value: str | None) -> int | None:
    dims = parse_dimensions(value)
    if not dims:
        return None
    if len(dims) > 1:
        raise ValueError(f"member arrays have one dimension, got {value!r}")
    return dims[0]
