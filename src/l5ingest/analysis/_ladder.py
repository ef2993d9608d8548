"""Ladder-logic operand extraction.

Rung text is a sequence of instructions ``MNEMONIC(arg, arg, ...)`` with
branches written as ``[a ,b]``.  Each argument is classified by its
position using ``SIGNATURES``; instructions missing from the table (Add-On
Instruction calls, mostly) read every argument.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from l5ingest.model.references import UsageKind
from l5ingest.reader import find_closing

R = UsageKind.READ
W = UsageKind.WRITE
B = UsageKind.BOTH

_MNEMONIC_RE = re.compile(r"[A-Za-z_]\w*")
_NAME_RE = re.compile(r"[A-Za-z_][\w:]*")
_MEMBER_RE = re.compile(r"\w+")
_IDENTIFIER_RE = re.compile(r"(?<![\w.#$])[A-Za-z_][\w:]*")
_STRING_RE = re.compile(r"'(?:\$.|[^'])*'|\"(?:\$.|[^\"])*\"")
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+#[0-9A-Fa-f_]+|[\d_]*\.?\d+(?:[eE][+-]?\d+)?)$")

EXPRESSION_KEYWORDS = frozenset({"AND", "OR", "XOR", "NOT", "MOD", "TRUE", "FALSE"})


class Signature(NamedTuple):
    """Per-position usage; ``None`` marks a non-operand argument."""

    roles: tuple[UsageKind | None, ...]
    rest: UsageKind | None = None

    def role(self, position: int) -> UsageKind | None:
        if position < len(self.roles):
            return self.roles[position]
        return self.rest


class OperandUse(NamedTuple):
    operand: str
    usage: UsageKind


def _table() -> dict[str, Signature]:
    table: dict[str, Signature] = {}

    def add(names: str, *roles: UsageKind | None, rest: UsageKind | None = None) -> None:
        for name in names.split():
            table[name] = Signature(tuple(roles), rest)

    # Conditions and comparisons
    add("XIC XIO", R)
    add("EQU NEQ GRT GEQ LES LEQ", R, R)
    add("LIM MEQ", R, R, R)
    add("CMP", R)

    # Outputs
    add("OTE OTL OTU RES CLR", W)

    # Moves and copies
    add("MOV", R, W)
    add("COP CPS FLL", R, W, R)
    add("MVM SWPB", R, R, W)
    add("BTD", R, R, W, R, R)

    # Math
    add("ADD SUB MUL DIV MOD AND OR XOR BAND BOR BXOR XPY", R, R, W)
    add(
        "NOT NEG ABS SQR SQRT SIN COS TAN ASN ACS ATN LN LOG DEG RAD TRN TOD FRD BNOT",
        R, W,
    )
    add("CPT", W, R)

    # Timers, counters, one-shots, messaging
    add("TON TOF RTO CTU CTD", B, R, R)
    add("CTUD", B, R, R)
    add("ONS", B)
    add("OSR OSF", B, W)
    add("MSG", B)
    add("BSL BSR", B, B, R, R)
    add("FAL", B, R, R, None, W, R)
    add("FSC", B, R, R, None, R)
    add("SIZE", R, R, W)

    # System objects
    add("GSV", None, None, None, W)
    add("SSV", None, None, None, R)

    # Program flow
    add("JSR", None, rest=R)  # refined per call by call_signature
    add("JMP LBL", None)
    add("SBR", rest=W)
    add("RET", rest=R)
    add("PID", B, rest=R)
    add("AFI NOP MCR TND UID UIE", rest=None)
    return table


SIGNATURES: dict[str, Signature] = _table()
_READ_ALL = Signature((), R)


def split_arguments(text: str) -> list[str]:
    """Split at top-level commas, respecting brackets and quoted strings."""
    args: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == "," and depth == 0:
            args.append(text[start:i])
            start = i + 1
    args.append(text[start:])
    return [a.strip() for a in args]


def operand_end(text: str, start: int) -> int:
    """End of the tag path starting at *start*.

    A path is a name followed by any mix of ``.Member``/``.bit`` and
    ``[...]`` subscripts; subscripts may nest (``Arr[Idx[1]]``).  Returns
    *start* when no name begins there.
    """
    m = _NAME_RE.match(text, start)
    if m is None:
        return start
    pos = m.end()
    n = len(text)
    while pos < n:
        if text[pos] == "[":
            close = find_closing(text, pos)
            if close == -1:
                break
            pos = close + 1
            continue
        member = _MEMBER_RE.match(text, pos + 1) if text[pos] == "." else None
        if member is None:
            break
        pos = member.end()
    return pos


def _subscript_reads(operand: str) -> list[OperandUse]:
    uses: list[OperandUse] = []
    pos = operand.find("[")
    while pos != -1:
        close = find_closing(operand, pos)
        if close == -1:
            break
        uses.extend(_expression_reads(operand[pos + 1:close]))
        pos = operand.find("[", close + 1)
    return uses


def _expression_reads(expression: str) -> list[OperandUse]:
    """Every identifier in an expression that is not a function or keyword."""
    text = _STRING_RE.sub(" ", expression)
    uses: list[OperandUse] = []
    pos = 0
    while True:
        m = _IDENTIFIER_RE.search(text, pos)
        if m is None:
            break
        end = operand_end(text, m.start())
        if m.group().upper() in EXPRESSION_KEYWORDS or text[end:].lstrip().startswith("("):
            pos = m.end()
            continue
        name = text[m.start():end]
        uses.append(OperandUse(name, R))
        uses.extend(_subscript_reads(name))
        pos = end
    return uses


def classify_argument(arg: str, usage: UsageKind) -> list[OperandUse]:
    """Operand uses contributed by one instruction argument."""
    arg = arg.strip()
    if not arg or arg == "?" or _NUMBER_RE.match(arg) or arg[0] in "'\"":
        return []
    if operand_end(arg, 0) == len(arg):
        return [OperandUse(arg, usage), *_subscript_reads(arg)]
    return _expression_reads(arg)


def iter_instructions(logic: str):
    """Yield ``(mnemonic, arguments)`` in textual order."""
    pos = 0
    n = len(logic)
    while pos < n:
        m = _MNEMONIC_RE.search(logic, pos)
        if m is None:
            return
        after = m.end()
        while after < n and logic[after].isspace():
            after += 1
        if after >= n or logic[after] != "(":
            pos = m.end()
            continue
        close = find_closing(logic, after)
        if close == -1:
            close = n
        yield m.group(), split_arguments(logic[after + 1:close])
        pos = close + 1


def call_signature(args: list[str]) -> Signature:
    """Signature of ``JSR(Routine, InputCount, inputs..., returns...)``.

    The first *InputCount* parameters are passed in (read); the rest
    receive return values (written).  Without a literal count every
    parameter is read.
    """
    count = args[1].strip() if len(args) > 1 else ""
    if not count.isdigit():
        return SIGNATURES["JSR"]
    return Signature((None, None) + (R,) * int(count), W)


def extract_operands(logic: str) -> list[OperandUse]:
    """Classify every operand in a rung's logic text, in order of appearance."""
    uses: list[OperandUse] = []
    for mnemonic, args in iter_instructions(logic):
        if mnemonic.upper() == "JSR":
            signature = call_signature(args)
        else:
            signature = SIGNATURES.get(mnemonic.upper(), _READ_ALL)
        for position, arg in enumerate(args):
            usage = signature.role(position)
            if usage is None:
                continue
            uses.extend(classify_argument(arg, usage))
    return uses
