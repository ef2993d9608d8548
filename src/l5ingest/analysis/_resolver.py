"""Operand to tag-identity resolution."""

from __future__ import annotations

from collections.abc import Container


def peel(operand: str) -> str | None:
    """Remove the right-most access suffix, or None when nothing is left.

    Suffixes are a subscript ``[...]`` (possibly nested or
    multi-dimensional) or a ``.Member`` / ``.bit`` access.
    """
    if operand.endswith("]"):
        depth = 0
        for i in range(len(operand) - 1, -1, -1):
            ch = operand[i]
            if ch == "]":
                depth += 1
            elif ch == "[":
                depth -= 1
                if depth == 0:
                    return operand[:i] or None
        return None
    dot = operand.rfind(".")
    if dot <= 0:
        return None
    return operand[:dot]


def resolve_operand(operand: str, declared: Container[str]) -> str:
    """Longest declared prefix of *operand*, else the operand itself.

    ``Tag[2].Bit1`` and ``Tag[2]`` both resolve to ``Tag`` when only
    ``Tag`` is declared; ``Motor.Status`` resolves to itself when that
    whole path is declared.
    """
    original = operand.strip()
    candidate: str | None = original
    while candidate:
        if candidate in declared:
            return candidate
        candidate = peel(candidate)
    return original
