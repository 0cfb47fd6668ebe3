# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Closed set of expression shapes recognized by the instrumentation pass."""

import ast
from dataclasses import dataclass


@dataclass(frozen=True)
class LiteralShape:
    """Plain string literal, including implicitly concatenated literals."""

    value: str


@dataclass(frozen=True)
class ComposedShape:
    """Formatted string literal reduced to its static text segments.

    Attributes:
        segments: Static text between interpolations. An f-string with ``n``
            interpolated fields always has ``n + 1`` segments, some of which
            may be empty.
    """

    segments: tuple[str, ...]


@dataclass(frozen=True)
class MemberShape:
    """Attribute access such as ``logger.info``.

    Attributes:
        object_name: Name of the accessed object when it is a bare name,
            ``None`` for chained or computed objects.
        attribute: Accessed attribute name.
    """

    object_name: str | None
    attribute: str | None


@dataclass(frozen=True)
class NameShape:
    """Bare name reference such as ``log_with_statement``."""

    name: str


@dataclass(frozen=True)
class OtherShape:
    """Any expression the pass does not inspect further."""

    kind: str


ExpressionShape = LiteralShape | ComposedShape | MemberShape | NameShape | OtherShape


def shape_of(node: ast.AST | None) -> ExpressionShape:
    """Classify an AST expression into one of the recognized shapes.

    Args:
        node: Expression node, or ``None`` when the expression is absent.

    Returns:
        Matching shape. Unrecognized or absent nodes map to ``OtherShape``.
    """
    if node is None:
        return OtherShape(kind="missing")
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return LiteralShape(value=node.value)
    if isinstance(node, ast.JoinedStr):
        return ComposedShape(segments=_static_segments(node))
    if isinstance(node, ast.Attribute):
        owner = node.value
        object_name = owner.id if isinstance(owner, ast.Name) else None
        return MemberShape(object_name=object_name, attribute=node.attr or None)
    if isinstance(node, ast.Name):
        return NameShape(name=node.id)
    return OtherShape(kind=type(node).__name__)


def _static_segments(node: ast.JoinedStr) -> tuple[str, ...]:
    segments: list[str] = [""]
    for part in node.values:
        if isinstance(part, ast.Constant) and isinstance(part.value, str):
            segments[-1] += part.value
        else:
            segments.append("")
    return tuple(segments)
