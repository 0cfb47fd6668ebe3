# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extract display messages from logging call arguments."""

from stmtid.shapes import ComposedShape, ExpressionShape, LiteralShape

UNKNOWN_MESSAGE: str = "unknown"
PLACEHOLDER: str = "{}"


def extract_message(argument: ExpressionShape) -> str:
    """Extract a stable message from the first logging argument.

    Args:
        argument: Shape of the first call argument.

    Returns:
        Literal text, f-string text with ``{}`` per interpolation, or
        ``"unknown"`` for any other argument.
    """
    if isinstance(argument, LiteralShape):
        return argument.value
    if isinstance(argument, ComposedShape):
        return PLACEHOLDER.join(argument.segments)
    return UNKNOWN_MESSAGE
