# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Runtime logger consuming the statement ids injected at build time."""

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone

from opentelemetry import trace

STATEMENT_ID_FIELD: str = "stmt_id"
LEGACY_ID_FIELD: str = "id"
TRACE_ID_FIELD: str = "trace.id"
SPAN_ID_FIELD: str = "span.id"
STATEMENTS_LOGGER_NAME: str = "stmtid.statements"

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def split_attributes(args: tuple[object, ...]) -> tuple[str | None, dict[str, object]]:
    """Separate the injected statement id from the structured attributes.

    The instrumentation pass leaves the id in the last argument, either merged
    into a trailing mapping or as a trailing mapping of its own. Both the
    current ``stmt_id`` key and the legacy ``id`` key are accepted.

    Args:
        args: Positional arguments passed after the message.

    Returns:
        The statement id, if any, and the attributes without id keys.
    """
    last = args[-1] if args else None
    if isinstance(last, Mapping):
        statement_id = last.get(STATEMENT_ID_FIELD) or last.get(LEGACY_ID_FIELD)
        if statement_id:
            attributes = {
                key: value
                for key, value in last.items()
                if key not in (STATEMENT_ID_FIELD, LEGACY_ID_FIELD)
            }
            first = args[0]
            if len(args) > 1 and isinstance(first, Mapping):
                attributes = {**first, **attributes}
            return str(statement_id), attributes
    if args and isinstance(args[0], Mapping):
        return None, dict(args[0])
    return None, {}


def current_trace_fields() -> dict[str, str]:
    """Return trace and span ids of the active span, if it is valid."""
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return {}
    return {
        TRACE_ID_FIELD: trace.format_trace_id(context.trace_id),
        SPAN_ID_FIELD: trace.format_span_id(context.span_id),
    }


class StatementLogger:
    """Emit one structured JSON line per logging call.

    Methods are class-level so call sites read ``StatementLogger.info(...)``,
    the facade form the instrumentation pass recognizes.
    """

    logger_name: str = STATEMENTS_LOGGER_NAME

    @classmethod
    def log(cls, level: str, message: str, *args: object) -> dict[str, object]:
        """Build and emit a structured log entry.

        Call sites should prefer the level shortcuts. The instrumentation pass
        takes the first argument as the message, so a direct
        ``StatementLogger.log("info", "saved")`` call is recorded in the
        manifest with the message ``"info"``.

        Args:
            level: Severity name (``debug``, ``info``, ``warn``, ``error``).
            message: Log message.
            *args: Optional attribute mappings; the last one may carry the
                injected statement id.

        Returns:
            The emitted entry.
        """
        statement_id, attributes = split_attributes(args)
        entry: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            **attributes,
        }
        if statement_id:
            entry[STATEMENT_ID_FIELD] = statement_id
        entry.update(current_trace_fields())

        logging.getLogger(cls.logger_name).log(
            _LEVELS.get(level, logging.INFO), json.dumps(entry, default=str)
        )
        return entry

    @classmethod
    def info(cls, message: str, *args: object) -> dict[str, object]:
        return cls.log("info", message, *args)

    @classmethod
    def error(cls, message: str, *args: object) -> dict[str, object]:
        return cls.log("error", message, *args)

    @classmethod
    def warn(cls, message: str, *args: object) -> dict[str, object]:
        return cls.log("warn", message, *args)

    @classmethod
    def warning(cls, message: str, *args: object) -> dict[str, object]:
        return cls.log("warn", message, *args)

    @classmethod
    def debug(cls, message: str, *args: object) -> dict[str, object]:
        return cls.log("debug", message, *args)


def log_with_statement(message: str, *args: object) -> dict[str, object]:
    """Log ``message`` at info level through :class:`StatementLogger`."""
    return StatementLogger.info(message, *args)
