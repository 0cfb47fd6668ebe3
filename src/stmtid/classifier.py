# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Decide whether a call expression is a logging call."""

from stmtid.shapes import ExpressionShape, MemberShape, NameShape

CONSOLE_OBJECT_NAME: str = "console"
CONSOLE_METHODS: frozenset[str] = frozenset({"log", "info", "warn", "error", "debug"})
LOGGER_FACADE_NAMES: frozenset[str] = frozenset({"logger", "log", "StatementLogger"})
# "Log" covers camelCase names such as doLogThing; matching stays case-sensitive.
DIRECT_CALL_MARKERS: tuple[str, ...] = ("log", "Log")
# Names from the logging module that build or configure loggers.
STDLIB_LOGGING_FACTORIES: frozenset[str] = frozenset(
    {
        "getLogger",
        "Logger",
        "LoggerAdapter",
        "getLoggerClass",
        "setLoggerClass",
        "LogRecord",
        "makeLogRecord",
        "getLogRecordFactory",
        "setLogRecordFactory",
    }
)
# logging.Logger methods that emit nothing and take no extra positional argument.
NON_EMITTING_LOGGER_METHODS: frozenset[str] = frozenset(
    {
        "setLevel",
        "addHandler",
        "removeHandler",
        "addFilter",
        "removeFilter",
        "isEnabledFor",
        "getChild",
        "getChildren",
        "hasHandlers",
        "getEffectiveLevel",
    }
)


def is_logging_call(callee: ExpressionShape) -> bool:
    """Check whether a callee shape designates a logging call.

    Recognized forms are ``console.<method>(...)`` for the console methods,
    ``<facade>.<anything>(...)`` for the logger facade names and direct calls
    whose name contains ``"log"`` or ``"Log"``, except the logger factories
    of the ``logging`` module such as ``getLogger``.

    Args:
        callee: Shape of the called expression.

    Returns:
        True when the call is a logging call.
    """
    if isinstance(callee, MemberShape):
        if callee.object_name is None or callee.attribute is None:
            return False
        if callee.object_name == CONSOLE_OBJECT_NAME:
            return callee.attribute in CONSOLE_METHODS
        return callee.object_name in LOGGER_FACADE_NAMES
    if isinstance(callee, NameShape):
        if callee.name in STDLIB_LOGGING_FACTORIES:
            return False
        return any(marker in callee.name for marker in DIRECT_CALL_MARKERS)
    return False


def accepts_statement_id(callee: ExpressionShape) -> bool:
    """Check whether a logging call may receive an extra id argument.

    Configuration methods of ``logging.Logger`` reached through a facade name
    are registered like any logging call but must keep their signature.

    Args:
        callee: Shape of the called expression.

    Returns:
        False for non-emitting logger methods, True otherwise.
    """
    if isinstance(callee, MemberShape) and callee.object_name in LOGGER_FACADE_NAMES:
        return callee.attribute not in NON_EMITTING_LOGGER_METHODS
    return True
