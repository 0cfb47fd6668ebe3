# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Inject statement ids into logging call sites of Python source units."""

import ast
import logging
import re
from dataclasses import dataclass

from stmtid.classifier import accepts_statement_id, is_logging_call
from stmtid.ids import generate_id
from stmtid.messages import extract_message
from stmtid.registry import StatementRecord, StatementRegistry
from stmtid.shapes import shape_of

logger = logging.getLogger(__name__)

INJECTED_ID_KEY: str = "stmt_id"
RECOGNIZED_ID_KEYS: frozenset[str] = frozenset({"stmt_id", "id"})

_COMMENT_PATTERN = re.compile(rb"#[^\r\n]*")


@dataclass(frozen=True)
class InstrumentResult:
    """Store instrumented source and the registry after one unit.

    Args:
        transformed_source: Source with statement ids injected.
        registry: Registry including every call site of this unit.
        statements_found: Number of logging call sites registered.
        ids_injected: Number of call sites whose arguments were mutated.
    """

    transformed_source: str
    registry: StatementRegistry
    statements_found: int
    ids_injected: int


class InstrumentationError(RuntimeError):
    """Represent a unit that could not be instrumented."""


@dataclass(frozen=True)
class _Insertion:
    offset: int
    text: str


class _CallSiteCollector(ast.NodeVisitor):
    """Register logging call sites and plan id insertions for one unit."""

    def __init__(
        self,
        file_path: str | None,
        registry: StatementRegistry,
        source_bytes: bytes,
    ) -> None:
        """Initialize collector state.

        Args:
            file_path: Project-relative path of the unit, if known.
            registry: Registry receiving the call site records.
            source_bytes: UTF-8 encoded unit source.
        """
        self._file_path = file_path
        self._registry = registry
        self._source = source_bytes
        self._line_starts = _line_start_offsets(source_bytes)
        self.insertions: list[_Insertion] = []
        self.statements_found: int = 0

    def visit_Call(self, node: ast.Call) -> None:
        """Register a logging call and keep walking nested calls.

        Args:
            node: Call node.
        """
        self._register_call(node)
        self.generic_visit(node)

    def _register_call(self, node: ast.Call) -> None:
        callee = shape_of(node.func)
        if not is_logging_call(callee):
            return
        line = getattr(node, "lineno", None)
        if not self._file_path or not line:
            return
        if not node.args:
            return

        statement_id = generate_id(self._file_path, line)
        message = extract_message(shape_of(node.args[0]))
        self._registry.upsert(
            StatementRecord(
                id=statement_id, file=self._file_path, line=line, message=message
            )
        )
        self.statements_found += 1

        insertion = (
            self._plan_insertion(node, statement_id)
            if accepts_statement_id(callee)
            else None
        )
        if insertion is None:
            logger.debug(
                f"Call site registered without injection (file_path={self._file_path} line={line})"
            )
            return
        self.insertions.append(insertion)

    def _plan_insertion(self, node: ast.Call, statement_id: str) -> _Insertion | None:
        """Plan the text insertion carrying ``statement_id``.

        Args:
            node: Logging call node with at least one positional argument.
            statement_id: Id to inject.

        Returns:
            Planned insertion, or ``None`` when the call already carries an id
            or no legal insertion point exists.
        """
        last_arg = node.args[-1]
        if isinstance(last_arg, ast.Dict):
            if _declares_statement_id(last_arg):
                return None
            return self._extend_dict(last_arg, statement_id)
        return self._append_argument(node, statement_id)

    def _extend_dict(self, node: ast.Dict, statement_id: str) -> _Insertion | None:
        closing = self._offset(node.end_lineno, node.end_col_offset)
        if closing is None:
            return None
        closing -= 1
        if self._source[closing : closing + 1] != b"}":
            return None
        entry = _id_entry(statement_id)
        if not node.values:
            return _Insertion(offset=closing, text=entry)
        last_end = self._offset(node.values[-1].end_lineno, node.values[-1].end_col_offset)
        if last_end is None:
            return None
        separator = " " if _has_trailing_comma(self._source[last_end:closing]) else ", "
        return _Insertion(offset=closing, text=f"{separator}{entry}")

    def _append_argument(self, node: ast.Call, statement_id: str) -> _Insertion | None:
        argument = "{" + _id_entry(statement_id) + "}"
        last_arg = node.args[-1]
        if len(node.args) == 1 and not node.keywords and isinstance(last_arg, ast.GeneratorExp):
            return None

        if node.keywords:
            first_keyword = min(
                node.keywords, key=lambda keyword: (keyword.lineno, keyword.col_offset)
            )
            if (last_arg.lineno, last_arg.col_offset) > (
                first_keyword.lineno,
                first_keyword.col_offset,
            ):
                return None
            offset = self._offset(first_keyword.lineno, first_keyword.col_offset)
            if offset is None:
                return None
            return _Insertion(offset=offset, text=f"{argument}, ")

        closing = self._offset(node.end_lineno, node.end_col_offset)
        last_end = self._offset(last_arg.end_lineno, last_arg.end_col_offset)
        if closing is None or last_end is None:
            return None
        closing -= 1
        if self._source[closing : closing + 1] != b")":
            return None
        separator = " " if _has_trailing_comma(self._source[last_end:closing]) else ", "
        return _Insertion(offset=closing, text=f"{separator}{argument}")

    def _offset(self, line: int | None, column: int | None) -> int | None:
        if line is None or column is None or line < 1 or line > len(self._line_starts):
            return None
        return self._line_starts[line - 1] + column


class InstrumentationPass:
    """Assign statement ids to the logging calls of source units.

    The pass is a no-op unless constructed with ``enabled=True``. Each unit is
    processed independently; the caller threads the returned registry into the
    next unit and exports it once every unit has been visited.
    """

    def __init__(self, enabled: bool) -> None:
        """Initialize the pass.

        Args:
            enabled: Whether the build-mode gate is open.
        """
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def instrument_unit(
        self,
        source: str,
        file_path: str | None,
        registry: StatementRegistry,
    ) -> InstrumentResult:
        """Register and instrument every logging call of one unit.

        Args:
            source: Python source of the unit.
            file_path: Project-relative POSIX path of the unit. Call sites of a
                unit without a path are skipped.
            registry: Registry accumulated over the previous units. It is not
                modified; the result carries the updated copy. Copying is
                linear in the registry size, so whole-project builds pass an
                empty registry per unit and merge the results instead.

        Returns:
            Instrumented source, updated registry and counters.

        Raises:
            InstrumentationError: If the unit cannot be parsed, or the
                instrumented source would not parse.
        """
        if not self._enabled:
            return InstrumentResult(
                transformed_source=source,
                registry=registry,
                statements_found=0,
                ids_injected=0,
            )

        try:
            tree = ast.parse(source, filename=file_path or "<unknown>")
        except (SyntaxError, ValueError) as exc:
            logger.warning(
                f"Instrumentation skipped due to parse error (file_path={file_path} error={exc})"
            )
            raise InstrumentationError(str(exc)) from exc

        updated = registry.copy()
        source_bytes = source.encode("utf-8")
        collector = _CallSiteCollector(
            file_path=file_path, registry=updated, source_bytes=source_bytes
        )
        collector.visit(tree)

        transformed = _apply_insertions(source_bytes, collector.insertions)
        if collector.insertions:
            try:
                ast.parse(transformed, filename=file_path or "<unknown>")
            except (SyntaxError, ValueError) as exc:
                logger.warning(
                    f"Instrumented source does not parse (file_path={file_path} error={exc})"
                )
                raise InstrumentationError(str(exc)) from exc

        return InstrumentResult(
            transformed_source=transformed,
            registry=updated,
            statements_found=collector.statements_found,
            ids_injected=len(collector.insertions),
        )


def _declares_statement_id(node: ast.Dict) -> bool:
    return any(
        isinstance(key, ast.Constant) and key.value in RECOGNIZED_ID_KEYS
        for key in node.keys
    )


def _id_entry(statement_id: str) -> str:
    return f'"{INJECTED_ID_KEY}": "{statement_id}"'


def _has_trailing_comma(gap: bytes) -> bool:
    """Check whether the text after the last element already holds a comma.

    Args:
        gap: Source bytes between the last element and the closing bracket.

    Returns:
        True when a separating comma is present outside comments.
    """
    return b"," in _COMMENT_PATTERN.sub(b"", gap)


def _line_start_offsets(source_bytes: bytes) -> list[int]:
    starts = [0]
    position = source_bytes.find(b"\n")
    while position != -1:
        starts.append(position + 1)
        position = source_bytes.find(b"\n", position + 1)
    return starts


def _apply_insertions(source_bytes: bytes, insertions: list[_Insertion]) -> str:
    """Splice insertions into the source, last offset first.

    Args:
        source_bytes: UTF-8 encoded source.
        insertions: Planned insertions.

    Returns:
        Decoded instrumented source.
    """
    buffer = bytearray(source_bytes)
    for insertion in sorted(insertions, key=lambda item: item.offset, reverse=True):
        buffer[insertion.offset : insertion.offset] = insertion.text.encode("utf-8")
    return buffer.decode("utf-8")
