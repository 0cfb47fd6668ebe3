# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Console output shared by the statement CLI tools."""

import logging
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from statement_sync.outcomes import CheckSummary, LookupOutcome

_STATUS_LABELS: dict[str, str] = {
    "found": "[FOUND]  ",
    "missing": "[MISSING]",
    "error": "[ERROR]  ",
}


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def make_console(stream: TextIO) -> Console:
    return Console(file=stream, force_terminal=False, color_system="truecolor")


def emit_line(console: Console, text: str) -> None:
    """Print text verbatim, without markup or highlighting."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def emit_outcome(console: Console, outcome: LookupOutcome, location: str | None) -> None:
    """Print the per-id line of one lookup.

    Args:
        console: Target console.
        outcome: Lookup outcome.
        location: Optional ``file:line`` description of the statement.
    """
    label = _STATUS_LABELS[outcome.status]
    text = f"{label} {outcome.statement_id}"
    if outcome.status == "error":
        text = f"{text} - {outcome.detail}"
    elif location:
        text = f"{text} - {location}"
    emit_line(console, text)


def emit_check_summary(
    console: Console, title: str, region: str, summary: CheckSummary
) -> None:
    """Print the region and per-outcome counts as a table.

    Args:
        console: Target console.
        title: Table title.
        region: Region the ids were checked against.
        summary: Partitioned lookup outcomes.
    """
    table = Table(title=title, show_header=True)
    table.add_column("field")
    table.add_column("value", justify="right")
    table.add_row("Region", region)
    table.add_row("Total", str(summary.total))
    table.add_row("Found", str(len(summary.found)))
    table.add_row("Missing", str(len(summary.missing)))
    table.add_row("Errors", str(len(summary.errors)))
    console.print(table)
