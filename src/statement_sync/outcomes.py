# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-id lookup outcomes and their three-way partition."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from functools import reduce
from typing import Literal, Protocol

LookupStatus = Literal["found", "missing", "error"]


@dataclass(frozen=True)
class LookupOutcome:
    """Represent the remote lookup result of one statement id.

    Attributes:
        statement_id: Looked-up id.
        status: ``found`` on success, ``missing`` on 404, ``error`` otherwise.
        detail: Diagnostic text for errors.
        remote: Decoded remote record for found ids, when the body is an object.
    """

    statement_id: str
    status: LookupStatus
    detail: str | None = None
    remote: Mapping[str, object] | None = None


@dataclass(frozen=True)
class CheckSummary:
    """Partition of looked-up ids by outcome."""

    found: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    errors: tuple[tuple[str, str], ...] = ()

    @property
    def total(self) -> int:
        return len(self.found) + len(self.missing) + len(self.errors)

    @property
    def exit_code(self) -> int:
        """Return ``0`` only when every id was found."""
        return 1 if self.missing or self.errors else 0


class StatementLookup(Protocol):
    """Look up one statement id in the remote registry."""

    def lookup(self, statement_id: str) -> LookupOutcome:
        """Classify the remote state of ``statement_id``; never raises."""


def accumulate(summary: CheckSummary, outcome: LookupOutcome) -> CheckSummary:
    """Fold one outcome into a summary.

    Args:
        summary: Summary so far.
        outcome: Next outcome.

    Returns:
        New summary including ``outcome``.
    """
    if outcome.status == "found":
        return replace(summary, found=summary.found + (outcome.statement_id,))
    if outcome.status == "missing":
        return replace(summary, missing=summary.missing + (outcome.statement_id,))
    detail = outcome.detail or "unknown error"
    return replace(summary, errors=summary.errors + ((outcome.statement_id, detail),))


def summarize(outcomes: Iterable[LookupOutcome]) -> CheckSummary:
    return reduce(accumulate, outcomes, CheckSummary())


def check_statements(
    lookup: StatementLookup,
    statement_ids: Iterable[str],
    on_outcome: Callable[[LookupOutcome], None] | None = None,
) -> CheckSummary:
    """Look up ids strictly one at a time and partition the outcomes.

    A failed lookup never stops the loop; every id gets exactly one outcome.

    Args:
        lookup: Remote lookup client.
        statement_ids: Ids to check, in order.
        on_outcome: Optional callback invoked after each lookup.

    Returns:
        Partitioned summary.
    """

    def _checked() -> Iterable[LookupOutcome]:
        for statement_id in statement_ids:
            outcome = lookup.lookup(statement_id)
            if on_outcome is not None:
                on_outcome(outcome)
            yield outcome

    return summarize(_checked())
