# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Check which statement ids are missing from the remote registry."""

import argparse
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

import httpx

from cli.reporting import (
    configure_logging,
    emit_check_summary,
    emit_line,
    emit_outcome,
    make_console,
)
from statement_sync.client import RegistryClient
from statement_sync.outcomes import LookupOutcome, check_statements
from statement_sync.settings import SettingsError, SyncSettings
from stmtid.manifest import DEFAULT_MANIFEST_PATH, ManifestError, load_manifest

logger = logging.getLogger(__name__)

USAGE: str = """Usage:
  stmtid-check-missing <statement_id_1> [statement_id_2] [...]
  stmtid-check-missing 5c2e003a488c8168 f50fc3f8eaa6a8a6

Or check ids from the statement manifest:
  stmtid-check-missing --from-file
"""


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="stmtid-check-missing")
    parser.add_argument("statement_ids", nargs="*", help="Statement ids to check.")
    parser.add_argument(
        "--from-file",
        action="store_true",
        help="Check every id listed in the statement manifest.",
    )
    parser.add_argument(
        "--manifest",
        default=str(DEFAULT_MANIFEST_PATH),
        help="Statement manifest path used with --from-file.",
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    """Run check-missing command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        environ: Environment mapping; defaults to ``os.environ``.
        transport: Optional HTTP transport override.

    Returns:
        ``0`` when every id was found, ``1`` otherwise, ``2`` on bad arguments.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    console = make_console(stdout)
    if not args.statement_ids and not args.from_file:
        emit_line(console, USAGE)
        return 1
    if args.statement_ids and args.from_file:
        stderr.write("Pass statement ids or --from-file, not both.\n")
        return 2

    try:
        settings = SyncSettings.from_env(os.environ if environ is None else environ)
        statement_ids = (
            load_manifest(Path(args.manifest)).statement_ids()
            if args.from_file
            else list(args.statement_ids)
        )
    except (SettingsError, ManifestError) as exc:
        logger.warning(f"Check aborted (error={exc})")
        stderr.write(f"{exc}\n")
        return 1

    emit_line(
        console,
        f"Checking {len(statement_ids)} statement IDs in {settings.region} region...",
    )

    def _report(outcome: LookupOutcome) -> None:
        emit_outcome(console, outcome, _remote_location(outcome))

    with RegistryClient(
        base_url=settings.base_url, api_key=settings.api_key, transport=transport
    ) as client:
        summary = check_statements(client, statement_ids, on_outcome=_report)

    emit_check_summary(console, "Check Summary", settings.region, summary)
    if summary.missing:
        emit_line(console, "Missing statement IDs:")
        for statement_id in summary.missing:
            emit_line(console, f"  - {statement_id}")
    return summary.exit_code


def _remote_location(outcome: LookupOutcome) -> str | None:
    if outcome.remote is None:
        return None
    file = outcome.remote.get("file")
    line = outcome.remote.get("line")
    message = outcome.remote.get("message")
    return f'{file}:{line} - "{message}"'


def main() -> None:
    """Run check-missing CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
