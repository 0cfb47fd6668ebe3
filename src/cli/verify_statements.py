# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Verify that every manifest statement exists in the remote registry."""

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


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="stmtid-verify")
    parser.add_argument(
        "--manifest",
        default=str(DEFAULT_MANIFEST_PATH),
        help="Statement manifest path.",
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    """Run verify command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        environ: Environment mapping; defaults to ``os.environ``.
        transport: Optional HTTP transport override.

    Returns:
        ``0`` when every statement was found, ``1`` otherwise.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    try:
        settings = SyncSettings.from_env(os.environ if environ is None else environ)
        manifest = load_manifest(Path(args.manifest))
    except (SettingsError, ManifestError) as exc:
        logger.warning(f"Verification aborted (error={exc})")
        stderr.write(f"{exc}\n")
        return 1

    console = make_console(stdout)
    locations = {
        statement.id: f"{statement.file}:{statement.line}"
        for statement in manifest.statements
    }
    emit_line(
        console,
        f"Verifying {len(manifest.statements)} statements for project "
        f"{manifest.project_id} in {settings.region} region...",
    )

    def _report(outcome: LookupOutcome) -> None:
        emit_outcome(console, outcome, locations.get(outcome.statement_id))

    with RegistryClient(
        base_url=settings.base_url, api_key=settings.api_key, transport=transport
    ) as client:
        summary = check_statements(client, manifest.statement_ids(), on_outcome=_report)

    emit_check_summary(console, "Verification Summary", settings.region, summary)
    logger.info(
        f"Verification completed (found={len(summary.found)} "
        f"missing={len(summary.missing)} errors={len(summary.errors)})"
    )
    return summary.exit_code


def main() -> None:
    """Run verify CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
