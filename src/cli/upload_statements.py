# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Upload the statement manifest to the remote statement registry."""

import argparse
import json
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

import httpx
from rich.table import Table

from cli.reporting import configure_logging, emit_line, make_console
from statement_sync.client import RegistryClient, RegistryError
from statement_sync.ingestion import IngestionLogSink
from statement_sync.settings import SettingsError, SyncSettings
from stmtid.manifest import DEFAULT_MANIFEST_PATH, ManifestError, load_manifest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="stmtid-upload")
    parser.add_argument(
        "--manifest",
        default=str(DEFAULT_MANIFEST_PATH),
        help="Statement manifest path.",
    )
    parser.add_argument(
        "--ingest-logs",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Ship upload diagnostics to the log ingestion endpoint.",
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    """Run upload command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        environ: Environment mapping; defaults to ``os.environ``.
        transport: Optional HTTP transport override.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    try:
        settings = SyncSettings.from_env(os.environ if environ is None else environ)
    except SettingsError as exc:
        logger.warning(f"Upload aborted (error={exc})")
        stderr.write(f"{exc}\n")
        return 1
    try:
        manifest = load_manifest(Path(args.manifest))
    except ManifestError as exc:
        logger.warning(f"Upload aborted (error={exc})")
        stderr.write(f"{exc}\n")
        return 1

    console = make_console(stdout)
    sink = (
        IngestionLogSink(
            endpoint=settings.ingestion_url,
            api_key=settings.api_key,
            transport=transport,
        )
        if args.ingest_logs
        else None
    )

    with RegistryClient(
        base_url=settings.base_url, api_key=settings.api_key, transport=transport
    ) as client:
        target_url = client.upload_url
        if sink is not None:
            sink.send(
                "debug",
                "Raw API request details",
                {
                    "targetUrl": target_url,
                    "method": "POST",
                    "rawPayload": json.dumps(manifest.to_dict()),
                },
            )
        emit_line(
            console,
            f"Uploading {len(manifest.statements)} statements for project "
            f"{manifest.project_id} to {target_url}...",
        )
        try:
            result = client.upload(manifest)
        except RegistryError as exc:
            stderr.write(f"Error uploading statements: {exc}\n")
            if sink is not None:
                sink.send(
                    "error",
                    "Statement upload failed",
                    {"error": str(exc), "targetUrl": target_url},
                )
            return 1

    emit_line(console, "Statement upload successful")
    table = Table(title="Upload Summary", show_header=True)
    table.add_column("field")
    table.add_column("value", justify="right")
    table.add_row("Region", settings.region)
    table.add_row("Total", str(len(manifest.statements)))
    table.add_row("Created", str(result.created))
    table.add_row("Modified", str(result.modified))
    table.add_row("Deleted", str(result.deleted))
    console.print(table)

    if sink is not None:
        sink.send(
            "info",
            "Statement upload completed successfully",
            {
                "createdCount": result.created,
                "modifiedCount": result.modified,
                "deletedCount": result.deleted,
                "targetUrl": target_url,
            },
        )
    return 0


def main() -> None:
    """Run upload CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
