# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Copy a Python project, inject statement ids and export the statement manifest."""

import argparse
import logging
import os
import shutil
import sys
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import pathspec
from rich.console import Console

from cli.reporting import configure_logging, emit_line, make_console
from stmtid.instrument import InstrumentationError, InstrumentationPass
from stmtid.manifest import DEFAULT_MANIFEST_PATH, Provenance, export_manifest
from stmtid.registry import StatementRegistry
from stmtid.settings import BuildSettings

logger = logging.getLogger(__name__)

# Always excluded from the copy, whatever the project's .gitignore says.
ALWAYS_IGNORED: tuple[str, ...] = (".git/",)


@dataclass(frozen=True)
class CopySummary:
    """Represent copy phase counters."""

    files_copied: int
    paths_ignored: int
    elapsed_ms: int


@dataclass(frozen=True)
class InstrumentSummary:
    """Represent instrument phase counters."""

    python_files_discovered: int
    python_files_instrumented: int
    python_files_unchanged: int
    python_files_skipped_by_include: int
    python_files_failed: int
    statements_registered: int
    ids_injected: int
    elapsed_ms: int


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class TransformError(RuntimeError):
    """Represent instrument phase failure."""


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="stmtid-build")
    parser.add_argument("--input", required=True, help="Input Python project path.")
    parser.add_argument("--output", required=True, help="Output folder path.")
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        help="Gitignore-style pattern of files to instrument; repeatable. Default: all.",
    )
    parser.add_argument(
        "--instrument",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the instrumentation pass (default: STMTID_INSTRUMENT=1).",
    )
    parser.add_argument(
        "--export",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Export the statement manifest (default: STMTID_EXPORT_STATEMENTS=true).",
    )
    parser.add_argument("--project-id", help="Manifest project id.")
    parser.add_argument("--version", help="Manifest version string.")
    parser.add_argument("--repo-url", help="Manifest repository URL.")
    parser.add_argument(
        "--manifest",
        default=str(DEFAULT_MANIFEST_PATH),
        help="Manifest output path.",
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run build command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        ``0`` once the build ran, ``2`` on invalid arguments or a failed
        copy or write. A failed manifest export is reported but not fatal.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    settings = BuildSettings.from_env(os.environ if environ is None else environ)
    console = make_console(stdout)
    _emit_marker(console=console, phase="validation", state="start")
    try:
        source_root, target_root = _resolve_roots(Path(args.input), Path(args.output))
        ignore_spec = _load_ignore_spec(source_root)
    except ValidationError as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="validation", state="done")

    _emit_marker(console=console, phase="copy", state="start")
    try:
        copy_summary = _copy_project(source_root, target_root, ignore_spec)
    except OSError as exc:
        logger.warning("Copy failed (error=%s)", exc)
        stderr.write(f"Copy failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="copy", state="done")
    _emit_summary(
        console=console,
        summary={
            "files_copied": copy_summary.files_copied,
            "paths_ignored": copy_summary.paths_ignored,
            "elapsed_ms": copy_summary.elapsed_ms,
        },
    )

    instrument_enabled = (
        settings.instrument_enabled if args.instrument is None else args.instrument
    )
    include_spec = (
        pathspec.GitIgnoreSpec.from_lines(args.include) if args.include else None
    )
    _emit_marker(console=console, phase="instrument", state="start")
    try:
        registry, instrument_summary = _instrument_python_files(
            output_root=target_root,
            instrumentation=InstrumentationPass(enabled=instrument_enabled),
            include_spec=include_spec,
        )
    except TransformError as exc:
        logger.warning("Instrument failed (error=%s)", exc)
        stderr.write(f"Instrument failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="instrument", state="done")
    _emit_summary(
        console=console,
        summary={
            "instrument_enabled": int(instrument_enabled),
            "python_files_discovered": instrument_summary.python_files_discovered,
            "python_files_instrumented": instrument_summary.python_files_instrumented,
            "python_files_unchanged": instrument_summary.python_files_unchanged,
            "python_files_skipped_by_include": instrument_summary.python_files_skipped_by_include,
            "python_files_failed": instrument_summary.python_files_failed,
            "statements_registered": instrument_summary.statements_registered,
            "ids_injected": instrument_summary.ids_injected,
            "elapsed_ms": instrument_summary.elapsed_ms,
        },
    )

    export_enabled = settings.export_enabled if args.export is None else args.export
    if export_enabled:
        _emit_marker(console=console, phase="export", state="start")
        manifest_path = Path(args.manifest)
        if not manifest_path.is_absolute():
            manifest_path = Path.cwd() / manifest_path
        provenance = Provenance(
            project_id=args.project_id or settings.project_id or source_root.name,
            version=args.version or settings.version,
            repo_url=args.repo_url if args.repo_url is not None else settings.repo_url,
        )
        written = export_manifest(
            registry=registry,
            provenance=provenance,
            output_path=manifest_path,
            enabled=True,
        )
        if written is None:
            stderr.write(f"Failed to export statements to {manifest_path}\n")
        else:
            emit_line(console, f"manifest={written} statements={len(registry)}")
        _emit_marker(console=console, phase="export", state="done")

    console.print("status=success")
    return 0


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    console.print(" ".join(f"{key}={value}" for key, value in summary.items()))


def _resolve_roots(source: Path, target: Path) -> tuple[Path, Path]:
    """Resolve the project and output roots and reject unusable pairs.

    Raises:
        ValidationError: If the project is not a directory, the output holds
            files, or one root contains the other.
    """
    source = source.resolve()
    target = target.resolve()
    if not source.exists():
        raise ValidationError(f"Input path does not exist: {source}")
    if not source.is_dir():
        raise ValidationError(f"Input path must be a directory: {source}")
    if target.is_dir() and any(target.iterdir()):
        raise ValidationError(f"Output path must be empty: {target}")
    if source == target or source in target.parents or target in source.parents:
        raise ValidationError("Input and output paths must not overlap")
    return source, target


def _load_ignore_spec(source_root: Path) -> pathspec.GitIgnoreSpec:
    """Compile the root .gitignore, if any, into one matcher.

    Raises:
        ValidationError: If the .gitignore file cannot be read.
    """
    lines = list(ALWAYS_IGNORED)
    ignore_path = source_root / ".gitignore"
    if ignore_path.is_file():
        try:
            lines.extend(ignore_path.read_text(encoding="utf-8").splitlines())
        except (OSError, UnicodeDecodeError) as exc:
            raise ValidationError(f"Failed to read {ignore_path}: {exc}") from exc
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _copy_project(
    source_root: Path, target_root: Path, ignore_spec: pathspec.GitIgnoreSpec
) -> CopySummary:
    """Copy the project tree, leaving out ignored paths.

    Symlinks are recreated as links, not followed.

    Raises:
        OSError: If a directory or file cannot be copied.
    """
    started = time.monotonic()
    copied: list[str] = []
    ignored: list[str] = []

    def _ignored_names(directory: str, names: list[str]) -> set[str]:
        base = Path(directory)
        skipped: set[str] = set()
        for name in names:
            child = base / name
            relative = child.relative_to(source_root).as_posix()
            if child.is_dir() and not child.is_symlink():
                relative = f"{relative}/"
            if ignore_spec.match_file(relative):
                skipped.add(name)
        ignored.extend(sorted(skipped))
        return skipped

    def _copy_file(source: str, destination: str) -> str:
        copied.append(destination)
        return shutil.copy2(source, destination)

    shutil.copytree(
        source_root,
        target_root,
        symlinks=True,
        ignore=_ignored_names,
        copy_function=_copy_file,
        dirs_exist_ok=True,
    )
    return CopySummary(
        files_copied=len(copied),
        paths_ignored=len(ignored),
        elapsed_ms=int(round((time.monotonic() - started) * 1000)),
    )


def _instrument_python_files(
    output_root: Path,
    instrumentation: InstrumentationPass,
    include_spec: pathspec.GitIgnoreSpec | None,
) -> tuple[StatementRegistry, InstrumentSummary]:
    """Instrument copied Python files and collect every call site in one registry.

    Each unit starts from an empty registry whose records are merged into the
    build registry, so collisions across units still resolve last write wins.
    Units that cannot be read or parsed keep their copied content and are
    counted as failed; they never abort the build.

    Args:
        output_root: Output project root.
        instrumentation: Configured instrumentation pass.
        include_spec: Optional patterns selecting files to instrument.

    Returns:
        Registry holding every registered statement, and phase counters.

    Raises:
        TransformError: If an instrumented file cannot be written.
    """
    started = time.monotonic()
    files = sorted(path for path in output_root.rglob("*.py") if not path.is_symlink())
    registry = StatementRegistry()
    counts = {"instrumented": 0, "unchanged": 0, "skipped": 0, "failed": 0, "injected": 0}

    for file_path in files:
        relative_path = file_path.relative_to(output_root).as_posix()
        if include_spec is not None and not include_spec.match_file(relative_path):
            counts["skipped"] += 1
            continue
        try:
            source = file_path.read_text(encoding="utf-8")
            result = instrumentation.instrument_unit(
                source=source, file_path=relative_path, registry=StatementRegistry()
            )
        except (OSError, UnicodeDecodeError, InstrumentationError) as exc:
            logger.warning("Failed instrumenting file (path=%s error=%s)", file_path, exc)
            counts["failed"] += 1
            continue
        registry.merge(result.registry)
        counts["injected"] += result.ids_injected
        if result.transformed_source == source:
            counts["unchanged"] += 1
            continue
        tmp_path = file_path.with_suffix(f"{file_path.suffix}.tmp")
        try:
            tmp_path.write_text(result.transformed_source, encoding="utf-8")
            tmp_path.replace(file_path)
        except OSError as exc:
            logger.warning("Failed writing file (path=%s error=%s)", file_path, exc)
            raise TransformError(str(exc)) from exc
        counts["instrumented"] += 1

    return registry, InstrumentSummary(
        python_files_discovered=len(files),
        python_files_instrumented=counts["instrumented"],
        python_files_unchanged=counts["unchanged"],
        python_files_skipped_by_include=counts["skipped"],
        python_files_failed=counts["failed"],
        statements_registered=len(registry),
        ids_injected=counts["injected"],
        elapsed_ms=int(round((time.monotonic() - started) * 1000)),
    )


def main() -> None:
    """Run build CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
