# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the statement id build CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.build_harness import run
from stmtid import generate_id


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _sample_project(root: Path) -> None:
    _write_file(root / ".gitignore", "build/\n")
    _write_file(
        root / "app" / "main.py",
        'def start(user):\n    logger.info("started", {"user": user})\n    return user\n',
    )
    _write_file(root / "app" / "jobs.py", 'console.error(f"job {name} failed")\n')
    _write_file(root / "app" / "plain.py", "VALUE = 1\n")
    _write_file(root / "build" / "ignored.py", 'logger.info("ignored")\n')
    _write_file(root / "README.md", "sample\n")


def test_ph7_bld_001_cli_requires_input_and_output_arguments() -> None:
    exit_code = run([], stdout=io.StringIO(), stderr=io.StringIO(), environ={})

    assert exit_code == 2


def test_ph7_bld_002_cli_fails_when_input_path_is_missing(tmp_path: Path) -> None:
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(tmp_path / "missing"), "--output", str(tmp_path / "out")],
        stdout=io.StringIO(),
        stderr=stderr,
        environ={},
    )

    assert exit_code == 2
    assert "Input path does not exist" in stderr.getvalue()


def test_ph7_bld_003_cli_fails_when_output_is_non_empty(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    _sample_project(input_path)
    _write_file(tmp_path / "out" / "keep.txt", "x")
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(tmp_path / "out")],
        stdout=io.StringIO(),
        stderr=stderr,
        environ={},
    )

    assert exit_code == 2
    assert "Output path must be empty" in stderr.getvalue()


def test_ph7_bld_004_instrumented_build_exports_manifest(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    manifest_path = tmp_path / "dist" / "statement-ids.json"
    _sample_project(input_path)
    stdout = io.StringIO()

    exit_code = run(
        [
            "--input",
            str(input_path),
            "--output",
            str(output_path),
            "--instrument",
            "--export",
            "--project-id",
            "shop",
            "--manifest",
            str(manifest_path),
        ],
        stdout=stdout,
        stderr=io.StringIO(),
        environ={},
    )

    assert exit_code == 0
    output = _strip_ansi(stdout.getvalue())
    for marker in ("validation:done", "copy:done", "instrument:done", "export:done"):
        assert marker in output
    assert "statements_registered=2" in output
    assert "ids_injected=2" in output
    assert "status=success" in output

    main_id = generate_id("app/main.py", 2)
    jobs_id = generate_id("app/jobs.py", 1)
    assert (output_path / "app" / "main.py").read_text(encoding="utf-8") == (
        "def start(user):\n"
        f'    logger.info("started", {{"user": user, "stmt_id": "{main_id}"}})\n'
        "    return user\n"
    )
    assert (output_path / "app" / "plain.py").read_text(encoding="utf-8") == "VALUE = 1\n"
    assert not (output_path / "build").exists()
    assert (input_path / "app" / "jobs.py").read_text(encoding="utf-8") == (
        'console.error(f"job {name} failed")\n'
    )

    payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert payload["project_id"] == "shop"
    assert payload["version"] == "1.0.0"
    assert payload["statements"] == [
        {"id": jobs_id, "file": "app/jobs.py", "line": 1, "message": "job {} failed"},
        {"id": main_id, "file": "app/main.py", "line": 2, "message": "started"},
    ]


def test_ph7_bld_005_gate_closed_by_default_copies_verbatim(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    _sample_project(input_path)
    stdout = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path)],
        stdout=stdout,
        stderr=io.StringIO(),
        environ={},
    )

    assert exit_code == 0
    output = _strip_ansi(stdout.getvalue())
    assert "instrument_enabled=0" in output
    assert "export:start" not in output
    assert (output_path / "app" / "main.py").read_text(encoding="utf-8") == (
        input_path / "app" / "main.py"
    ).read_text(encoding="utf-8")


def test_ph7_bld_006_environment_opens_gate_and_include_limits_files(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    manifest_path = tmp_path / "statement-ids.json"
    _sample_project(input_path)
    stdout = io.StringIO()

    exit_code = run(
        [
            "--input",
            str(input_path),
            "--output",
            str(output_path),
            "--include",
            "app/jobs.py",
            "--manifest",
            str(manifest_path),
        ],
        stdout=stdout,
        stderr=io.StringIO(),
        environ={
            "STMTID_INSTRUMENT": "1",
            "STMTID_EXPORT_STATEMENTS": "true",
            "STMTID_VERSION": "3.0.0",
        },
    )

    assert exit_code == 0
    output = _strip_ansi(stdout.getvalue())
    assert "python_files_skipped_by_include=2" in output
    payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert payload["project_id"] == "input"
    assert payload["version"] == "3.0.0"
    assert [statement["file"] for statement in payload["statements"]] == ["app/jobs.py"]


def test_ph7_bld_007_unparsable_file_is_counted_and_copied(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    _sample_project(input_path)
    _write_file(input_path / "app" / "broken.py", "def broken(:\n    logger.info('x')\n")
    stdout = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path), "--instrument"],
        stdout=stdout,
        stderr=io.StringIO(),
        environ={},
    )

    assert exit_code == 0
    assert "python_files_failed=1" in _strip_ansi(stdout.getvalue())
    assert (output_path / "app" / "broken.py").read_text(encoding="utf-8") == (
        "def broken(:\n    logger.info('x')\n"
    )


def test_ph7_bld_008_export_failure_does_not_fail_build(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    _sample_project(input_path)
    blocker = tmp_path / "dist"
    _write_file(blocker, "not a directory")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "--input",
            str(input_path),
            "--output",
            str(tmp_path / "out"),
            "--instrument",
            "--export",
            "--manifest",
            str(blocker / "statement-ids.json"),
        ],
        stdout=stdout,
        stderr=stderr,
        environ={},
    )

    assert exit_code == 0
    assert "Failed to export statements" in stderr.getvalue()
    assert "status=success" in _strip_ansi(stdout.getvalue())


def test_ph7_bld_009_copy_skips_git_dir_and_root_ignored_paths(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    _sample_project(input_path)
    _write_file(input_path / ".git" / "HEAD", "ref: refs/heads/main\n")
    _write_file(input_path / "app" / "build" / "cache.py", 'logger.info("cached")\n')
    stdout = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path), "--instrument"],
        stdout=stdout,
        stderr=io.StringIO(),
        environ={},
    )

    assert exit_code == 0
    output = _strip_ansi(stdout.getvalue())
    assert "paths_ignored=3" in output
    assert "files_copied=5" in output
    assert not (output_path / ".git").exists()
    assert not (output_path / "app" / "build").exists()
    assert (output_path / ".gitignore").read_text(encoding="utf-8") == "build/\n"


def test_ph7_bld_010_logger_setup_modules_still_import_after_build(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    _write_file(
        input_path / "app" / "setup_logging.py",
        "import logging\n"
        "from logging import getLogger\n"
        "logger = getLogger(__name__)\n"
        "logger.setLevel(logging.INFO)\n"
        "logger.addHandler(logging.NullHandler())\n",
    )

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path), "--instrument"],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
        environ={},
    )

    assert exit_code == 0
    built = (output_path / "app" / "setup_logging.py").read_text(encoding="utf-8")
    assert "stmt_id" not in built
    exec(compile(built, "setup_logging.py", "exec"), {"__name__": "app.setup_logging"})
