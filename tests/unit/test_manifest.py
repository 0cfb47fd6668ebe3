# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import json
from pathlib import Path

import pytest

from stmtid.manifest import (
    ManifestMissingError,
    ManifestParseError,
    Provenance,
    export_manifest,
    load_manifest,
)
from stmtid.registry import StatementRecord, StatementRegistry
from stmtid.settings import BuildSettings

PROVENANCE = Provenance(
    project_id="shop", version="2.1.0", repo_url="https://example.com/shop.git"
)


def _registry() -> StatementRegistry:
    return StatementRegistry(
        [
            StatementRecord(id="5c2e003a488c8168", file="app/main.py", line=3, message="start"),
            StatementRecord(id="f50fc3f8eaa6a8a6", file="app/db.py", line=41, message="query {}"),
        ]
    )


def test_ph4_man_001_export_writes_manifest_document(tmp_path: Path) -> None:
    output_path = tmp_path / "dist" / "statement-ids.json"

    written = export_manifest(_registry(), PROVENANCE, output_path, enabled=True)

    assert written == output_path
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload == {
        "project_id": "shop",
        "version": "2.1.0",
        "repo_url": "https://example.com/shop.git",
        "statements": [
            {"id": "5c2e003a488c8168", "file": "app/main.py", "line": 3, "message": "start"},
            {"id": "f50fc3f8eaa6a8a6", "file": "app/db.py", "line": 41, "message": "query {}"},
        ],
    }


def test_ph4_man_002_exported_manifest_loads_back(tmp_path: Path) -> None:
    output_path = tmp_path / "statement-ids.json"
    export_manifest(_registry(), PROVENANCE, output_path, enabled=True)

    manifest = load_manifest(output_path)

    assert manifest.project_id == "shop"
    assert manifest.statements == _registry().records()
    assert manifest.statement_ids() == ["5c2e003a488c8168", "f50fc3f8eaa6a8a6"]


def test_ph4_man_003_disabled_export_writes_nothing(tmp_path: Path) -> None:
    output_path = tmp_path / "statement-ids.json"

    assert export_manifest(_registry(), PROVENANCE, output_path, enabled=False) is None
    assert not output_path.exists()


def test_ph4_man_004_export_failure_is_reported_not_raised(tmp_path: Path) -> None:
    blocker = tmp_path / "dist"
    blocker.write_text("not a directory", encoding="utf-8")

    written = export_manifest(
        _registry(), PROVENANCE, blocker / "statement-ids.json", enabled=True
    )

    assert written is None


def test_ph4_man_005_missing_manifest_raises_missing_error(tmp_path: Path) -> None:
    with pytest.raises(ManifestMissingError, match="stmtid-build --export"):
        load_manifest(tmp_path / "absent.json")


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps(["a", "b"]),
        json.dumps({"project_id": "shop"}),
        json.dumps({"statements": ["5c2e003a488c8168"]}),
        json.dumps({"statements": [{"id": "5c2e003a488c8168", "file": "a.py"}]}),
    ],
)
def test_ph4_man_006_malformed_manifest_raises_parse_error(
    tmp_path: Path, content: str
) -> None:
    manifest_path = tmp_path / "statement-ids.json"
    manifest_path.write_text(content, encoding="utf-8")

    with pytest.raises(ManifestParseError):
        load_manifest(manifest_path)


def test_ph4_set_001_build_settings_read_gate_and_provenance() -> None:
    settings = BuildSettings.from_env(
        {
            "STMTID_INSTRUMENT": "1",
            "STMTID_EXPORT_STATEMENTS": "TRUE",
            "STMTID_PROJECT_ID": "shop",
            "STMTID_REPO_URL": "https://example.com/shop.git",
        }
    )

    assert settings.instrument_enabled is True
    assert settings.export_enabled is True
    assert settings.project_id == "shop"
    assert settings.version == "1.0.0"
    assert settings.repo_url == "https://example.com/shop.git"


def test_ph4_set_002_build_settings_default_to_closed_gate() -> None:
    settings = BuildSettings.from_env({"STMTID_INSTRUMENT": "true", "STMTID_EXPORT_STATEMENTS": "1"})

    assert settings.instrument_enabled is False
    assert settings.export_enabled is False
    assert settings.project_id is None
