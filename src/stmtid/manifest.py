# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Statement manifest model, export and loading."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from stmtid.registry import StatementRecord, StatementRegistry

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_PATH: Path = Path("dist") / "statement-ids.json"


class ManifestError(RuntimeError):
    """Represent a manifest that cannot be used."""


class ManifestMissingError(ManifestError):
    """Represent an absent manifest file."""


class ManifestParseError(ManifestError):
    """Represent an unreadable or malformed manifest file."""


@dataclass(frozen=True)
class Provenance:
    """Describe where a manifest comes from.

    Attributes:
        project_id: Remote project identifier.
        version: Version string of the built project.
        repo_url: Source repository URL.
    """

    project_id: str
    version: str
    repo_url: str


@dataclass(frozen=True)
class Manifest:
    """Represent one serialized snapshot of a statement registry."""

    project_id: str
    version: str
    repo_url: str
    statements: list[StatementRecord]

    def to_dict(self) -> dict[str, object]:
        return {
            "project_id": self.project_id,
            "version": self.version,
            "repo_url": self.repo_url,
            "statements": [statement.to_dict() for statement in self.statements],
        }

    def statement_ids(self) -> list[str]:
        return [statement.id for statement in self.statements]


def build_manifest(registry: StatementRegistry, provenance: Provenance) -> Manifest:
    """Snapshot a registry into a manifest.

    Args:
        registry: Registry filled by the instrumentation pass.
        provenance: Project metadata stored alongside the statements.

    Returns:
        Manifest listing the statements in registry insertion order.
    """
    return Manifest(
        project_id=provenance.project_id,
        version=provenance.version,
        repo_url=provenance.repo_url,
        statements=registry.records(),
    )


def write_manifest(manifest: Manifest, output_path: Path) -> None:
    """Write a manifest as indented UTF-8 JSON.

    Args:
        manifest: Manifest to persist.
        output_path: Target file path.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export_manifest(
    registry: StatementRegistry,
    provenance: Provenance,
    output_path: Path,
    enabled: bool,
) -> Path | None:
    """Export the registry once the build has visited every unit.

    Export is best effort: a filesystem failure is logged and reported
    through the return value, never raised.

    Args:
        registry: Completed statement registry.
        provenance: Project metadata for the manifest.
        output_path: Manifest file path.
        enabled: Whether the export flag is set.

    Returns:
        The written path, or ``None`` when export is disabled or failed.
    """
    if not enabled:
        logger.debug("Manifest export disabled")
        return None
    manifest = build_manifest(registry, provenance)
    try:
        write_manifest(manifest, output_path)
    except OSError as exc:
        logger.error(
            f"Failed to export statements (output_path={output_path} error={exc})"
        )
        return None
    logger.info(
        f"Exported statement ids (count={len(manifest.statements)} output_path={output_path})"
    )
    return output_path


def load_manifest(manifest_path: Path) -> Manifest:
    """Load and validate a manifest file.

    Args:
        manifest_path: Manifest file path.

    Returns:
        Parsed manifest.

    Raises:
        ManifestMissingError: If the file does not exist.
        ManifestParseError: If the file cannot be read or is malformed.
    """
    if not manifest_path.is_file():
        raise ManifestMissingError(
            f"Statement file not found at {manifest_path}. "
            "Run 'stmtid-build --export' first."
        )
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning(f"Failed to read manifest (path={manifest_path} error={exc})")
        raise ManifestParseError(
            f"Failed to parse statements file JSON at {manifest_path}: {exc}"
        ) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("statements"), list):
        raise ManifestParseError(
            f"Statements file at {manifest_path} has no 'statements' list"
        )
    statements: list[StatementRecord] = []
    for entry in payload["statements"]:
        if not isinstance(entry, dict):
            raise ManifestParseError(
                f"Invalid statement in {manifest_path}: expected object, got {entry!r}"
            )
        try:
            statements.append(StatementRecord.from_dict(entry))
        except ValueError as exc:
            raise ManifestParseError(
                f"Invalid statement in {manifest_path}: {exc}"
            ) from exc
    return Manifest(
        project_id=str(payload.get("project_id", "")),
        version=str(payload.get("version", "")),
        repo_url=str(payload.get("repo_url", "")),
        statements=statements,
    )
