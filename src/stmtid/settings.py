# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Build-time settings read from the environment."""

from collections.abc import Mapping
from dataclasses import dataclass

INSTRUMENT_ENV: str = "STMTID_INSTRUMENT"
EXPORT_ENV: str = "STMTID_EXPORT_STATEMENTS"
PROJECT_ID_ENV: str = "STMTID_PROJECT_ID"
VERSION_ENV: str = "STMTID_VERSION"
REPO_URL_ENV: str = "STMTID_REPO_URL"

DEFAULT_VERSION: str = "1.0.0"


@dataclass(frozen=True)
class BuildSettings:
    """Describe the build-mode gate, export flag and manifest provenance.

    Attributes:
        instrument_enabled: Whether the instrumentation pass runs.
        export_enabled: Whether the manifest is exported after the build.
        project_id: Manifest project id; ``None`` lets the caller pick one.
        version: Manifest version string.
        repo_url: Manifest repository URL.
    """

    instrument_enabled: bool
    export_enabled: bool
    project_id: str | None
    version: str
    repo_url: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "BuildSettings":
        """Read settings from environment variables.

        ``STMTID_INSTRUMENT`` opens the gate only when set to ``1``;
        ``STMTID_EXPORT_STATEMENTS`` enables export only when set to ``true``.

        Args:
            environ: Environment mapping.

        Returns:
            Parsed settings.
        """
        return cls(
            instrument_enabled=environ.get(INSTRUMENT_ENV, "").strip() == "1",
            export_enabled=environ.get(EXPORT_ENV, "").strip().lower() == "true",
            project_id=environ.get(PROJECT_ID_ENV) or None,
            version=environ.get(VERSION_ENV) or DEFAULT_VERSION,
            repo_url=environ.get(REPO_URL_ENV, ""),
        )
