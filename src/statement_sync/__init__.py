# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Clients synchronizing statement manifests with the remote registry."""

from statement_sync.client import RegistryClient, RegistryError, UploadResult
from statement_sync.ingestion import IngestionLogSink
from statement_sync.outcomes import (
    CheckSummary,
    LookupOutcome,
    accumulate,
    check_statements,
    summarize,
)
from statement_sync.settings import SettingsError, SyncSettings, resolve_region

__all__ = [
    "CheckSummary",
    "IngestionLogSink",
    "LookupOutcome",
    "RegistryClient",
    "RegistryError",
    "SettingsError",
    "SyncSettings",
    "UploadResult",
    "accumulate",
    "check_statements",
    "resolve_region",
    "summarize",
]
