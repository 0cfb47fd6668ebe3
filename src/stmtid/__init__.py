# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for statement id instrumentation."""

from stmtid.classifier import is_logging_call
from stmtid.ids import generate_id
from stmtid.instrument import InstrumentationError, InstrumentationPass, InstrumentResult
from stmtid.manifest import (
    DEFAULT_MANIFEST_PATH,
    Manifest,
    ManifestError,
    ManifestMissingError,
    ManifestParseError,
    Provenance,
    build_manifest,
    export_manifest,
    load_manifest,
    write_manifest,
)
from stmtid.messages import extract_message
from stmtid.registry import StatementRecord, StatementRegistry
from stmtid.runtime import StatementLogger, log_with_statement
from stmtid.shapes import shape_of

__all__ = [
    "DEFAULT_MANIFEST_PATH",
    "InstrumentResult",
    "InstrumentationError",
    "InstrumentationPass",
    "Manifest",
    "ManifestError",
    "ManifestMissingError",
    "ManifestParseError",
    "Provenance",
    "StatementLogger",
    "StatementRecord",
    "StatementRegistry",
    "build_manifest",
    "export_manifest",
    "extract_message",
    "generate_id",
    "is_logging_call",
    "load_manifest",
    "log_with_statement",
    "shape_of",
    "write_manifest",
]
