# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Content-addressed statement identifiers."""

import hashlib

STATEMENT_ID_LENGTH: int = 16


def generate_id(file: str, line: int) -> str:
    """Derive the statement id of a call site.

    The id is the first 16 hex characters of the MD5 digest of ``file:line``.
    Truncation keeps 64 bits, so distinct call sites are separated with high
    probability only; collisions are not detected.

    Args:
        file: Project-relative POSIX path of the source file.
        line: 1-based line of the call expression.

    Returns:
        Lowercase hex statement id.
    """
    digest = hashlib.md5(f"{file}:{line}".encode("utf-8")).hexdigest()  # noqa: S324
    return digest[:STATEMENT_ID_LENGTH]
