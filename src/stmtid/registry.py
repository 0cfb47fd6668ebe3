# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Statement records and the ordered registry built during one build."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class StatementRecord:
    """Represent one logging call site.

    Attributes:
        id: 16-character hex statement id derived from ``file`` and ``line``.
        file: Project-relative POSIX source path.
        line: 1-based line of the call expression.
        message: Extracted display message, ``"unknown"`` when unrecognized.
        level: Optional severity tag.
    """

    id: str
    file: str
    line: int
    message: str
    level: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to the manifest statement shape.

        Returns:
            JSON-compatible mapping; ``level`` is omitted when unset.
        """
        payload: dict[str, object] = {
            "id": self.id,
            "file": self.file,
            "line": self.line,
            "message": self.message,
        }
        if self.level is not None:
            payload["level"] = self.level
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "StatementRecord":
        """Build a record from a manifest statement entry.

        Args:
            payload: Decoded statement mapping.

        Returns:
            Parsed statement record.

        Raises:
            ValueError: If a required field is absent or has the wrong type.
        """
        statement_id = payload.get("id")
        file = payload.get("file")
        line = payload.get("line")
        message = payload.get("message")
        level = payload.get("level")
        if not isinstance(statement_id, str) or not statement_id:
            raise ValueError(f"Statement entry has no valid id: {payload!r}")
        if not isinstance(file, str):
            raise ValueError(f"Statement {statement_id} has no valid file")
        if not isinstance(line, int) or isinstance(line, bool):
            raise ValueError(f"Statement {statement_id} has no valid line")
        if not isinstance(message, str):
            raise ValueError(f"Statement {statement_id} has no valid message")
        if level is not None and not isinstance(level, str):
            raise ValueError(f"Statement {statement_id} has an invalid level")
        return cls(id=statement_id, file=file, line=line, message=message, level=level)


class StatementRegistry:
    """Ordered id to record mapping with last-write-wins upserts.

    Upserting an id that is already present replaces its record in place, so
    the first insertion position of each id is kept.
    """

    def __init__(self, records: Iterable[StatementRecord] = ()) -> None:
        self._records: dict[str, StatementRecord] = {}
        for record in records:
            self.upsert(record)

    def upsert(self, record: StatementRecord) -> None:
        """Insert or replace the record stored under ``record.id``."""
        self._records[record.id] = record

    def get(self, statement_id: str) -> StatementRecord | None:
        return self._records.get(statement_id)

    def records(self) -> list[StatementRecord]:
        """Return all records in insertion order."""
        return list(self._records.values())

    def copy(self) -> "StatementRegistry":
        return StatementRegistry(self._records.values())

    def merge(self, other: "StatementRegistry") -> None:
        """Upsert every record of ``other``, in its insertion order."""
        for record in other.records():
            self.upsert(record)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, statement_id: object) -> bool:
        return statement_id in self._records

    def __iter__(self) -> Iterator[StatementRecord]:
        return iter(self.records())
