# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""HTTP client for the remote statement registry."""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from statement_sync.outcomes import LookupOutcome
from statement_sync.settings import API_KEY_HEADER
from stmtid.manifest import Manifest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS: float = 10.0
STATEMENTS_PATH: str = "/statements"


class RegistryError(RuntimeError):
    """Represent a failed write to the statement registry."""


@dataclass(frozen=True)
class UploadResult:
    """Represent registry counters returned by an upload."""

    created: int
    modified: int
    deleted: int


class RegistryClient:
    """Upload manifests to and look up ids in the statement registry."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize client configuration.

        Args:
            base_url: Region base URL of the registry API.
            api_key: API key sent with every request.
            timeout: Per-request timeout in seconds.
            transport: Optional transport override, used by tests.
        """
        self._base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            headers={API_KEY_HEADER: api_key},
            timeout=timeout,
            transport=transport,
        )

    @property
    def upload_url(self) -> str:
        return f"{self._base_url}{STATEMENTS_PATH}"

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def upload(self, manifest: Manifest) -> UploadResult:
        """Send the whole manifest in one request.

        Args:
            manifest: Manifest to upload.

        Returns:
            Created, modified and deleted counts reported by the registry.

        Raises:
            RegistryError: If the request fails or returns a non-success status.
        """
        try:
            response = self._client.post(STATEMENTS_PATH, json=manifest.to_dict())
        except httpx.HTTPError as exc:
            logger.warning(f"Statement upload request failed (url={self.upload_url} error={exc})")
            raise RegistryError(f"Request to {self.upload_url} failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                f"Statement upload rejected (url={self.upload_url} status={response.status_code})"
            )
            raise RegistryError(
                f"Failed to upload statements: {response.status_code} "
                f"{response.reason_phrase} - {response.text}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise RegistryError(
                f"Registry returned a non-JSON upload response: {response.text}"
            ) from exc
        if not isinstance(body, dict):
            body = {}
        return UploadResult(
            created=_count(body, "created"),
            modified=_count(body, "modified"),
            deleted=_count(body, "deleted"),
        )

    def lookup(self, statement_id: str) -> LookupOutcome:
        """Look up one statement id.

        Args:
            statement_id: Id to look up.

        Returns:
            ``found`` for 2xx, ``missing`` for 404 and ``error`` for any other
            status or transport failure.
        """
        path = f"{STATEMENTS_PATH}/{quote(statement_id, safe='')}"
        try:
            response = self._client.get(path)
        except httpx.HTTPError as exc:
            logger.debug(f"Statement lookup failed (statement_id={statement_id} error={exc})")
            return LookupOutcome(
                statement_id=statement_id, status="error", detail=f"Fetch failed: {exc}"
            )

        if response.is_success:
            return LookupOutcome(
                statement_id=statement_id, status="found", remote=_json_object(response)
            )
        if response.status_code == httpx.codes.NOT_FOUND:
            return LookupOutcome(statement_id=statement_id, status="missing")
        return LookupOutcome(
            statement_id=statement_id,
            status="error",
            detail=f"Status {response.status_code}: {response.text}",
        )


def _count(body: dict[str, object], key: str) -> int:
    value = body.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _json_object(response: httpx.Response) -> dict[str, object] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None
