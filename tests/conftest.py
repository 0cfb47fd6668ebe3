import sys
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

TRANSPORT_FAILURE: int = -1


@dataclass
class StubRegistry:
    """In-memory stand-in for the registry and ingestion endpoints."""

    lookup_statuses: dict[str, int] = field(default_factory=dict)
    remote_records: dict[str, dict[str, object]] = field(default_factory=dict)
    upload_status: int = 200
    upload_body: dict[str, object] = field(
        default_factory=lambda: {"created": 2, "modified": 1, "deleted": 0}
    )
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host.startswith("api.")]

    @property
    def ingestion_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host.startswith("ingestion.")]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host.startswith("ingestion."):
            return httpx.Response(200, json={})
        if request.method == "POST" and request.url.path == "/statements":
            if self.upload_status >= 400:
                return httpx.Response(self.upload_status, text="upload rejected")
            return httpx.Response(self.upload_status, json=self.upload_body)
        statement_id = request.url.path.rsplit("/", 1)[-1]
        status = self.lookup_statuses.get(statement_id, 404)
        if status == TRANSPORT_FAILURE:
            raise httpx.ConnectError("connection refused", request=request)
        if 200 <= status < 300:
            record = self.remote_records.get(
                statement_id, {"file": "app/main.py", "line": 1, "message": "hello"}
            )
            return httpx.Response(status, json={"id": statement_id, **record})
        return httpx.Response(status, text=f"registry said {status}")


@pytest.fixture
def stub_registry() -> StubRegistry:
    return StubRegistry()


@pytest.fixture
def sync_environ() -> dict[str, str]:
    return {"BRONTO_API_KEY": "test-api-key", "BRONTO_REGION": "EU"}
