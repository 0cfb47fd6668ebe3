# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Best-effort shipping of sync tool diagnostics to the log ingestion endpoint."""

import logging
import time
from collections.abc import Mapping

import httpx

from statement_sync.settings import API_KEY_HEADER

logger = logging.getLogger(__name__)

SERVICE_NAME: str = "stmtid-upload-tool"
DEPLOYMENT_ENVIRONMENT: str = "build"
DEFAULT_TIMEOUT_SECONDS: float = 5.0


def build_log_payload(
    level: str,
    message: str,
    attributes: Mapping[str, object],
    time_unix_nano: int,
) -> dict[str, object]:
    """Build an OTLP/JSON logs payload holding one log record.

    Args:
        level: Severity name; sent upper-cased.
        message: Log body.
        attributes: Record attributes. Numbers are sent as doubles, everything
            else as strings.
        time_unix_nano: Record timestamp in nanoseconds.

    Returns:
        JSON-compatible ``resourceLogs`` payload.
    """
    return {
        "resourceLogs": [
            {
                "resource": {
                    "attributes": [
                        _attribute("service.name", SERVICE_NAME),
                        _attribute("deployment.environment", DEPLOYMENT_ENVIRONMENT),
                    ]
                },
                "scopeLogs": [
                    {
                        "logRecords": [
                            {
                                "timeUnixNano": str(time_unix_nano),
                                "severityText": level.upper(),
                                "body": {"stringValue": message},
                                "attributes": [
                                    _attribute(key, value)
                                    for key, value in attributes.items()
                                ],
                            }
                        ]
                    }
                ],
            }
        ]
    }


def _attribute(key: str, value: object) -> dict[str, object]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return {"key": key, "value": {"doubleValue": float(value)}}
    return {"key": key, "value": {"stringValue": str(value)}}


class IngestionLogSink:
    """Send single log records to the region's OTLP logs endpoint."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize sink configuration.

        Args:
            endpoint: OTLP/HTTP logs URL.
            api_key: API key sent with every request.
            timeout: Per-request timeout in seconds.
            transport: Optional transport override, used by tests.
        """
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def send(
        self,
        level: str,
        message: str,
        attributes: Mapping[str, object] | None = None,
    ) -> bool:
        """Send one log record; failures are logged and swallowed.

        Args:
            level: Severity name.
            message: Log body.
            attributes: Optional record attributes.

        Returns:
            True when the endpoint accepted the record.
        """
        payload = build_log_payload(
            level=level,
            message=message,
            attributes=attributes or {},
            time_unix_nano=time.time_ns(),
        )
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    self._endpoint,
                    json=payload,
                    headers={API_KEY_HEADER: self._api_key},
                )
        except httpx.HTTPError as exc:
            logger.warning(f"Failed to send log to ingestion (endpoint={self._endpoint} error={exc})")
            return False
        if not response.is_success:
            logger.warning(
                f"Ingestion rejected log (endpoint={self._endpoint} status={response.status_code})"
            )
            return False
        return True
