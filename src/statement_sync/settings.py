# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Region and credential settings shared by the registry sync tools."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

API_KEY_ENV: str = "BRONTO_API_KEY"
REGION_ENV: str = "BRONTO_REGION"
API_KEY_HEADER: str = "X-BRONTO-API-KEY"

DEFAULT_REGION: str = "EU"
REGION_BASE_URLS: dict[str, str] = {
    "EU": "https://api.eu.bronto.io",
    "US": "https://api.us.bronto.io",
}
REGION_INGESTION_URLS: dict[str, str] = {
    "EU": "https://ingestion.eu.bronto.io/v1/logs",
    "US": "https://ingestion.us.bronto.io/v1/logs",
}


class SettingsError(RuntimeError):
    """Represent missing or invalid sync settings."""


def resolve_region(value: str | None) -> str:
    """Map a region setting to one of the supported regions.

    Args:
        value: Raw region value; matching is case-insensitive.

    Returns:
        ``EU`` or ``US``. Unset and unrecognized values resolve to ``EU``.
    """
    normalized = (value or "").strip().upper()
    if normalized in REGION_BASE_URLS:
        return normalized
    if normalized:
        logger.warning(
            f"Unrecognized region, using default (region={value} default={DEFAULT_REGION})"
        )
    return DEFAULT_REGION


@dataclass(frozen=True)
class SyncSettings:
    """Describe the remote registry target.

    Attributes:
        api_key: Static API key sent with every request.
        region: Resolved region name.
    """

    api_key: str
    region: str

    @property
    def base_url(self) -> str:
        return REGION_BASE_URLS[self.region]

    @property
    def ingestion_url(self) -> str:
        return REGION_INGESTION_URLS[self.region]

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "SyncSettings":
        """Read sync settings from environment variables.

        Args:
            environ: Environment mapping.

        Returns:
            Parsed settings.

        Raises:
            SettingsError: If the API key is absent or blank.
        """
        api_key = environ.get(API_KEY_ENV, "").strip()
        if not api_key:
            raise SettingsError(f"{API_KEY_ENV} environment variable is missing.")
        return cls(api_key=api_key, region=resolve_region(environ.get(REGION_ENV)))
