"""HTTP client for the OpenStreetMap changeset listing endpoint."""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from .config import OsmSettings, UTC
from .errors import NotFound, TransportError

LOGGER = logging.getLogger(__name__)

# No changeset can predate the founding of the project.
EPOCH = datetime(2004, 1, 1, tzinfo=UTC)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class OsmApiClient:
    """Fetches single pages of a user's changesets, newest first."""

    def __init__(self, settings: OsmSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._endpoint = settings.api_url.rstrip("/") + "/changesets"
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent, "Accept": "application/xml"},
            timeout=settings.request_timeout,
        )
        self._owns_client = client is None

    async def __aenter__(self) -> "OsmApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_params(self, username: str, window_end: datetime) -> dict[str, str]:
        return {
            "display_name": username,
            "time": f"{format_timestamp(EPOCH)},{format_timestamp(window_end)}",
            "limit": str(self._settings.page_size),
        }

    async def fetch_page(self, username: str, window_end: datetime) -> str:
        """Return the raw body for changesets created in ``[EPOCH, window_end]``."""

        params = self.build_params(username, window_end)
        LOGGER.debug("GET %s %s", self._endpoint, params)
        try:
            response = await self._client.get(self._endpoint, params=params)
        except httpx.RequestError as exc:
            LOGGER.warning("Changeset request error: %s", exc)
            raise TransportError(f"Request failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(f"No such user {username!r}")
        if not response.is_success:
            LOGGER.warning("Changeset API returned HTTP %s", response.status_code)
            raise TransportError(f"HTTP {response.status_code}", status_code=response.status_code)
        return response.text


__all__ = ["OsmApiClient", "EPOCH", "format_timestamp", "parse_timestamp"]
