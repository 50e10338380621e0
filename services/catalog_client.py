"""
Catalog Client

Fetches the song feed once over HTTP and decodes it into a Catalog.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

import requests

from models import Catalog, Track
from models.settings import DEFAULT_ENDPOINT

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when the catalog cannot be fetched or decoded."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogClient:
    """Client for the remote song feed."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize with the feed endpoint.

        Args:
            endpoint: URL returning ``{"songs": [...]}``
            timeout: Request timeout in seconds
        """
        self.endpoint = endpoint
        self.timeout = timeout

    async def fetch_catalog(self) -> Catalog:
        """
        Fetch and decode the feed without blocking the event loop.

        Returns:
            Catalog of tracks in feed order

        Raises:
            FetchError: On transport failure, non-2xx status or bad payload
        """
        return await asyncio.to_thread(self.fetch_catalog_sync)

    def fetch_catalog_sync(self) -> Catalog:
        """Blocking variant of ``fetch_catalog``."""
        scheme = urlparse(self.endpoint).scheme
        if scheme not in ("http", "https"):
            raise FetchError(f"Invalid feed URL: {self.endpoint}")

        try:
            response = requests.get(
                self.endpoint,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {self.endpoint} failed: {e}")
            raise FetchError(f"Request failed: {e}") from e

        logger.debug(f"HTTP Status Code: {response.status_code} for {response.url}")

        if not 200 <= response.status_code <= 299:
            raise FetchError(
                f"Feed returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Feed returned invalid JSON: {e}") from e

        return self._decode(payload)

    @staticmethod
    def _decode(payload: Any) -> Catalog:
        if not isinstance(payload, dict) or not isinstance(payload.get("songs"), list):
            raise FetchError("Feed payload has no 'songs' list")

        try:
            tracks = [Track.from_api(item) for item in payload["songs"]]
        except (ValueError, TypeError) as e:
            raise FetchError(f"Could not decode song: {e}") from e

        logger.info(f"Decoded {len(tracks)} tracks from feed")
        return Catalog(tracks)
