"""Client for the community module catalog."""

from __future__ import annotations

import logging
from typing import Any

import httpx

DEFAULT_CATALOG_URL = "https://s3.amazonaws.com/botpress-io/all-modules.json"
FETCH_TIMEOUT = 5.0


class CatalogError(Exception):
    """Raised when the catalog cannot be fetched."""

    pass


class CatalogClient:
    """Fetch the list of community modules.

    A single GET with a fixed timeout; no retries.

    Example:
        >>> client = CatalogClient()
        >>> modules = client.fetch_all()
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float = FETCH_TIMEOUT,
        http_client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the catalog client.

        Args:
            url: Catalog URL.
            timeout: Request timeout in seconds.
            http_client: Pre-built client (mostly for tests).
            logger: Logger to report through (default: module logger).
        """
        self.url = url or DEFAULT_CATALOG_URL
        self.timeout = timeout
        self._http_client = http_client
        self.logger = logger or logging.getLogger(__name__)

    def _request(self) -> Any:
        """GET the catalog and decode the JSON body."""
        try:
            if self._http_client is not None:
                response = self._http_client.get(self.url, timeout=self.timeout)
                response.raise_for_status()
                return response.json()

            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(self.url)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogError(f"API error: {e.response.status_code}")
        except httpx.RequestError as e:
            raise CatalogError(f"Connection error: {e}")
        except ValueError as e:
            raise CatalogError(f"Invalid catalog body: {e}")

    def fetch_all(self) -> Any | None:
        """Fetch every module in the catalog.

        Returns:
            The decoded body (normally a list of module entries), or None if
            the fetch failed.
        """
        try:
            return self._request()
        except CatalogError as e:
            self.logger.error("Could not fetch modules: %s", e)
            return None
