"""
HTTP client for the external product feed.
"""

from typing import Any, Optional

import httpx

from backend.src.core.config import settings
from backend.src.core.exceptions import ExternalServiceError, InvalidFeedError
from backend.src.core.logging import get_logger

logger = get_logger(__name__)


class FeedClient:
    """Fetches the catalog snapshot with a single GET."""

    def __init__(
        self,
        feed_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.feed_url = feed_url or settings.FEED_URL
        self.timeout = timeout or settings.FEED_TIMEOUT_SECONDS
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={
                    "User-Agent": "Catalog-Sync/1.0",
                    "Accept": "application/json",
                },
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_snapshot(self) -> Any:
        """
        Download and decode the feed document.

        Returns:
            Decoded JSON document (shape is checked by the caller)

        Raises:
            ExternalServiceError: If the feed cannot be reached or answers non-2xx
            InvalidFeedError: If the body is not JSON
        """
        client = await self._get_http_client()

        try:
            response = await client.get(self.feed_url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                message=f"Product feed timed out after {self.timeout}s",
                service_name="product_feed",
                original_error=e,
            ) from e
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                message=f"Product feed answered HTTP {e.response.status_code}",
                service_name="product_feed",
                original_error=e,
            ) from e
        except httpx.RequestError as e:
            raise ExternalServiceError(
                message="Product feed unreachable",
                service_name="product_feed",
                original_error=e,
            ) from e

        try:
            document = response.json()
        except ValueError as e:
            raise InvalidFeedError(feed_url=self.feed_url) from e

        logger.debug(
            "Fetched product feed",
            extra={"feed_url": self.feed_url, "bytes": len(response.content)},
        )
        return document


# Global instance
feed_client = FeedClient()
