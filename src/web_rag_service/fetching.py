from __future__ import annotations

import asyncio
import logging

import httpx

from web_rag_service import config
from web_rag_service.errors import FetchTimeout, NetworkError

logger = logging.getLogger(__name__)


class BoundedFetcher:
    """
    Single-attempt HTTP GET with a hard wall-clock timeout per call.

    Every call owns its own timer; a timeout cancels only that call's request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout_s: float = config.FETCH_TIMEOUT_S,
    ) -> None:
        """
        Initialize BoundedFetcher.

        Args:
            client: Shared async HTTP client used for every fetch.
            timeout_s: Default per-call timeout in seconds.
        """
        self.client = client
        self.timeout_s = timeout_s

    async def fetch(self, url: str, timeout_s: float | None = None) -> httpx.Response:
        """
        Fetch a URL, giving up after the timeout.

        The body is read before the timer is disarmed, so a slow body counts
        against the same budget as a slow connect.

        Args:
            url: Absolute URL to GET.
            timeout_s: Per-call override of the default timeout.

        Returns:
            The httpx.Response, whatever its status code.

        Raises:
            FetchTimeout: The timer elapsed before the response was complete.
            NetworkError: DNS, connection, TLS or read failure.
        """
        timeout_s = self.timeout_s if timeout_s is None else timeout_s

        try:
            async with asyncio.timeout(timeout_s):
                response = await self.client.get(url, follow_redirects=True)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise FetchTimeout(f"Fetch request timed out after {timeout_s}s: {url}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"Fetch request failed for {url}: {e}") from e

        if response.is_error:
            logger.warning("GET %s returned HTTP %s", url, response.status_code)
        return response
