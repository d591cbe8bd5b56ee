"""
Base HTTP client shared by the Twitch and IGDB integrations.

Owns the lazily created ``httpx.AsyncClient``, its lifecycle, and the
translation of HTTP failures into ``TransportError``. Requests are sent
exactly once; there is no retry layer.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from game_catalog.exceptions import TransportError
from game_catalog.logger import get_logger

USER_AGENT = "GameCatalogGenerator/0.1"


class BaseAPIClient(ABC):
    """
    Abstract base class for API clients.

    Provides common functionality including:
    - HTTP client management (lazy creation, async context manager)
    - Error translation for non-success responses and network failures
    - Structured logging bound to the client's source name

    Subclasses must implement:
    - source_name: Identifier for the remote service
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            timeout: HTTP request timeout in seconds
            http_client: Preconfigured client (created on first use if None)
        """
        self._timeout = timeout
        self._client = http_client
        self._logger = get_logger(
            self.__class__.__name__,
            component="api_client",
            source=self.source_name,
        )

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return identifier for the remote service."""
        ...

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers={
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseAPIClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a single HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional arguments passed to httpx

        Returns:
            httpx.Response: Successful (2xx) response

        Raises:
            TransportError: On network failure or a non-success status
        """
        self._logger.debug("Making request", method=method, url=url)

        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Request failed", method=method, url=url, error=str(e))
            raise TransportError(
                f"{method} {url} failed: {e}",
                endpoint=url,
                original_error=e,
            ) from e

        if not response.is_success:
            self._logger.error(
                "API returned error status",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise TransportError(
                f"API error: {response.status_code} from {url}",
                endpoint=url,
                status_code=response.status_code,
                body=response.text,
            )

        return response
