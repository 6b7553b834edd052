"""Base client interface and shared HTTP client management.

Both the explorer client and the transaction-search RPC client inherit from
BaseClient. A shared httpx.AsyncClient is used across all clients to avoid
connection overhead, unless a dedicated client is injected (e.g. in tests).

.. code-block:: python

    class MyClient(BaseClient):
        async def lookup(self, key: str) -> str | None:
            try:
                response = await self._get(f"https://api.example.com/{key}")
            except ClientError as e:
                logger.warning(f"[example] Failed to fetch {key}: {e}")
                return None
            return response.text
"""

import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Base exception for upstream request errors."""

    pass


class ClientHTTPError(ClientError):
    """Raised when an HTTP request returns a non-success status.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class BaseClient:
    """Base class for upstream API clients.

    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar timeout: Request timeout in seconds.
    """

    # Process-wide pooled HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        :param timeout: Request timeout in seconds (default: 10).
        :param http_client: Optional dedicated httpx client. When omitted the
            shared pooled client is used.
        """
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._http_client = http_client

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        :returns: Shared httpx.AsyncClient instance.
        """
        if BaseClient._shared_client is None or BaseClient._shared_client.is_closed:
            BaseClient._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
                follow_redirects=True,
            )
        return BaseClient._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        if BaseClient._shared_client is not None and not BaseClient._shared_client.is_closed:
            await BaseClient._shared_client.aclose()
            BaseClient._shared_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Return the injected client, or the shared one."""
        if self._http_client is not None:
            return self._http_client
        return self.get_shared_client()

    async def _get(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request.

        :param url: Request URL.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        :raises ClientHTTPError: On non-2xx response.
        :raises ClientError: On network/timeout errors.
        """
        try:
            response = await self.http_client.get(
                url,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise ClientError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise ClientError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise ClientHTTPError(response.status_code, response.text[:200])
        return response

    async def _post(
        self,
        url: str,
        *,
        json: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP POST request.

        :param url: Request URL.
        :param json: Optional JSON body.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        :raises ClientHTTPError: On non-2xx response.
        :raises ClientError: On network/timeout errors.
        """
        try:
            response = await self.http_client.post(
                url,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise ClientError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise ClientError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP POST %s failed with status %s: %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise ClientHTTPError(response.status_code, response.text[:200])
        return response
