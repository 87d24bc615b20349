"""Base fetcher interface and shared HTTP client management.

All ticker fetchers inherit from BaseFetcher and implement the fetch() method.
A shared httpx.AsyncClient is used across all fetchers to avoid connection overhead.

Fetchers return a Ticker on success and raise FetcherError otherwise; the
``tick`` origin turns both outcomes into data points. Fetchers can optionally
implement batch fetching for APIs that support querying multiple pairs in a
single request.

.. code-block:: python

    @register_fetcher
    class MyFetcher(BaseFetcher):
        name = "myfetcher"

        async def fetch(self, base: str, quote: str) -> Ticker:
            response = await self._get(f"https://api.example.com/{base}/{quote}")
            data = response.json()
            return self._ticker(data["price"], data["volume"])
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from ..bn import DecFloatPointNumber, as_dec_float

logger = logging.getLogger(__name__)


class FetcherError(Exception):
    """Base exception for fetcher errors."""

    pass


class FetcherConfigError(FetcherError):
    """Raised when fetcher configuration is invalid (e.g., missing API key)."""

    pass


class FetcherHTTPError(FetcherError):
    """Raised when HTTP request fails.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


@dataclass(frozen=True)
class Ticker:
    """Last price and 24h volume reported by an exchange.

    :ivar price: Last traded price in quote units.
    :ivar volume: 24h volume in base units, None if not reported.
    """

    price: DecFloatPointNumber
    volume: DecFloatPointNumber | None = None


class BaseFetcher(ABC):
    """Abstract base class for ticker fetchers.

    Subclasses must implement:
        - name: Class variable identifying the source (e.g., "coinbase", "kraken")
        - fetch(): Async method to fetch the ticker for a trading pair

    :cvar name: Unique identifier for this fetcher.
    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar timeout: Request timeout in seconds.
    """

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    # Fetcher identification
    name: ClassVar[str] = ""

    # Default timeout for HTTP requests (seconds)
    DEFAULT_TIMEOUT = 10.0

    def __init__(self, timeout: float | None = None):
        """Initialize the fetcher.

        :param timeout: Request timeout in seconds (default: 10).
        """
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        The client is stored on BaseFetcher so every subclass reuses it.

        :returns: Shared httpx.AsyncClient instance.
        """
        if BaseFetcher._shared_client is None or BaseFetcher._shared_client.is_closed:
            BaseFetcher._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
                follow_redirects=True,
            )
        return BaseFetcher._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        if BaseFetcher._shared_client is not None and not BaseFetcher._shared_client.is_closed:
            await BaseFetcher._shared_client.aclose()
        BaseFetcher._shared_client = None

    @abstractmethod
    async def fetch(self, base: str, quote: str) -> Ticker:
        """Fetch the current ticker for a trading pair.

        :param base: Base currency symbol (e.g., "ETH", "BTC").
        :param quote: Quote currency symbol (e.g., "USD").
        :returns: Ticker with the last price.
        :raises FetcherError: If the ticker cannot be fetched or parsed.
        """
        pass

    @property
    def supports_batch(self) -> bool:
        """Check if this fetcher supports batch fetching multiple pairs.

        Override in subclasses that implement fetch_batch() with actual
        batch API calls.

        :returns: True if batch fetching is supported.
        """
        return False

    async def fetch_batch(
        self, pairs: list[tuple[str, str]]
    ) -> dict[tuple[str, str], Ticker | FetcherError]:
        """Fetch tickers for multiple trading pairs.

        Default implementation falls back to sequential individual fetches.
        Override in subclasses to implement actual batch API calls.

        :param pairs: List of (base, quote) tuples to fetch.
        :returns: Dict mapping (base, quote) to a Ticker or the error it failed with.
        """
        results: dict[tuple[str, str], Ticker | FetcherError] = {}
        for base, quote in pairs:
            try:
                results[(base, quote)] = await self.fetch(base, quote)
            except FetcherError as e:
                results[(base, quote)] = e
        return results

    def _ticker(self, price: Any, volume: Any = None) -> Ticker:
        """Build a Ticker from raw JSON values.

        Exchanges report numbers as strings; they are parsed as decimals so no
        precision is lost to binary floats.

        :raises FetcherError: If the price is missing or not a number.
        """
        dec_price = as_dec_float(price)
        if dec_price is None:
            raise FetcherError(f"[{self.name}] invalid price: {price!r}")
        dec_volume = as_dec_float(volume) if volume is not None else None
        return Ticker(dec_price, dec_volume)

    async def _get(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request using the shared client.

        :param url: Request URL.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        :raises FetcherHTTPError: On non-2xx response.
        :raises FetcherError: On network/timeout errors.
        """
        client = self.get_shared_client()
        try:
            response = await client.get(
                url,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise FetcherError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise FetcherError(f"Request failed: {e}") from e
        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise FetcherHTTPError(response.status_code, response.text[:200])
        return response

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        """GET a URL and decode the JSON body.

        :raises FetcherError: On HTTP errors or a body that is not JSON.
        """
        response = await self._get(url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise FetcherError(f"[{self.name}] invalid JSON response: {e}") from e


# Registry of available fetchers (populated by subclass imports)
FETCHER_REGISTRY: dict[str, type[BaseFetcher]] = {}


def register_fetcher(cls: type[BaseFetcher]) -> type[BaseFetcher]:
    """Decorator to register a fetcher class in the global registry.

    :param cls: Fetcher class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If fetcher has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Fetcher {cls.__name__} must define a 'name' class variable")
    FETCHER_REGISTRY[cls.name] = cls
    return cls


def get_fetcher(name: str, timeout: float | None = None) -> BaseFetcher:
    """Get a fetcher instance by name.

    :param name: Fetcher name (e.g., "coinbase", "kraken").
    :param timeout: Optional request timeout in seconds.
    :returns: Fetcher instance.
    :raises FetcherConfigError: If fetcher name is unknown.
    """
    if name not in FETCHER_REGISTRY:
        available = ", ".join(sorted(FETCHER_REGISTRY.keys()))
        raise FetcherConfigError(f"Unknown fetcher '{name}'. Available: {available}")
    return FETCHER_REGISTRY[name](timeout=timeout)


def get_available_fetchers() -> list[str]:
    """Get list of available fetcher names.

    :returns: Sorted list of registered fetcher names.
    """
    return sorted(FETCHER_REGISTRY.keys())
