"""Bitstamp fetcher.

Endpoint: https://www.bitstamp.net/api/v2/ticker/{base}{quote}/
Rate Limit: 8000 requests per 10 minutes (no key required)
"""

import logging

from .base import BaseFetcher, FetcherError, Ticker, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class BitstampFetcher(BaseFetcher):
    """Fetcher for the Bitstamp public ticker."""

    name = "bitstamp"
    BASE_URL = "https://www.bitstamp.net/api/v2"

    async def fetch(self, base: str, quote: str) -> Ticker:
        """Fetch the ticker from Bitstamp.

        :param base: Base currency (e.g., "ETH").
        :param quote: Quote currency (e.g., "BTC").
        :returns: Last price and 24h volume.
        :raises FetcherError: On HTTP errors or a response without a price.
        """
        symbol = f"{base.lower()}{quote.lower()}"
        data = await self._get_json(f"{self.BASE_URL}/ticker/{symbol}/")

        if not isinstance(data, dict) or "last" not in data:
            logger.warning(f"[bitstamp] No price in response for {symbol}: {data}")
            raise FetcherError(f"[bitstamp] no price for {symbol}")

        return self._ticker(data["last"], data.get("volume"))
