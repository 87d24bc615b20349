"""Coinbase Exchange fetcher.

Endpoint: https://api.exchange.coinbase.com/products/{BASE}-{QUOTE}/ticker
Rate Limit: High (no key required)
"""

import logging

from .base import BaseFetcher, FetcherError, Ticker, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class CoinbaseFetcher(BaseFetcher):
    """Fetcher for Coinbase Exchange API.

    No API key required for public ticker endpoint.
    """

    name = "coinbase"
    BASE_URL = "https://api.exchange.coinbase.com"

    async def fetch(self, base: str, quote: str) -> Ticker:
        """Fetch the ticker from Coinbase Exchange.

        :param base: Base currency (e.g., "ETH").
        :param quote: Quote currency (e.g., "BTC").
        :returns: Last price and 24h volume.
        :raises FetcherError: On HTTP errors or a response without a price.
        """
        symbol = f"{base.upper()}-{quote.upper()}"
        data = await self._get_json(f"{self.BASE_URL}/products/{symbol}/ticker")

        if not isinstance(data, dict) or "price" not in data:
            logger.warning(f"[coinbase] No price in response for {symbol}: {data}")
            raise FetcherError(f"[coinbase] no price for {symbol}")

        return self._ticker(data["price"], data.get("volume"))
