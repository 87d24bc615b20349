"""Gemini fetcher.

Endpoint: https://api.gemini.com/v1/pubticker/{base}{quote}
Rate Limit: 120 requests per minute (no key required)
"""

import logging

from .base import BaseFetcher, FetcherError, Ticker, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class GeminiFetcher(BaseFetcher):
    """Fetcher for the Gemini public ticker.

    The volume object is keyed by currency; the base currency entry is used.
    """

    name = "gemini"
    BASE_URL = "https://api.gemini.com/v1"

    async def fetch(self, base: str, quote: str) -> Ticker:
        """Fetch the ticker from Gemini.

        :param base: Base currency (e.g., "ETH").
        :param quote: Quote currency (e.g., "BTC").
        :returns: Last price and 24h volume.
        :raises FetcherError: On HTTP errors or a response without a price.
        """
        symbol = f"{base.lower()}{quote.lower()}"
        data = await self._get_json(f"{self.BASE_URL}/pubticker/{symbol}")

        if not isinstance(data, dict) or "last" not in data:
            logger.warning(f"[gemini] No price in response for {symbol}: {data}")
            raise FetcherError(f"[gemini] no price for {symbol}")

        volume = data.get("volume")
        base_volume = volume.get(base.upper()) if isinstance(volume, dict) else None
        return self._ticker(data["last"], base_volume)
