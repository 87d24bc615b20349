"""Binance fetcher.

Binance quotes most assets against USDT; pairs are requested exactly as
configured, so a model that wants USD must convert through a USDT/USD node.

Endpoint: https://api.binance.com/api/v3/ticker/24hr
Rate Limit: High (no key required for public endpoints)
"""

import json
import logging

from .base import BaseFetcher, FetcherError, Ticker, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class BinanceFetcher(BaseFetcher):
    """Fetcher for the Binance 24h rolling ticker.

    Several symbols can be queried in a single request.
    """

    name = "binance"
    BASE_URL = "https://api.binance.com/api/v3"

    async def fetch(self, base: str, quote: str) -> Ticker:
        """Fetch the ticker from Binance.

        :param base: Base currency (e.g., "ETH").
        :param quote: Quote currency (e.g., "USDT").
        :returns: Last price and 24h volume.
        :raises FetcherError: On HTTP errors or a response without a price.
        """
        symbol = f"{base.upper()}{quote.upper()}"
        data = await self._get_json(f"{self.BASE_URL}/ticker/24hr", params={"symbol": symbol})

        if not isinstance(data, dict) or "lastPrice" not in data:
            logger.warning(f"[binance] No price for {symbol}: {data}")
            raise FetcherError(f"[binance] no price for {symbol}")

        return self._ticker(data["lastPrice"], data.get("volume"))

    @property
    def supports_batch(self) -> bool:
        """Binance supports batch fetching multiple symbols in one request."""
        return True

    async def fetch_batch(
        self, pairs: list[tuple[str, str]]
    ) -> dict[tuple[str, str], Ticker | FetcherError]:
        """Fetch tickers for multiple pairs in a single API call.

        An unknown symbol makes Binance reject the whole request, in which
        case every pair gets the same error.

        :param pairs: List of (base, quote) tuples to fetch.
        :returns: Dict mapping (base, quote) to a Ticker or an error.
        """
        results: dict[tuple[str, str], Ticker | FetcherError] = {}
        if not pairs:
            return results

        symbols = {f"{base.upper()}{quote.upper()}": (base, quote) for base, quote in pairs}
        try:
            data = await self._get_json(
                f"{self.BASE_URL}/ticker/24hr",
                params={"symbols": json.dumps(list(symbols), separators=(",", ":"))},
            )
        except FetcherError as e:
            logger.warning(f"[binance] Batch fetch failed: {e}")
            return {pair: e for pair in pairs}

        if not isinstance(data, list):
            error = FetcherError(f"[binance] unexpected batch response: {data}")
            return {pair: error for pair in pairs}

        for item in data:
            pair = symbols.get(item.get("symbol", "")) if isinstance(item, dict) else None
            if pair is None or "lastPrice" not in item:
                continue
            try:
                results[pair] = self._ticker(item["lastPrice"], item.get("volume"))
            except FetcherError as e:
                results[pair] = e

        for symbol, pair in symbols.items():
            if pair not in results:
                results[pair] = FetcherError(f"[binance] no price for {symbol}")
        return results
