"""Kraken fetcher.

Endpoint: https://api.kraken.com/0/public/Ticker?pair={BASE}{QUOTE}
Rate Limit: High (no key required)
"""

from __future__ import annotations

import logging
from typing import Any

from .base import BaseFetcher, FetcherError, Ticker, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class KrakenFetcher(BaseFetcher):
    """Fetcher for Kraken public API.

    No API key required. The /Ticker endpoint accepts comma-separated pairs,
    so several pairs are fetched with one request.
    """

    name = "kraken"
    BASE_URL = "https://api.kraken.com/0/public"

    # Kraken uses non-standard ticker symbols
    SYMBOL_MAP = {
        "btc": "XBT",  # Kraken uses XBT instead of BTC
    }

    def _symbol(self, base: str, quote: str) -> str:
        kraken_base = self.SYMBOL_MAP.get(base.lower(), base.upper())
        kraken_quote = self.SYMBOL_MAP.get(quote.lower(), quote.upper())
        return f"{kraken_base}{kraken_quote}"

    async def _fetch_result(self, symbols: list[str]) -> dict[str, Any]:
        """Query /Ticker and return the ``result`` object.

        :raises FetcherError: On HTTP errors or when Kraken reports an error.
        """
        data = await self._get_json(f"{self.BASE_URL}/Ticker", params={"pair": ",".join(symbols)})
        if not isinstance(data, dict):
            raise FetcherError(f"[kraken] unexpected response: {data}")
        if data.get("error"):
            raise FetcherError(f"[kraken] API error: {data['error']}")
        result = data.get("result")
        if not result:
            raise FetcherError(f"[kraken] no result for {','.join(symbols)}")
        return result

    def _parse(self, pair_data: Any) -> Ticker:
        # 'c' is the last trade closed array: [price, lot volume]
        # 'v' is the volume array: [today, last 24 hours]
        try:
            price = pair_data["c"][0]
            volume = pair_data["v"][1] if "v" in pair_data else None
        except (KeyError, IndexError, TypeError) as e:
            raise FetcherError(f"[kraken] failed to parse ticker: {e}") from e
        return self._ticker(price, volume)

    async def fetch(self, base: str, quote: str) -> Ticker:
        """Fetch the ticker from Kraken.

        :param base: Base currency (e.g., "BTC", "ETH").
        :param quote: Quote currency (e.g., "USD").
        :returns: Last price and 24h volume.
        :raises FetcherError: On HTTP or API errors.
        """
        symbol = self._symbol(base, quote)
        result = await self._fetch_result([symbol])
        # Kraken returns results with pair names as keys (may vary slightly)
        return self._parse(next(iter(result.values())))

    @property
    def supports_batch(self) -> bool:
        """Kraken supports batch fetching multiple pairs."""
        return True

    async def fetch_batch(
        self, pairs: list[tuple[str, str]]
    ) -> dict[tuple[str, str], Ticker | FetcherError]:
        """Fetch tickers for multiple pairs in a single API call.

        :param pairs: List of (base, quote) tuples to fetch.
        :returns: Dict mapping (base, quote) to a Ticker or an error.
        """
        results: dict[tuple[str, str], Ticker | FetcherError] = {}
        if not pairs:
            return results

        pair_to_kraken = {(base, quote): self._symbol(base, quote) for base, quote in pairs}
        try:
            result_data = await self._fetch_result(list(pair_to_kraken.values()))
        except FetcherError as e:
            logger.warning(f"[kraken] Batch fetch failed: {e}")
            return {pair: e for pair in pairs}

        for pair, kraken_pair in pair_to_kraken.items():
            pair_data = result_data.get(kraken_pair)

            # Kraken sometimes prefixes assets with X or Z (XXBTZUSD)
            if pair_data is None:
                for key, value in result_data.items():
                    normalized = key.replace("X", "").replace("Z", "")
                    if normalized == kraken_pair.replace("X", "").replace("Z", ""):
                        pair_data = value
                        break

            if pair_data is None:
                results[pair] = FetcherError(f"[kraken] no result for {kraken_pair}")
                continue
            try:
                results[pair] = self._parse(pair_data)
            except FetcherError as e:
                results[pair] = e
        return results
