"""Origin that pulls tickers from a centralized exchange API.

Each ``tick`` origin wraps one HTTP fetcher. Fetchers with a batch endpoint
answer every pair with a single request; the others are queried pair by pair.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..DataPoint import Point, new_tick_point
from ..fetchers import BaseFetcher, FetcherError, Ticker, get_fetcher
from ..Pair import Pair
from .base import Origin, OriginConfigError, register_origin

logger = logging.getLogger(__name__)


@register_origin
class TickOrigin(Origin):
    """Origin backed by an exchange ticker fetcher.

    :ivar fetcher: Fetcher queried for tickers.
    """

    name = "tick"

    def __init__(
        self,
        fetcher: BaseFetcher | str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the origin.

        :param fetcher: Fetcher instance or registered fetcher name.
        :param timeout: Request timeout passed to a fetcher created by name.
        :raises OriginConfigError: If the fetcher is missing or unknown.
        """
        if fetcher is None:
            raise OriginConfigError("[tick] fetcher is not set")
        if isinstance(fetcher, str):
            try:
                fetcher = get_fetcher(fetcher, timeout=timeout)
            except FetcherError as e:
                raise OriginConfigError(str(e)) from e
        self.fetcher = fetcher

    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        if not pairs:
            return {}
        source = self.fetcher.name
        by_symbols = {(pair.base, pair.quote): pair for pair in pairs}
        results = await self.fetcher.fetch_batch(list(by_symbols))

        points: dict[Pair, Point] = {}
        now = datetime.now(timezone.utc)
        for symbols, pair in by_symbols.items():
            result = results.get(symbols)
            if result is None:
                continue
            if isinstance(result, Ticker):
                points[pair] = new_tick_point(pair, result.price, result.volume, time=now, origin=source)
            else:
                logger.debug(f"[{source}] Failed to fetch {pair}: {result}")
                points[pair] = Point.from_error(result, pair, origin=source)
        return points
