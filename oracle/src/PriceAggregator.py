"""PriceAggregator: Median aggregation with optional outlier exclusion.

Algorithm:
    1. Filter out missing and non-positive prices
    2. Calculate initial median across all valid sources
    3. Optionally exclude outliers (prices deviating > max_deviation_percent from initial median)
    4. Recalculate median from the remaining set
    5. Fail if fewer than min_sources remain

Prices are decimal numbers, so medians of an even count are exact.

.. code-block:: python

    >>> aggregator = PriceAggregator(min_sources=2, max_deviation_percent=5.0)
    >>> prices = {"coinbase": as_dec_float(100), "kraken": as_dec_float("100.5"), "rogue": as_dec_float(200)}
    >>> result = aggregator.aggregate(prices)
    >>> result.success
    True
    >>> str(result.price)
    '100.25'
    >>> list(result.metadata["dropped"])
    ['rogue']
"""

from __future__ import annotations

from dataclasses import dataclass
from statistics import median as _median
from typing import TypedDict

from .bn import DecFloatPointNumber


class AggregationError(TypedDict, total=False):
    """Error information when aggregation fails.

    :ivar error: Error type identifier.
    :ivar available: Number of valid sources available.
    :ivar dropped: Dict of sources dropped as outliers.
    """

    error: str
    available: int
    dropped: dict[str, DecFloatPointNumber]


class AggregationMetadata(TypedDict, total=False):
    """Metadata about a successful aggregation.

    :ivar sources: List of sources used in final calculation.
    :ivar dropped: Dict of sources dropped as outliers.
    :ivar count: Number of sources used.
    :ivar initial_median: Median before outlier filtering.
    """

    sources: list[str]
    dropped: dict[str, DecFloatPointNumber]
    count: int
    initial_median: DecFloatPointNumber


@dataclass
class AggregationResult:
    """Result of price aggregation.

    :ivar price: Aggregated price, or None if aggregation failed.
    :ivar metadata: Additional information about the aggregation.
    """

    price: DecFloatPointNumber | None
    metadata: AggregationMetadata | AggregationError

    @property
    def success(self) -> bool:
        """Check if aggregation was successful."""
        return self.price is not None

    @property
    def error(self) -> str | None:
        """Get error type if aggregation failed."""
        if self.price is None:
            return self.metadata.get("error")
        return None


class PriceAggregator:
    """Aggregates prices from multiple sources.

    :ivar min_sources: Minimum sources required for valid aggregation.
    :ivar max_deviation_percent: Max allowed deviation from the initial median,
        None keeps every valid source.

    .. code-block:: python

        >>> agg = PriceAggregator(min_sources=2)
        >>> result = agg.aggregate({"a": as_dec_float(100), "b": as_dec_float(101), "c": as_dec_float(99)})
        >>> str(result.price)
        '100'
    """

    def __init__(
        self,
        min_sources: int = 1,
        max_deviation_percent: float | None = None,
    ) -> None:
        """Initialize the aggregator.

        :param min_sources: Minimum number of valid sources required for aggregation.
        :param max_deviation_percent: Maximum allowed deviation from median before
            a source is considered an outlier. None disables the check.
        :raises ValueError: If parameters are invalid.
        """
        if min_sources < 1:
            raise ValueError("min_sources must be at least 1")
        if max_deviation_percent is not None and max_deviation_percent <= 0:
            raise ValueError("max_deviation_percent must be positive if specified")

        self.min_sources = min_sources
        self.max_deviation_percent = max_deviation_percent

    def aggregate(self, prices: dict[str, DecFloatPointNumber | None]) -> AggregationResult:
        """Aggregate prices from multiple sources into a single median price.

        :param prices: Dict mapping source name to price (or None if fetch failed).
        :returns: AggregationResult with price and metadata, or None price with error info.
        """
        valid: dict[str, DecFloatPointNumber] = {
            k: v for k, v in prices.items() if v is not None and v.sign() > 0
        }

        if len(valid) < self.min_sources or not valid:
            return AggregationResult(
                price=None,
                metadata={
                    "error": "insufficient_sources",
                    "available": len(valid),
                },
            )

        initial_median = _median(valid.values())

        filtered: dict[str, DecFloatPointNumber] = {}
        dropped: dict[str, DecFloatPointNumber] = {}

        for source, price in valid.items():
            if self.max_deviation_percent is None:
                filtered[source] = price
                continue
            deviation = (price - initial_median).abs() / initial_median * 100
            if deviation <= self.max_deviation_percent:
                filtered[source] = price
            else:
                dropped[source] = price

        if len(filtered) < self.min_sources:
            return AggregationResult(
                price=None,
                metadata={
                    "error": "too_many_outliers",
                    "available": len(filtered),
                    "dropped": dropped,
                },
            )

        return AggregationResult(
            price=_median(filtered.values()),
            metadata={
                "sources": list(filtered.keys()),
                "dropped": dropped,
                "count": len(filtered),
                "initial_median": initial_median,
            },
        )
