"""
Price derivation oracle.

This package derives prices from raw observations:
- Pair: Trading pair representation
- DataPoint: Ticks and points carrying values, errors and provenance
- PriceAggregator: Median calculation with outlier detection
- RetryPolicy: Fixed delay retries of origin reads
- bn: Arbitrary precision decimal numbers
- amm: Balancer pool math
- fetchers: Exchange ticker fetchers
- origins: On-chain and exchange origins
- graph: Price models built from origins, and the provider evaluating them
"""

from .DataPoint import Point, StaticValue, Tick, new_tick_point
from .Pair import Pair
from .PriceAggregator import AggregationResult, PriceAggregator
from .Retry import RetryPolicy

__all__ = [
    "AggregationResult",
    "Pair",
    "Point",
    "PriceAggregator",
    "RetryPolicy",
    "StaticValue",
    "Tick",
    "new_tick_point",
]
