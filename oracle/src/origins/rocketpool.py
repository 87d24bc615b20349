"""Rocket Pool rETH exchange rate origin.

The rETH contract reports the ETH value of one rETH through
``getExchangeRate()``. The inverse rate is read with ``getRethValue(1e18)``
rather than by inverting, so both directions carry the contract's rounding.
"""

from __future__ import annotations

import logging

from ..bn import as_dec_float
from ..DataPoint import Point
from ..Pair import Pair
from .base import register_origin
from .multicall import Call, CallResult, abi_table
from .onchain import ETHER, OnChainOrigin

logger = logging.getLogger(__name__)

ROCKETPOOL_METHODS = abi_table(
    "getExchangeRate()(uint256)",
    "getRethValue(uint256)(uint256)",
)


@register_origin
class RocketPoolOrigin(OnChainOrigin):
    """Origin for RETH/ETH and ETH/RETH."""

    name = "rocketpool"

    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        resolved, points = self._resolve(pairs)

        calls: dict[Pair, Call] = {}
        for pair, (address, inverted) in resolved.items():
            if inverted:
                calls[pair] = Call.of(address, ROCKETPOOL_METHODS["getRethValue"], ETHER)
            else:
                calls[pair] = Call.of(address, ROCKETPOOL_METHODS["getExchangeRate"])

        def convert(pair: Pair, result: CallResult):
            method = "getRethValue" if resolved[pair][1] else "getExchangeRate"
            (rate,) = result.decode(ROCKETPOOL_METHODS[method])
            return as_dec_float(rate).div(ETHER)

        points.update(self._points(await self._average_calls(calls, convert)))
        return points
