"""Lido wstETH exchange rate origin.

``stEthPerToken()`` gives the stETH value of one wstETH; the inverse is read
with ``getWstETHByStETH(1e18)``.
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

WSTETH_METHODS = abi_table(
    "stEthPerToken()(uint256)",
    "getWstETHByStETH(uint256)(uint256)",
)


@register_origin
class WstETHOrigin(OnChainOrigin):
    """Origin for WSTETH/STETH and STETH/WSTETH."""

    name = "wsteth"

    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        resolved, points = self._resolve(pairs)

        calls: dict[Pair, Call] = {}
        for pair, (address, inverted) in resolved.items():
            if inverted:
                calls[pair] = Call.of(address, WSTETH_METHODS["getWstETHByStETH"], ETHER)
            else:
                calls[pair] = Call.of(address, WSTETH_METHODS["stEthPerToken"])

        def convert(pair: Pair, result: CallResult):
            method = "getWstETHByStETH" if resolved[pair][1] else "stEthPerToken"
            (rate,) = result.decode(WSTETH_METHODS[method])
            return as_dec_float(rate).div(ETHER)

        points.update(self._points(await self._average_calls(calls, convert)))
        return points
