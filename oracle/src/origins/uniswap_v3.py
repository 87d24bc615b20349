"""Uniswap V3 pool price origin.

The pool price is derived from ``slot0().sqrtPriceX96``, the square root of
the token1/token0 raw amount ratio in Q64.96 fixed point.
"""

from __future__ import annotations

import logging

from ..bn import as_dec_float
from ..DataPoint import Point
from ..Pair import Pair
from .base import OriginError, register_origin
from .erc20 import ERC20Details
from .multicall import Call, CallResult, MulticallError, abi_table
from .onchain import OnChainOrigin

logger = logging.getLogger(__name__)

UNISWAP_V3_METHODS = abi_table(
    "slot0()(uint160,int24,uint16,uint16,uint16,uint8,bool)",
    "token0()(address)",
    "token1()(address)",
)

Q192 = 2**192


def quote_amount(sqrt_price_x96: int, base_is_token0: bool, base_decimals: int) -> int:
    """Raw quote amount for one whole base token.

    :param sqrt_price_x96: ``sqrtPriceX96`` from ``slot0()``.
    :param base_is_token0: Whether the base token is the pool's token0.
    :param base_decimals: Decimals of the base token.
    """
    ratio_x192 = sqrt_price_x96 * sqrt_price_x96
    base_amount = 10**base_decimals
    if base_is_token0:
        return ratio_x192 * base_amount // Q192
    return Q192 * base_amount // ratio_x192


@register_origin
class UniswapV3Origin(OnChainOrigin):
    """Origin for Uniswap V3 pools keyed by ``"BASE/QUOTE"``.

    The key order does not matter; the pool's token order decides the direction.
    """

    name = "uniswapV3"

    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        resolved, points = self._resolve(pairs)
        if not resolved:
            return points

        token_calls = []
        for address, _ in resolved.values():
            token_calls.append(Call.of(address, UNISWAP_V3_METHODS["token0"]))
            token_calls.append(Call.of(address, UNISWAP_V3_METHODS["token1"]))
        try:
            token_results = await self.client.aggregate(token_calls)
        except MulticallError as e:
            logger.warning(f"[{self.name}] Failed to get tokens of pools: {e}")
            points.update({pair: self._error(pair, e) for pair in resolved})
            return points

        tokens: dict[Pair, tuple[ERC20Details, ERC20Details, bool]] = {}
        calls: dict[Pair, Call] = {}
        for i, (pair, (address, _)) in enumerate(resolved.items()):
            try:
                (token0,) = token_results[2 * i].decode(UNISWAP_V3_METHODS["token0"])
                (token1,) = token_results[2 * i + 1].decode(UNISWAP_V3_METHODS["token1"])
                base, quote = await self._token_details([token0, token1], pair)
            except OriginError as e:
                logger.debug(f"[{self.name}] Failed to resolve tokens of {pair}: {e}")
                points[pair] = self._error(pair, e)
                continue
            tokens[pair] = (base, quote, base.address == token0.lower())
            calls[pair] = Call.of(address, UNISWAP_V3_METHODS["slot0"])

        def convert(pair: Pair, result: CallResult):
            base, quote, base_is_token0 = tokens[pair]
            sqrt_price_x96 = result.decode(UNISWAP_V3_METHODS["slot0"])[0]
            amount = quote_amount(sqrt_price_x96, base_is_token0, base.decimals)
            return as_dec_float(amount).div(10**quote.decimals)

        points.update(self._points(await self._average_calls(calls, convert)))
        return points
