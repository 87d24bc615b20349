"""Curve pool price origin.

Stableswap pools index coins with ``int128`` while cryptoswap pools use
``uint256``; the two kinds are configured separately. The longest key
configured for a pool lists all of its coins and determines how many
``coins(i)`` are read, so a pool with more than two coins is configured with
its full key next to the pair keys, e.g. ``"USDT/WBTC/WETH"`` and
``"WBTC/WETH"`` mapping to the same address.

``get_dy`` is always quoted from the lower coin index to the higher one; when
the base coin has the higher index the averaged rate is inverted.
"""

from __future__ import annotations

import logging

from ..bn import as_dec_float
from ..DataPoint import Point
from ..Pair import Pair
from .base import ContractAddresses, OriginError, register_origin
from .erc20 import ERC20Details
from .multicall import AbiMethod, Call, CallResult, MulticallClient, MulticallError, abi_table
from .onchain import OnChainOrigin

logger = logging.getLogger(__name__)

CURVE_METHODS = abi_table(
    "coins(uint256)(address)",
)
CURVE_STABLESWAP_METHODS = abi_table(
    "get_dy(int128,int128,uint256)(uint256)",
)
CURVE_CRYPTOSWAP_METHODS = abi_table(
    "get_dy(uint256,uint256,uint256)(uint256)",
)


@register_origin
class CurveOrigin(OnChainOrigin):
    """Origin for Curve stableswap and cryptoswap pools.

    :ivar contract2_addresses: Cryptoswap pools keyed by their coin symbols.
    """

    name = "curve"

    def __init__(
        self,
        client: MulticallClient | None = None,
        contract_addresses: dict[str, str] | None = None,
        contract2_addresses: dict[str, str] | None = None,
        blocks: list[int] | None = None,
    ) -> None:
        super().__init__(client, contract_addresses, blocks)
        self.contract2_addresses = ContractAddresses(contract2_addresses)

    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        stableswap: list[Pair] = []
        cryptoswap: list[Pair] = []
        points: dict[Pair, Point] = {}
        for pair in sorted(set(pairs), key=str):
            if self.contract_addresses.by_pair(pair)[2]:
                stableswap.append(pair)
            elif self.contract2_addresses.by_pair(pair)[2]:
                cryptoswap.append(pair)
            else:
                points[pair] = self._error(pair, f"failed to get contract address for pair: {pair}")

        points.update(
            await self._fetch(stableswap, self.contract_addresses, CURVE_STABLESWAP_METHODS["get_dy"])
        )
        points.update(
            await self._fetch(cryptoswap, self.contract2_addresses, CURVE_CRYPTOSWAP_METHODS["get_dy"])
        )
        return points

    async def _pool_coins(self, pools: dict[str, int]) -> dict[str, list[str]]:
        """Read ``coins(i)`` of every pool at the latest block.

        :param pools: Mapping of pool address to number of coins.
        :raises MulticallError: If the batch fails.
        :raises OriginError: If a coin cannot be read.
        """
        calls = []
        for address, count in pools.items():
            calls.extend(Call.of(address, CURVE_METHODS["coins"], i) for i in range(count))
        results = iter(await self.client.aggregate(calls))

        coins: dict[str, list[str]] = {}
        for address, count in pools.items():
            coins[address] = [next(results).decode(CURVE_METHODS["coins"])[0] for _ in range(count)]
        return coins

    async def _fetch(
        self, pairs: list[Pair], addresses: ContractAddresses, get_dy: AbiMethod
    ) -> dict[Pair, Point]:
        if not pairs:
            return {}
        resolved, points = self._resolve(pairs, addresses)
        pools = {address: _coin_count(addresses, address) for address, _ in resolved.values()}
        try:
            coins = await self._pool_coins(pools)
        except OriginError as e:
            if isinstance(e, MulticallError):
                logger.warning(f"[{self.name}] Failed to get tokens in pools: {e}")
            points.update({pair: self._error(pair, e) for pair in resolved})
            return points

        token_out: dict[Pair, ERC20Details] = {}
        calls: dict[Pair, Call] = {}
        inverted: set[Pair] = set()
        for pair, (address, _) in resolved.items():
            pool_coins = [coin.lower() for coin in coins[address]]
            if not pool_coins:
                points[pair] = self._error(pair, "no tokens in pool")
                continue
            try:
                base, quote = await self._token_details(pool_coins, pair)
            except OriginError as e:
                points[pair] = self._error(pair, e)
                continue
            base_index = pool_coins.index(base.address)
            quote_index = pool_coins.index(quote.address)
            if base_index < quote_index:
                calls[pair] = Call.of(address, get_dy, base_index, quote_index, 10**base.decimals)
                token_out[pair] = quote
            else:
                calls[pair] = Call.of(address, get_dy, quote_index, base_index, 10**quote.decimals)
                token_out[pair] = base
                inverted.add(pair)

        def convert(pair: Pair, result: CallResult):
            (dy,) = result.decode(get_dy)
            return as_dec_float(dy).div(10**token_out[pair].decimals)

        points.update(self._points(await self._average_calls(calls, convert), inverted))
        return points


def _coin_count(addresses: ContractAddresses, pool: str) -> int:
    """Number of coins of a pool, taken from the longest key configured for it."""
    return max(len(key.split("/")) for key, address in addresses.items() if address.lower() == pool.lower())
