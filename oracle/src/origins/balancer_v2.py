"""Balancer V2 price origin.

Three kinds of pools are supported:

- Oracle pools (``contract_addresses``) expose a time weighted price through
  ``getLatest(PAIR_PRICE)``. Only the configured direction can be read.
- Weighted pools (``weighted_pools``) and composable stable pools
  (``composable_pools``) are priced by simulating a swap of one whole base
  token against the pool state read from chain.

Pool state is read at every sampled block and the resulting prices averaged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from ..amm import ComposableStablePool, TokenRateCache, WeightedPool
from ..amm.composable import ZERO_ADDRESS
from ..bn import DecFloatPointNumber, as_dec_float
from ..DataPoint import Point, new_tick_point
from ..Pair import Pair
from .base import ContractAddresses, OriginError, average, register_origin
from .multicall import Call, MulticallClient, MulticallError, abi_table
from .onchain import ETHER, OnChainOrigin

logger = logging.getLogger(__name__)

# Variable index of the pair price in getLatest
PAIR_PRICE = 0

BALANCER_ORACLE_METHODS = abi_table(
    "getLatest(uint8)(uint256)",
)
BALANCER_POOL_METHODS = abi_table(
    "getPoolId()(bytes32)",
    "getVault()(address)",
    "getPoolTokens(bytes32)(address[],uint256[],uint256)",
    "getSwapFeePercentage()(uint256)",
    "getScalingFactors()(uint256[])",
)
BALANCER_WEIGHTED_METHODS = abi_table(
    "getNormalizedWeights()(uint256[])",
)
BALANCER_COMPOSABLE_METHODS = abi_table(
    "getBptIndex()(uint256)",
    "getRateProviders()(address[])",
    "getAmplificationParameter()(uint256,bool,uint256)",
    "getLastJoinExitData()(uint256,uint256)",
    "totalSupply()(uint256)",
    "getProtocolFeePercentageCache(uint256)(uint256)",
    "isTokenExemptFromYieldProtocolFee(address)(bool)",
    "getTokenRateCache(address)(uint256,uint256,uint256,uint256)",
)

# Fee type ids of getProtocolFeePercentageCache
FEE_TYPE_SWAP = 0
FEE_TYPE_YIELD = 2

Pool = WeightedPool | ComposableStablePool


@register_origin
class BalancerV2Origin(OnChainOrigin):
    """Origin for Balancer V2 oracle, weighted and composable stable pools.

    :ivar weighted_pools: Weighted pools keyed by ``"BASE/QUOTE"``.
    :ivar composable_pools: Composable stable pools keyed by ``"BASE/QUOTE"``.
    """

    name = "balancerV2"

    def __init__(
        self,
        client: MulticallClient | None = None,
        contract_addresses: dict[str, str] | None = None,
        weighted_pools: dict[str, str] | None = None,
        composable_pools: dict[str, str] | None = None,
        blocks: list[int] | None = None,
    ) -> None:
        super().__init__(client, contract_addresses, blocks)
        self.weighted_pools = ContractAddresses(weighted_pools)
        self.composable_pools = ContractAddresses(composable_pools)

    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        points: dict[Pair, Point] = {}
        oracle_pairs: list[Pair] = []
        simulated: dict[Pair, tuple[str, Callable[[str, int], Awaitable[Pool]]]] = {}
        for pair in sorted(set(pairs), key=str):
            address, _, found = self.weighted_pools.by_pair(pair)
            if found:
                simulated[pair] = (address, self._read_weighted_pool)
                continue
            address, _, found = self.composable_pools.by_pair(pair)
            if found:
                simulated[pair] = (address, self._read_composable_pool)
                continue
            oracle_pairs.append(pair)

        if oracle_pairs:
            points.update(await self._fetch_oracle_prices(oracle_pairs))
        if simulated:
            try:
                latest = await self.client.block_number()
            except MulticallError as e:
                logger.warning(f"[{self.name}] Cannot get block number: {e}")
                points.update({pair: self._error(pair, e) for pair in simulated})
                return points
            results = await asyncio.gather(
                *(self._fetch_pool_price(pair, address, read, latest) for pair, (address, read) in simulated.items())
            )
            points.update(zip(simulated, results))
        return points

    async def _fetch_oracle_prices(self, pairs: list[Pair]) -> dict[Pair, Point]:
        resolved, points = self._resolve(pairs)

        calls: dict[Pair, Call] = {}
        for pair, (address, inverted) in resolved.items():
            if inverted:
                points[pair] = self._error(pair, f"cannot use inverted pair to retrieve price: {pair}")
                continue
            calls[pair] = Call.of(address, BALANCER_ORACLE_METHODS["getLatest"], PAIR_PRICE)

        def convert(pair, result):
            (price,) = result.decode(BALANCER_ORACLE_METHODS["getLatest"])
            return as_dec_float(price).div(ETHER)

        points.update(self._points(await self._average_calls(calls, convert)))
        return points

    async def _fetch_pool_price(
        self,
        pair: Pair,
        address: str,
        read: Callable[[str, int], Awaitable[Pool]],
        latest: int,
    ) -> Point:
        """Average the simulated swap price over the sampled blocks."""
        try:
            prices = []
            for offset in self.blocks:
                pool = await read(address, latest - offset)
                prices.append(await self._swap_price(pair, pool))
            price = average(prices)
        except (OriginError, ArithmeticError, ValueError) as e:
            logger.warning(f"[{self.name}] Failed to price {pair} from pool {address}: {e}")
            return self._error(pair, e)
        return new_tick_point(pair, price, origin=self.name)

    async def _swap_price(self, pair: Pair, pool: Pool) -> DecFloatPointNumber:
        """Price of one whole base token in quote tokens.

        :raises OriginError: If the pair's tokens are not in the pool.
        :raises BalancerMathError: If the pool math fails.
        """
        base, quote = await self._token_details(pool.tokens, pair)
        amount_out, _ = pool.calc_amount_out(base.address, quote.address, 10**base.decimals)
        return as_dec_float(amount_out).div(10**quote.decimals)

    async def _read_pool_tokens(self, address: str, block: int) -> tuple[list[str], list[int]]:
        """Read the registered tokens and balances of a pool from its vault."""
        methods = BALANCER_POOL_METHODS
        id_result, vault_result = await self.client.aggregate(
            [Call.of(address, methods["getPoolId"]), Call.of(address, methods["getVault"])], block
        )
        (pool_id,) = id_result.decode(methods["getPoolId"])
        (vault,) = vault_result.decode(methods["getVault"])

        (tokens_result,) = await self.client.aggregate([Call.of(vault, methods["getPoolTokens"], pool_id)], block)
        tokens, balances, _ = tokens_result.decode(methods["getPoolTokens"])
        if not tokens:
            raise OriginError(f"no tokens in pool {address}")
        return [token.lower() for token in tokens], list(balances)

    async def _read_weighted_pool(self, address: str, block: int) -> WeightedPool:
        tokens, balances = await self._read_pool_tokens(address, block)
        methods = BALANCER_POOL_METHODS
        fee, scaling, weights = await self.client.aggregate(
            [
                Call.of(address, methods["getSwapFeePercentage"]),
                Call.of(address, methods["getScalingFactors"]),
                Call.of(address, BALANCER_WEIGHTED_METHODS["getNormalizedWeights"]),
            ],
            block,
        )
        return WeightedPool(
            tokens=tokens,
            balances=balances,
            swap_fee_percentage=fee.decode(methods["getSwapFeePercentage"])[0],
            scaling_factors=list(scaling.decode(methods["getScalingFactors"])[0]),
            normalized_weights=list(weights.decode(BALANCER_WEIGHTED_METHODS["getNormalizedWeights"])[0]),
        )

    async def _read_composable_pool(self, address: str, block: int) -> ComposableStablePool:
        tokens, balances = await self._read_pool_tokens(address, block)
        pool_methods = BALANCER_POOL_METHODS
        methods = BALANCER_COMPOSABLE_METHODS

        calls = [
            Call.of(address, methods["getBptIndex"]),
            Call.of(address, methods["getRateProviders"]),
            Call.of(address, pool_methods["getSwapFeePercentage"]),
            Call.of(address, methods["getAmplificationParameter"]),
            Call.of(address, pool_methods["getScalingFactors"]),
            Call.of(address, methods["getLastJoinExitData"]),
            Call.of(address, methods["totalSupply"]),
            Call.of(address, methods["getProtocolFeePercentageCache"], FEE_TYPE_SWAP),
            Call.of(address, methods["getProtocolFeePercentageCache"], FEE_TYPE_YIELD),
        ]
        calls.extend(Call.of(address, methods["isTokenExemptFromYieldProtocolFee"], token) for token in tokens)
        results = await self.client.aggregate(calls, block)

        (bpt_index,) = results[0].decode(methods["getBptIndex"])
        (rate_providers,) = results[1].decode(methods["getRateProviders"])
        (swap_fee,) = results[2].decode(pool_methods["getSwapFeePercentage"])
        amp, amp_updating, amp_precision = results[3].decode(methods["getAmplificationParameter"])
        (scaling_factors,) = results[4].decode(pool_methods["getScalingFactors"])
        last_amp, last_invariant = results[5].decode(methods["getLastJoinExitData"])
        (total_supply,) = results[6].decode(methods["totalSupply"])
        (fee_cache_swap,) = results[7].decode(methods["getProtocolFeePercentageCache"])
        (fee_cache_yield,) = results[8].decode(methods["getProtocolFeePercentageCache"])
        exempt = [r.decode(methods["isTokenExemptFromYieldProtocolFee"])[0] for r in results[9:]]

        if len(rate_providers) != len(tokens):
            raise OriginError(f"not found proper rate providers in the pool: {address}")

        rate_caches = [TokenRateCache() for _ in tokens]
        rated = [
            i
            for i, token in enumerate(tokens)
            if token != address.lower() and rate_providers[i].lower() != ZERO_ADDRESS
        ]
        if rated:
            cache_results = await self.client.aggregate(
                [Call.of(address, methods["getTokenRateCache"], tokens[i]) for i in rated], block
            )
            for i, result in zip(rated, cache_results):
                rate, old_rate, duration, expires = result.decode(methods["getTokenRateCache"])
                rate_caches[i] = TokenRateCache(rate, old_rate, duration, expires)

        return ComposableStablePool(
            address=address,
            tokens=tokens,
            balances=balances,
            bpt_index=bpt_index,
            rate_providers=list(rate_providers),
            total_supply=total_supply,
            swap_fee_percentage=swap_fee,
            amplification_parameter=amp,
            amplification_precision=amp_precision,
            amplification_is_updating=amp_updating,
            scaling_factors=list(scaling_factors),
            last_join_exit_amplification=last_amp,
            last_post_join_exit_invariant=last_invariant,
            tokens_exempt_from_yield_protocol_fee=exempt,
            token_rate_caches=rate_caches,
            protocol_fee_percentage_cache_swap=fee_cache_swap,
            protocol_fee_percentage_cache_yield=fee_cache_yield,
        )
