"""Common machinery of origins that read prices from Ethereum contracts.

On-chain origins sample each price at several historical blocks, counted
back from the latest block, and report the average.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..bn import DecFloatPointNumber
from ..DataPoint import Point, new_tick_point
from ..Pair import Pair
from .base import ContractAddresses, Origin, OriginConfigError, OriginError, average
from .erc20 import ERC20, ERC20Details
from .multicall import Call, CallResult, MulticallClient, MulticallError

logger = logging.getLogger(__name__)

DEFAULT_BLOCKS = (0, 10, 20)

ETHER = 10**18

PriceResult = DecFloatPointNumber | Exception


class OnChainOrigin(Origin):
    """Base class for origins backed by a MulticallClient.

    :ivar client: Multicall client.
    :ivar contract_addresses: Contracts keyed by ``"BASE/QUOTE"``.
    :ivar blocks: Block offsets to sample, relative to the latest block.
    :ivar erc20: Token metadata cache.
    """

    def __init__(
        self,
        client: MulticallClient | None = None,
        contract_addresses: dict[str, str] | None = None,
        blocks: list[int] | None = None,
    ) -> None:
        """Initialize the origin.

        :param client: Multicall client, required.
        :param contract_addresses: Mapping of ``"BASE/QUOTE"`` to contract address.
        :param blocks: Block offsets, defaults to ``[0, 10, 20]``.
        :raises OriginConfigError: If the client is missing or the blocks are invalid.
        """
        if client is None:
            raise OriginConfigError(f"[{self.name}] ethereum client is not set")
        self.blocks = list(DEFAULT_BLOCKS if blocks is None else blocks)
        if not self.blocks or any(not isinstance(b, int) or b < 0 for b in self.blocks):
            raise OriginConfigError(
                f"[{self.name}] blocks must be a non-empty list of non-negative integers, got {blocks}"
            )
        self.client = client
        self.contract_addresses = ContractAddresses(contract_addresses)
        self.erc20 = ERC20(client)

    def _error(self, pair: Pair, error: BaseException | str) -> Point:
        return Point.from_error(error, pair, origin=self.name)

    def _resolve(
        self, pairs: list[Pair], addresses: ContractAddresses | None = None
    ) -> tuple[dict[Pair, tuple[str, bool]], dict[Pair, Point]]:
        """Look up the contract of every pair.

        :returns: Tuple of (pair to (address, inverted), error points for unknown pairs).
        """
        addresses = self.contract_addresses if addresses is None else addresses
        resolved: dict[Pair, tuple[str, bool]] = {}
        failed: dict[Pair, Point] = {}
        for pair in sorted(set(pairs), key=str):
            try:
                resolved[pair] = addresses.address_by_pair(pair)
            except OriginError as e:
                logger.debug(f"[{self.name}] {e}")
                failed[pair] = self._error(pair, e)
        return resolved, failed

    async def _average_calls(
        self,
        calls: dict[Pair, Call],
        convert: Callable[[Pair, CallResult], DecFloatPointNumber],
    ) -> dict[Pair, PriceResult]:
        """Run one call per pair at every sampled block and average the prices.

        A failed batch fails every pair; a call that reverts or cannot be
        converted fails its own pair only.

        :param calls: Call to make for each pair.
        :param convert: Turns a call result into a price.
        :returns: Mapping of pair to average price or the error it failed with.
        """
        if not calls:
            return {}
        try:
            latest = await self.client.block_number()
            batches = []
            for offset in self.blocks:
                batches.append(await self.client.aggregate(list(calls.values()), latest - offset))
        except MulticallError as e:
            logger.warning(f"[{self.name}] Batch of {len(calls)} pairs failed: {e}")
            return {pair: e for pair in calls}

        results: dict[Pair, PriceResult] = {}
        for i, pair in enumerate(calls):
            try:
                results[pair] = average(convert(pair, batch[i]) for batch in batches)
            except (OriginError, ArithmeticError, ValueError) as e:
                logger.debug(f"[{self.name}] Failed to get price of {pair}: {e}")
                results[pair] = e
        return results

    def _points(
        self, results: dict[Pair, PriceResult], inverted: set[Pair] | None = None
    ) -> dict[Pair, Point]:
        """Turn averaged prices into tick points, inverting the requested pairs."""
        points: dict[Pair, Point] = {}
        for pair, result in results.items():
            if isinstance(result, Exception):
                points[pair] = self._error(pair, result)
                continue
            try:
                price = result.inv() if inverted and pair in inverted else result
            except ArithmeticError as e:
                points[pair] = self._error(pair, e)
                continue
            points[pair] = new_tick_point(pair, price, origin=self.name)
        return points

    async def _token_details(self, tokens: list[str], pair: Pair) -> tuple[ERC20Details, ERC20Details]:
        """Find the base and quote tokens of a pair among the given tokens.

        :raises OriginError: If either symbol is not among the tokens.
        """
        details = await self.erc20.get_details(tokens)
        by_symbol = {d.symbol.upper(): d for d in details.values()}
        if pair.base not in by_symbol:
            raise OriginError(f"not found base token: {pair.base}")
        if pair.quote not in by_symbol:
            raise OriginError(f"not found quote token: {pair.quote}")
        return by_symbol[pair.base], by_symbol[pair.quote]
