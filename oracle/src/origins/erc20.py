"""ERC-20 token metadata cache.

Pools identify tokens by address while pairs use symbols, so origins resolve
``symbol()`` and ``decimals()`` once per token and keep the result for the life
of the process. Some early tokens return ``bytes32`` instead of ``string``
from ``symbol()``; both encodings are accepted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from .base import OriginError
from .multicall import Call, MulticallClient, abi_table

logger = logging.getLogger(__name__)

ERC20_METHODS = abi_table(
    "symbol()(string)",
    "decimals()(uint8)",
)


@dataclass(frozen=True)
class ERC20Details:
    """Symbol and decimals of a token."""

    address: str
    symbol: str
    decimals: int


def decode_symbol(data: bytes) -> str:
    """Decode the return data of ``symbol()`` as string or bytes32.

    :raises OriginError: If the data is neither.
    """
    if len(data) == 32:
        return data.rstrip(b"\x00").decode("utf-8", errors="replace")
    try:
        (symbol,) = decode(["string"], data)
    except DecodingError as e:
        raise OriginError(f"failed to decode token symbol: {e}") from e
    return symbol


class ERC20:
    """Append-only cache of token details keyed by address and by symbol.

    :ivar client: Multicall client used to read token metadata.
    """

    def __init__(self, client: MulticallClient) -> None:
        self.client = client
        self._by_address: dict[str, ERC20Details] = {}
        self._lock = asyncio.Lock()

    async def get_details(self, addresses: list[str]) -> dict[str, ERC20Details]:
        """Resolve details for the given tokens, reading unknown ones from chain.

        :param addresses: Token addresses.
        :returns: Mapping of lowercase address to details.
        :raises OriginError: If a token does not answer ``symbol()`` or ``decimals()``.
        """
        async with self._lock:
            missing = sorted({a.lower() for a in addresses if a.lower() not in self._by_address})
            if missing:
                calls = []
                for address in missing:
                    calls.append(Call.of(address, ERC20_METHODS["symbol"]))
                    calls.append(Call.of(address, ERC20_METHODS["decimals"]))
                results = await self.client.aggregate(calls)

                for i, address in enumerate(missing):
                    symbol_result, decimals_result = results[2 * i], results[2 * i + 1]
                    if not symbol_result.success:
                        raise OriginError(f"failed to get symbol of token {address}")
                    (decimals,) = decimals_result.decode(ERC20_METHODS["decimals"])
                    details = ERC20Details(address, decode_symbol(symbol_result.data), decimals)
                    self._by_address[address] = details
                    logger.debug(f"[erc20] {address} is {details.symbol} with {decimals} decimals")

            return {a.lower(): self._by_address[a.lower()] for a in addresses}
