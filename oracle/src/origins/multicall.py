"""Batched contract reads through Multicall3.

Contract methods are described by immutable :class:`AbiMethod` objects parsed
from human readable signatures such as ``"getLatest(uint8)(uint256)"``. Each
origin keeps its methods in a read-only table built by :func:`abi_table`.

:class:`MulticallClient` wraps a synchronous Web3 instance; every RPC runs in
a worker thread so callers can bound it with ``asyncio.wait_for``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from eth_abi import decode, encode, grammar
from eth_abi.exceptions import DecodingError, EncodingError, ParseError
from web3 import Web3

from .base import OriginError

logger = logging.getLogger(__name__)

MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"


class MulticallError(OriginError):
    """Raised when a whole multicall batch fails."""

    pass


def _parse_types(group: str) -> tuple[str, ...]:
    """Parse a parenthesised type list into canonical ABI type strings.

    :raises ValueError: If the group is not a valid tuple of ABI types.
    """
    if group == "()":
        return ()
    try:
        abi_type = grammar.parse(grammar.normalize(group))
        abi_type.validate()
    except ParseError as e:
        raise ValueError(str(e)) from e
    if not isinstance(abi_type, grammar.TupleType) or abi_type.is_array:
        raise ValueError(f"{group!r} is not a type list")
    return tuple(component.to_type_str() for component in abi_type.components)


def _split_groups(groups: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split ``"(inputs)(outputs)"`` at the boundary where both sides parse."""
    try:
        return _parse_types(groups), ()
    except ValueError:
        pass
    start = groups.find(")(")
    while start != -1:
        try:
            return _parse_types(groups[: start + 1]), _parse_types(groups[start + 1 :])
        except ValueError:
            start = groups.find(")(", start + 1)
    raise ValueError("no valid input and output types")


@dataclass(frozen=True)
class AbiMethod:
    """A contract method with its input and output types.

    :ivar name: Method name.
    :ivar inputs: ABI types of the arguments.
    :ivar outputs: ABI types of the return values.
    """

    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]

    @classmethod
    def parse(cls, signature: str) -> AbiMethod:
        """Parse ``"name(inputs)(outputs)"``; the outputs group is optional.

        :raises ValueError: If the signature is malformed.
        """
        signature = signature.replace(" ", "")
        name, paren, groups = signature.partition("(")
        try:
            if not paren or not name.isidentifier():
                raise ValueError("expected a method name followed by its inputs")
            inputs, outputs = _split_groups(paren + groups)
        except ValueError as e:
            raise ValueError(f"invalid method signature {signature!r}: {e}") from e
        return cls(name, inputs, outputs)

    @property
    def signature(self) -> str:
        """Canonical signature used for the selector."""
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])

    def encode(self, *args: Any) -> bytes:
        """Encode a call with the given arguments.

        :raises ValueError: If the arguments do not match the input types.
        """
        try:
            return self.selector + encode(list(self.inputs), list(args))
        except EncodingError as e:
            raise ValueError(f"failed to encode {self.signature}: {e}") from e

    def decode(self, data: bytes) -> tuple:
        """Decode the return data of a call.

        :raises OriginError: If the data does not match the output types.
        """
        try:
            return decode(list(self.outputs), bytes(data))
        except DecodingError as e:
            raise OriginError(f"failed to decode {self.name} result: {e}") from e


def abi_table(*signatures: str) -> Mapping[str, AbiMethod]:
    """Parse signatures into a read-only table keyed by method name.

    :param signatures: Method signatures.
    :returns: Immutable mapping of method name to AbiMethod.
    """
    methods = {}
    for signature in signatures:
        method = AbiMethod.parse(signature)
        methods[method.name] = method
    return MappingProxyType(methods)


@dataclass(frozen=True)
class Call:
    """A single contract call.

    :ivar target: Contract address.
    :ivar data: Encoded call data.
    """

    target: str
    data: bytes

    @classmethod
    def of(cls, target: str, method: AbiMethod, *args: Any) -> Call:
        return cls(target, method.encode(*args))


@dataclass(frozen=True)
class CallResult:
    """Outcome of a single call in a multicall batch."""

    success: bool
    data: bytes

    def decode(self, method: AbiMethod) -> tuple:
        """Decode the return data.

        :raises OriginError: If the call reverted or returned malformed data.
        """
        if not self.success:
            raise OriginError(f"call to {method.name} reverted")
        return method.decode(self.data)


AGGREGATE3 = AbiMethod.parse("aggregate3((address,bool,bytes)[])((bool,bytes)[])")


class MulticallClient:
    """Multicall3 client over a Web3 connection.

    :ivar w3: Web3 instance used for RPC calls.
    :ivar address: Address of the Multicall3 contract.
    """

    def __init__(self, w3: Web3, address: str = MULTICALL3_ADDRESS) -> None:
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)

    async def block_number(self) -> int:
        """Get the number of the latest block.

        :raises MulticallError: If the RPC call fails.
        """
        try:
            return await asyncio.to_thread(lambda: self.w3.eth.block_number)
        except Exception as e:
            raise MulticallError(f"cannot get block number: {e}") from e

    async def aggregate(self, calls: list[Call], block: int | str = "latest") -> list[CallResult]:
        """Execute calls in a single ``aggregate3`` request, allowing failures.

        :param calls: Calls to execute.
        :param block: Block number or tag to execute at.
        :returns: One CallResult per call, in order.
        :raises MulticallError: If the RPC call fails or the response is malformed.
        """
        if not calls:
            return []
        payload = AGGREGATE3.encode(
            [(Web3.to_checksum_address(call.target), True, call.data) for call in calls]
        )
        try:
            raw = await asyncio.to_thread(
                self.w3.eth.call,
                {"to": self.address, "data": Web3.to_hex(payload)},
                block,
            )
        except Exception as e:
            logger.debug(f"[multicall] aggregate3 of {len(calls)} calls at {block} failed: {e}")
            raise MulticallError(f"multicall failed: {e}") from e

        try:
            (results,) = AGGREGATE3.decode(bytes(raw))
        except OriginError as e:
            raise MulticallError(str(e)) from e
        if len(results) != len(calls):
            raise MulticallError(
                f"unexpected number of multicall results, expected {len(calls)}, got {len(results)}"
            )
        return [CallResult(bool(success), bytes(data)) for success, data in results]
