"""Shared fixtures: an in-memory chain standing in for a Multicall3 client."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from eth_abi import encode

from oracle.src.origins import AbiMethod, Call, CallResult, MulticallError


class FakeChain:
    """Answers multicall batches from registered call results.

    Calls without a registered result revert. A result may be a callable
    taking the block number, to vary the answer across sampled blocks.
    """

    def __init__(self, latest: int = 1000) -> None:
        self.latest = latest
        self.responses: dict[tuple[str, bytes], Any] = {}
        self.batches: list[tuple[list[Call], int | str]] = []
        self.fail: Exception | None = None

    def on(self, target: str, method: AbiMethod, *args: Any, returns: tuple | Callable[[int | str], tuple]) -> None:
        self.responses[(target.lower(), method.encode(*args))] = (method, returns)

    def token(self, address: str, symbol: str, decimals: int) -> None:
        self.on(address, AbiMethod.parse("symbol()(string)"), returns=(symbol,))
        self.on(address, AbiMethod.parse("decimals()(uint8)"), returns=(decimals,))

    async def block_number(self) -> int:
        if self.fail is not None:
            raise self.fail
        return self.latest

    async def aggregate(self, calls: list[Call], block: int | str = "latest") -> list[CallResult]:
        if self.fail is not None:
            raise self.fail
        self.batches.append((list(calls), block))
        results = []
        for call in calls:
            response = self.responses.get((call.target.lower(), call.data))
            if response is None:
                results.append(CallResult(False, b""))
                continue
            method, returns = response
            values = returns(block) if callable(returns) else returns
            results.append(CallResult(True, encode(list(method.outputs), list(values))))
        return results


@pytest.fixture
def chain() -> FakeChain:
    """Fresh in-memory chain."""
    return FakeChain()


@pytest.fixture
def failing_chain() -> FakeChain:
    """Chain whose every RPC fails."""
    fake = FakeChain()
    fake.fail = MulticallError("multicall failed: connection refused")
    return fake
