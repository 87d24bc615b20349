"""Unit tests for ABI method tables and the Multicall3 client."""

from types import MappingProxyType
from unittest.mock import MagicMock

import pytest
from eth_abi import decode, encode

from oracle.src.origins import AbiMethod, Call, CallResult, MulticallClient, MulticallError, OriginError
from oracle.src.origins.curve import CURVE_CRYPTOSWAP_METHODS, CURVE_STABLESWAP_METHODS
from oracle.src.origins.multicall import AGGREGATE3, abi_table

TOKEN = "0x" + "ab" * 20


class FakeEth:
    """Stand-in for ``w3.eth`` with a configurable block number."""

    def __init__(self) -> None:
        self.call = MagicMock()
        self.block_error: Exception | None = None

    @property
    def block_number(self) -> int:
        if self.block_error is not None:
            raise self.block_error
        return 19000000


@pytest.fixture
def w3() -> MagicMock:
    """Web3 instance with a fake eth module."""
    mock = MagicMock()
    mock.eth = FakeEth()
    return mock


class TestAbiMethod:
    """Test signature parsing, selectors and coding."""

    def test_parse(self) -> None:
        """Inputs and outputs should be split on top-level commas."""
        method = AbiMethod.parse("getPoolTokens(bytes32)(address[], uint256[], uint256)")

        assert method.name == "getPoolTokens"
        assert method.inputs == ("bytes32",)
        assert method.outputs == ("address[]", "uint256[]", "uint256")
        assert method.signature == "getPoolTokens(bytes32)"

    def test_parse_tuples(self) -> None:
        """Tuple types should be kept intact."""
        assert AGGREGATE3.inputs == ("(address,bool,bytes)[]",)
        assert AGGREGATE3.outputs == ("(bool,bytes)[]",)

    def test_parse_without_outputs(self) -> None:
        """The outputs group should be optional."""
        method = AbiMethod.parse("poke()")
        assert method.inputs == ()
        assert method.outputs == ()

    def test_parse_nested_tuples(self) -> None:
        """Nested tuples and fixed size arrays should come back in canonical form."""
        method = AbiMethod.parse("f((uint256, (address, bool[]))[2], bytes)()")

        assert method.inputs == ("(uint256,(address,bool[]))[2]", "bytes")
        assert method.outputs == ()
        assert method.signature == "f((uint256,(address,bool[]))[2],bytes)"

    def test_parse_normalizes_aliases(self) -> None:
        """Type aliases should be expanded so selectors match the canonical signature."""
        method = AbiMethod.parse("balanceOf(address)(uint)")

        assert method.outputs == ("uint256",)
        assert AbiMethod.parse("transfer(address,uint)(bool)").selector.hex() == "a9059cbb"

    @pytest.mark.parametrize(
        "signature",
        [
            "decimals",
            "decimals(",
            "decimals()uint8",
            "1st()(uint8)",
            "f()()()",
            "f(uint7)",
            "f(uint8",
            "f(uint8))",
            "f()(uint8)[]",
            "f((uint8)",
        ],
    )
    def test_parse_invalid(self, signature: str) -> None:
        """Malformed signatures should raise ValueError."""
        with pytest.raises(ValueError, match="invalid method signature"):
            AbiMethod.parse(signature)

    def test_selector(self) -> None:
        """Selectors should be the first four bytes of the keccak hash."""
        assert AbiMethod.parse("transfer(address,uint256)(bool)").selector.hex() == "a9059cbb"
        assert AbiMethod.parse("decimals()(uint8)").selector.hex() == "313ce567"

    def test_encode(self) -> None:
        """Encoded calls should be the selector followed by the arguments."""
        method = AbiMethod.parse("getLatest(uint8)(uint256)")
        data = method.encode(0)

        assert data[:4] == method.selector
        assert decode(["uint8"], data[4:]) == (0,)

    def test_encode_invalid_argument(self) -> None:
        """Arguments that do not fit the types should raise ValueError."""
        with pytest.raises(ValueError, match=r"failed to encode getLatest\(uint8\)"):
            AbiMethod.parse("getLatest(uint8)(uint256)").encode(256)

    def test_decode(self) -> None:
        """Return data should be decoded with the output types."""
        method = AbiMethod.parse("getLastJoinExitData()(uint256,uint256)")
        assert method.decode(encode(["uint256", "uint256"], [5, 7])) == (5, 7)

    def test_decode_invalid(self) -> None:
        """Short return data should raise OriginError."""
        with pytest.raises(OriginError, match="failed to decode totalSupply result"):
            AbiMethod.parse("totalSupply()(uint256)").decode(b"\x01")


class TestAbiTables:
    """Test the per-origin method tables."""

    def test_tables_keyed_by_name(self) -> None:
        """Methods sharing a name should be told apart by their table."""
        assert CURVE_STABLESWAP_METHODS["get_dy"].inputs == ("int128", "int128", "uint256")
        assert CURVE_CRYPTOSWAP_METHODS["get_dy"].inputs == ("uint256", "uint256", "uint256")

    def test_table_is_read_only(self) -> None:
        """Tables should not be modifiable."""
        table = abi_table("foo()(uint256)")

        assert isinstance(table, MappingProxyType)
        with pytest.raises(TypeError):
            table["bar"] = AbiMethod.parse("bar()")


class TestCallResult:
    """Test decoding of individual call results."""

    def test_reverted(self) -> None:
        """Decoding a failed call should raise OriginError."""
        method = AbiMethod.parse("symbol()(string)")
        with pytest.raises(OriginError, match="call to symbol reverted"):
            CallResult(False, b"").decode(method)


class TestMulticallClient:
    """Test the aggregate3 round trip over a fake Web3."""

    @pytest.mark.asyncio
    async def test_block_number(self, w3: MagicMock) -> None:
        """The latest block number should be read from web3."""
        assert await MulticallClient(w3).block_number() == 19000000

    @pytest.mark.asyncio
    async def test_block_number_failure(self, w3: MagicMock) -> None:
        """RPC failures should raise MulticallError."""
        w3.eth.block_error = ConnectionError("refused")
        with pytest.raises(MulticallError, match="cannot get block number: refused"):
            await MulticallClient(w3).block_number()

    @pytest.mark.asyncio
    async def test_aggregate(self, w3: MagicMock) -> None:
        """Calls should be sent as one aggregate3 request and results returned in order."""
        decimals = AbiMethod.parse("decimals()(uint8)")
        w3.eth.call.return_value = encode(
            ["(bool,bytes)[]"], [[(True, encode(["uint8"], [18])), (False, b"")]]
        )
        client = MulticallClient(w3)

        results = await client.aggregate([Call.of(TOKEN, decimals), Call.of(TOKEN, decimals)], 123)

        assert results == [CallResult(True, encode(["uint8"], [18])), CallResult(False, b"")]
        assert results[0].decode(decimals) == (18,)

        tx, block = w3.eth.call.call_args.args
        assert block == 123
        assert tx["to"] == client.address
        sent = bytes.fromhex(tx["data"][2:])
        assert sent[:4] == AGGREGATE3.selector
        (calls,) = decode(list(AGGREGATE3.inputs), sent[4:])
        assert [(target.lower(), allow, data) for target, allow, data in calls] == [
            (TOKEN, True, decimals.selector),
            (TOKEN, True, decimals.selector),
        ]

    @pytest.mark.asyncio
    async def test_aggregate_empty(self, w3: MagicMock) -> None:
        """An empty batch should not make a request."""
        assert await MulticallClient(w3).aggregate([]) == []
        w3.eth.call.assert_not_called()

    @pytest.mark.asyncio
    async def test_aggregate_rpc_failure(self, w3: MagicMock) -> None:
        """RPC failures should fail the whole batch."""
        w3.eth.call.side_effect = TimeoutError("deadline exceeded")
        with pytest.raises(MulticallError, match="multicall failed: deadline exceeded"):
            await MulticallClient(w3).aggregate([Call.of(TOKEN, AbiMethod.parse("decimals()(uint8)"))])

    @pytest.mark.asyncio
    async def test_aggregate_result_count_mismatch(self, w3: MagicMock) -> None:
        """A response with the wrong number of results should raise MulticallError."""
        w3.eth.call.return_value = encode(["(bool,bytes)[]"], [[]])
        with pytest.raises(MulticallError, match="expected 1, got 0"):
            await MulticallClient(w3).aggregate([Call.of(TOKEN, AbiMethod.parse("decimals()(uint8)"))])

    @pytest.mark.asyncio
    async def test_aggregate_malformed_response(self, w3: MagicMock) -> None:
        """Undecodable responses should raise MulticallError."""
        w3.eth.call.return_value = b"\x00"
        with pytest.raises(MulticallError, match="failed to decode aggregate3 result"):
            await MulticallClient(w3).aggregate([Call.of(TOKEN, AbiMethod.parse("decimals()(uint8)"))])
