"""Unit tests for the on-chain and exchange ticker origins."""

from unittest.mock import AsyncMock, patch

import pytest

from oracle.src.amm import WeightedPool
from oracle.src.amm.composable import ZERO_ADDRESS
from oracle.src.bn import as_dec_float
from oracle.src.fetchers import BaseFetcher, BinanceFetcher, FetcherError, Ticker
from oracle.src.origins import (
    ERC20,
    AbiMethod,
    BalancerV2Origin,
    ContractAddresses,
    CurveOrigin,
    OriginConfigError,
    OriginError,
    RocketPoolOrigin,
    TickOrigin,
    UniswapV3Origin,
    WstETHOrigin,
    get_available_origins,
    get_origin_class,
)
from oracle.src.origins.balancer_v2 import (
    BALANCER_COMPOSABLE_METHODS,
    BALANCER_ORACLE_METHODS,
    BALANCER_POOL_METHODS,
    BALANCER_WEIGHTED_METHODS,
)
from oracle.src.origins.curve import CURVE_CRYPTOSWAP_METHODS, CURVE_METHODS, CURVE_STABLESWAP_METHODS
from oracle.src.origins.rocketpool import ROCKETPOOL_METHODS
from oracle.src.origins.uniswap_v3 import UNISWAP_V3_METHODS, quote_amount
from oracle.src.origins.wsteth import WSTETH_METHODS
from oracle.src.Pair import Pair

ONE = 10**18

RETH = "0xae78736cd615f374d3085123a210448e74fc6393"
WSTETH = "0x7f39c581f595b53c5cb19bd0b3f8da6c935e2ca0"
STETH = "0xae7ab96520de3a18e5e111b5eaab095312d7fe84"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"
WBTC = "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"
GHO = "0x40d16fc0246ad3160ccc09b8d0d3a2cd28ae6c2f"
RDNT = "0x137ddb47ee24eaa998a535ab00378d6bfa84f893"
MKR = "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2"

UNI_POOL = "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"
CURVE_POOL = "0xdc24316b9ae028f1497c275eb9192a3ea0f67022"
TRICRYPTO = "0xd51a44d3fae010294c616388b506acda1bfaae46"
BAL_ORACLE = "0x5c6ee304399dbdb9c8ef030ab642b10820db8f56"
BAL_VAULT = "0xba12222222228d8ba445958a75a0704d566bf2c8"
WEIGHTED_POOL = "0xcf7b51ce5755513d4be016b0e28d6edeffa1d52a"
GHO_POOL = "0x8353157092ed8be69a9df8f95af097bbf33cb2af"


def by_block(chain, values: dict[int, tuple]):
    """Answer with a different value at each block offset from the latest block."""
    return lambda block: values[chain.latest - block]


class TestRegistry:
    """Test origin registration."""

    def test_available_origins(self) -> None:
        """Every origin should be registered under its type name."""
        assert get_available_origins() == ["balancerV2", "curve", "rocketpool", "tick", "uniswapV3", "wsteth"]
        assert get_origin_class("curve") is CurveOrigin

    def test_unknown_origin(self) -> None:
        """Unknown types should raise OriginConfigError."""
        with pytest.raises(OriginConfigError, match="Unknown origin type 'sushi'"):
            get_origin_class("sushi")


class TestContractAddresses:
    """Test pair lookup of configured contracts."""

    def test_direct_and_inverted(self) -> None:
        """A pair should match its own key or the reversed one."""
        addresses = ContractAddresses({"reth/eth": RETH})

        assert addresses.by_pair(Pair("RETH", "ETH")) == (RETH, False, True)
        assert addresses.by_pair(Pair("ETH", "RETH")) == (RETH, True, True)

    def test_missing(self) -> None:
        """Unknown pairs should raise OriginError."""
        with pytest.raises(OriginError, match="failed to get contract address for pair: BTC/USD"):
            ContractAddresses({}).address_by_pair(Pair("BTC", "USD"))


class TestOnChainOriginConfig:
    """Test construction of on-chain origins."""

    def test_missing_client(self) -> None:
        """A missing client should raise OriginConfigError."""
        with pytest.raises(OriginConfigError, match=r"\[rocketpool\] ethereum client is not set"):
            RocketPoolOrigin()

    @pytest.mark.parametrize("blocks", [[], [-1], [0, "10"]])
    def test_invalid_blocks(self, chain, blocks) -> None:
        """Empty or negative block offsets should raise OriginConfigError."""
        with pytest.raises(OriginConfigError, match="blocks must be a non-empty list"):
            WstETHOrigin(client=chain, blocks=blocks)

    def test_default_blocks(self, chain) -> None:
        """Prices should be sampled at the latest block and 10 and 20 blocks before."""
        assert WstETHOrigin(client=chain).blocks == [0, 10, 20]


class TestERC20:
    """Test the token metadata cache."""

    @pytest.mark.asyncio
    async def test_details_cached(self, chain) -> None:
        """Token details should be read once and then served from the cache."""
        chain.token(WETH, "WETH", 18)
        chain.token(USDC, "USDC", 6)
        erc20 = ERC20(chain)

        details = await erc20.get_details([WETH.upper().replace("0X", "0x"), USDC])
        await erc20.get_details([USDC])

        assert details[WETH].symbol == "WETH"
        assert details[USDC].decimals == 6
        assert len(chain.batches) == 1

    @pytest.mark.asyncio
    async def test_bytes32_symbol(self, chain) -> None:
        """Tokens returning bytes32 symbols should be supported."""
        chain.on(MKR, AbiMethod.parse("symbol()(bytes32)"), returns=(b"MKR".ljust(32, b"\x00"),))
        chain.on(MKR, AbiMethod.parse("decimals()(uint8)"), returns=(18,))

        details = await ERC20(chain).get_details([MKR])

        assert details[MKR].symbol == "MKR"

    @pytest.mark.asyncio
    async def test_symbol_reverts(self, chain) -> None:
        """A token without symbol() should raise OriginError."""
        with pytest.raises(OriginError, match=f"failed to get symbol of token {MKR}"):
            await ERC20(chain).get_details([MKR])


class TestRocketPoolOrigin:
    """Test the rETH exchange rate origin."""

    @pytest.mark.asyncio
    async def test_average_over_blocks(self, chain) -> None:
        """The rate should be averaged over the sampled blocks."""
        rates = {0: (11 * ONE // 10,), 10: (12 * ONE // 10,), 20: (13 * ONE // 10,)}
        chain.on(RETH, ROCKETPOOL_METHODS["getExchangeRate"], returns=by_block(chain, rates))
        origin = RocketPoolOrigin(client=chain, contract_addresses={"RETH/ETH": RETH})

        points = await origin.fetch_data_points([Pair("RETH", "ETH")])

        point = points[Pair("RETH", "ETH")]
        assert point.error is None
        assert str(point.price) == "1.2"
        assert point.meta == {"origin": "rocketpool"}
        assert [block for _, block in chain.batches] == [1000, 990, 980]

    @pytest.mark.asyncio
    async def test_inverted(self, chain) -> None:
        """The inverse pair should use getRethValue(1e18)."""
        chain.on(RETH, ROCKETPOOL_METHODS["getRethValue"], ONE, returns=(9 * ONE // 10,))
        origin = RocketPoolOrigin(client=chain, contract_addresses={"RETH/ETH": RETH})

        points = await origin.fetch_data_points([Pair("ETH", "RETH")])

        assert str(points[Pair("ETH", "RETH")].price) == "0.9"

    @pytest.mark.asyncio
    async def test_unknown_pair(self, chain) -> None:
        """Pairs without a contract should fail alone."""
        chain.on(RETH, ROCKETPOOL_METHODS["getExchangeRate"], returns=(ONE,))
        origin = RocketPoolOrigin(client=chain, contract_addresses={"RETH/ETH": RETH})

        points = await origin.fetch_data_points([Pair("RETH", "ETH"), Pair("BTC", "USD")])

        assert points[Pair("RETH", "ETH")].error is None
        assert "failed to get contract address for pair: BTC/USD" in str(points[Pair("BTC", "USD")].error)

    @pytest.mark.asyncio
    async def test_reverted_call(self, chain) -> None:
        """A reverting contract should yield an error point."""
        origin = RocketPoolOrigin(client=chain, contract_addresses={"RETH/ETH": RETH})

        points = await origin.fetch_data_points([Pair("RETH", "ETH")])

        assert "call to getExchangeRate reverted" in str(points[Pair("RETH", "ETH")].error)

    @pytest.mark.asyncio
    async def test_batch_failure(self, failing_chain) -> None:
        """A failed multicall should fail every pair of the batch."""
        origin = RocketPoolOrigin(client=failing_chain, contract_addresses={"RETH/ETH": RETH})

        points = await origin.fetch_data_points([Pair("RETH", "ETH"), Pair("ETH", "RETH")])

        assert len(points) == 2
        assert all("connection refused" in str(p.error) for p in points.values())


class TestWstETHOrigin:
    """Test the wstETH exchange rate origin."""

    @pytest.mark.asyncio
    async def test_both_directions(self, chain) -> None:
        """Both directions should be read from the contract."""
        chain.on(WSTETH, WSTETH_METHODS["stEthPerToken"], returns=(1172 * ONE // 1000,))
        chain.on(WSTETH, WSTETH_METHODS["getWstETHByStETH"], ONE, returns=(853 * ONE // 1000,))
        origin = WstETHOrigin(client=chain, contract_addresses={"WSTETH/STETH": WSTETH}, blocks=[0])

        points = await origin.fetch_data_points([Pair("WSTETH", "STETH"), Pair("STETH", "WSTETH")])

        assert str(points[Pair("WSTETH", "STETH")].price) == "1.172"
        assert str(points[Pair("STETH", "WSTETH")].price) == "0.853"
        assert len(chain.batches) == 1


class TestUniswapV3Origin:
    """Test the Uniswap V3 slot0 price origin."""

    # sqrt(4e8) = 2e4: 4e8 raw WETH per raw USDC is 2500 USDC per WETH
    SQRT_PRICE_X96 = 20000 * 2**96

    def setup_pool(self, chain) -> None:
        chain.token(USDC, "USDC", 6)
        chain.token(WETH, "WETH", 18)
        chain.on(UNI_POOL, UNISWAP_V3_METHODS["token0"], returns=(USDC,))
        chain.on(UNI_POOL, UNISWAP_V3_METHODS["token1"], returns=(WETH,))
        chain.on(UNI_POOL, UNISWAP_V3_METHODS["slot0"], returns=(self.SQRT_PRICE_X96, 0, 0, 1, 1, 0, True))

    def test_quote_amount(self) -> None:
        """Quote amounts should follow the token order of the pool."""
        assert quote_amount(self.SQRT_PRICE_X96, False, 18) == 2500 * 10**6
        assert quote_amount(self.SQRT_PRICE_X96, True, 6) == 4 * 10**14

    @pytest.mark.asyncio
    async def test_both_directions(self, chain) -> None:
        """The base token may be either token0 or token1."""
        self.setup_pool(chain)
        origin = UniswapV3Origin(client=chain, contract_addresses={"WETH/USDC": UNI_POOL})

        points = await origin.fetch_data_points([Pair("WETH", "USDC"), Pair("USDC", "WETH")])

        assert str(points[Pair("WETH", "USDC")].price) == "2500"
        assert str(points[Pair("USDC", "WETH")].price) == "0.0004"

    @pytest.mark.asyncio
    async def test_token_not_in_pool(self, chain) -> None:
        """A pair whose tokens are not in the pool should fail."""
        self.setup_pool(chain)
        origin = UniswapV3Origin(client=chain, contract_addresses={"WBTC/USDC": UNI_POOL})

        points = await origin.fetch_data_points([Pair("WBTC", "USDC")])

        assert "not found base token: WBTC" in str(points[Pair("WBTC", "USDC")].error)

    @pytest.mark.asyncio
    async def test_batch_failure(self, failing_chain) -> None:
        """A failed token lookup should fail every pair."""
        origin = UniswapV3Origin(client=failing_chain, contract_addresses={"WETH/USDC": UNI_POOL})

        points = await origin.fetch_data_points([Pair("WETH", "USDC")])

        assert points[Pair("WETH", "USDC")].error is not None


class TestCurveOrigin:
    """Test the Curve get_dy origin."""

    def setup_stableswap(self, chain) -> None:
        chain.token(WETH, "WETH", 18)
        chain.token(STETH, "STETH", 18)
        chain.on(CURVE_POOL, CURVE_METHODS["coins"], 0, returns=(WETH,))
        chain.on(CURVE_POOL, CURVE_METHODS["coins"], 1, returns=(STETH,))
        chain.on(CURVE_POOL, CURVE_STABLESWAP_METHODS["get_dy"], 0, 1, ONE, returns=(999 * ONE // 1000,))

    @pytest.mark.asyncio
    async def test_stableswap(self, chain) -> None:
        """The lower index coin should be quoted in the higher index coin."""
        self.setup_stableswap(chain)
        origin = CurveOrigin(client=chain, contract_addresses={"WETH/STETH": CURVE_POOL})

        points = await origin.fetch_data_points([Pair("WETH", "STETH")])

        assert str(points[Pair("WETH", "STETH")].price) == "0.999"

    @pytest.mark.asyncio
    async def test_stableswap_inverted(self, chain) -> None:
        """A base coin with the higher index should invert the averaged quote."""
        self.setup_stableswap(chain)
        origin = CurveOrigin(client=chain, contract_addresses={"WETH/STETH": CURVE_POOL})

        points = await origin.fetch_data_points([Pair("STETH", "WETH")])

        assert points[Pair("STETH", "WETH")].price == as_dec_float("0.999").inv()

    @pytest.mark.asyncio
    async def test_cryptoswap(self, chain) -> None:
        """Cryptoswap pools should use uint256 indexes and read every coin of the key."""
        chain.token(USDT, "USDT", 6)
        chain.token(WBTC, "WBTC", 8)
        chain.token(WETH, "WETH", 18)
        for i, coin in enumerate([USDT, WBTC, WETH]):
            chain.on(TRICRYPTO, CURVE_METHODS["coins"], i, returns=(coin,))
        chain.on(TRICRYPTO, CURVE_CRYPTOSWAP_METHODS["get_dy"], 1, 2, 10**8, returns=(20 * ONE,))
        origin = CurveOrigin(
            client=chain, contract2_addresses={"USDT/WBTC/WETH": TRICRYPTO, "WBTC/WETH": TRICRYPTO}
        )

        points = await origin.fetch_data_points([Pair("WBTC", "WETH")])

        assert points[Pair("WBTC", "WETH")].error is None
        assert str(points[Pair("WBTC", "WETH")].price) == "20"

    @pytest.mark.asyncio
    async def test_unknown_pair(self, chain) -> None:
        """Pairs in neither pool map should fail."""
        origin = CurveOrigin(client=chain, contract_addresses={"WETH/STETH": CURVE_POOL})

        points = await origin.fetch_data_points([Pair("BTC", "USD")])

        assert "failed to get contract address for pair: BTC/USD" in str(points[Pair("BTC", "USD")].error)

    @pytest.mark.asyncio
    async def test_coins_revert(self, chain) -> None:
        """Pools whose coins cannot be read should fail their pairs."""
        origin = CurveOrigin(client=chain, contract_addresses={"WETH/STETH": CURVE_POOL})

        points = await origin.fetch_data_points([Pair("WETH", "STETH")])

        assert "call to coins reverted" in str(points[Pair("WETH", "STETH")].error)


class TestBalancerV2Origin:
    """Test Balancer V2 oracle and simulated pool prices."""

    POOL_ID = bytes.fromhex("cf7b51ce5755513d4be016b0e28d6edeffa1d52a000200000000000000000001")

    def setup_pool_tokens(self, chain, pool: str, tokens: list[str], balances: list[int]) -> None:
        chain.on(pool, BALANCER_POOL_METHODS["getPoolId"], returns=(self.POOL_ID,))
        chain.on(pool, BALANCER_POOL_METHODS["getVault"], returns=(BAL_VAULT,))
        chain.on(BAL_VAULT, BALANCER_POOL_METHODS["getPoolTokens"], self.POOL_ID, returns=(tokens, balances, 1))

    @pytest.mark.asyncio
    async def test_oracle_pool(self, chain) -> None:
        """Oracle pools should report getLatest(PAIR_PRICE) scaled down by 1e18."""
        chain.on(BAL_ORACLE, BALANCER_ORACLE_METHODS["getLatest"], 0, returns=(5 * ONE // 1000,))
        origin = BalancerV2Origin(client=chain, contract_addresses={"BAL/WETH": BAL_ORACLE})

        points = await origin.fetch_data_points([Pair("BAL", "WETH"), Pair("WETH", "BAL")])

        assert str(points[Pair("BAL", "WETH")].price) == "0.005"
        assert "cannot use inverted pair to retrieve price: WETH/BAL" in str(points[Pair("WETH", "BAL")].error)

    @pytest.mark.asyncio
    async def test_weighted_pool(self, chain) -> None:
        """Weighted pools should be priced by simulating a one token swap."""
        balances = [34043497190382699990148821, 1060514722983166251296]
        weights = [8 * ONE // 10, 2 * ONE // 10]
        chain.token(RDNT, "RDNT", 18)
        chain.token(WETH, "WETH", 18)
        self.setup_pool_tokens(chain, WEIGHTED_POOL, [RDNT, WETH], balances)
        chain.on(WEIGHTED_POOL, BALANCER_POOL_METHODS["getSwapFeePercentage"], returns=(5 * ONE // 1000,))
        chain.on(WEIGHTED_POOL, BALANCER_POOL_METHODS["getScalingFactors"], returns=([ONE, ONE],))
        chain.on(WEIGHTED_POOL, BALANCER_WEIGHTED_METHODS["getNormalizedWeights"], returns=(weights,))
        origin = BalancerV2Origin(client=chain, weighted_pools={"RDNT/WETH": WEIGHTED_POOL})

        points = await origin.fetch_data_points([Pair("RDNT", "WETH")])

        pool = WeightedPool(
            tokens=[RDNT, WETH],
            balances=balances,
            swap_fee_percentage=5 * ONE // 1000,
            scaling_factors=[ONE, ONE],
            normalized_weights=weights,
        )
        expected, _ = pool.calc_amount_out(RDNT, WETH, ONE)
        point = points[Pair("RDNT", "WETH")]
        assert point.error is None
        assert point.price == as_dec_float(expected).div(ONE)

    @pytest.mark.asyncio
    async def test_composable_pool(self, chain) -> None:
        """Composable stable pools should match the observed GHO to USDC swap."""
        tokens = [GHO, GHO_POOL, USDC, USDT]
        balances = [
            6448444062456011477376368,
            2596148429302257816743021881556180,
            1513827018794,
            1538170251459,
        ]
        chain.token(GHO, "GHO", 18)
        chain.token(GHO_POOL, "GHO/USDT/USDC", 18)
        chain.token(USDC, "USDC", 6)
        chain.token(USDT, "USDT", 6)
        self.setup_pool_tokens(chain, GHO_POOL, tokens, balances)
        methods = BALANCER_COMPOSABLE_METHODS
        chain.on(GHO_POOL, methods["getBptIndex"], returns=(1,))
        chain.on(GHO_POOL, methods["getRateProviders"], returns=([ZERO_ADDRESS] * 4,))
        chain.on(GHO_POOL, BALANCER_POOL_METHODS["getSwapFeePercentage"], returns=(500000000000000,))
        chain.on(GHO_POOL, methods["getAmplificationParameter"], returns=(200000, False, 1000))
        chain.on(GHO_POOL, BALANCER_POOL_METHODS["getScalingFactors"], returns=([ONE, ONE, 10**30, 10**30],))
        chain.on(GHO_POOL, methods["getLastJoinExitData"], returns=(200000, 9482927260967981674261420))
        chain.on(GHO_POOL, methods["totalSupply"], returns=(2596148438770953798709961309149655,))
        chain.on(GHO_POOL, methods["getProtocolFeePercentageCache"], 0, returns=(ONE // 2,))
        chain.on(GHO_POOL, methods["getProtocolFeePercentageCache"], 2, returns=(ONE // 2,))
        for token in tokens:
            chain.on(GHO_POOL, methods["isTokenExemptFromYieldProtocolFee"], token, returns=(False,))
        origin = BalancerV2Origin(client=chain, composable_pools={"GHO/USDC": GHO_POOL})

        points = await origin.fetch_data_points([Pair("GHO", "USDC")])

        point = points[Pair("GHO", "USDC")]
        assert point.error is None
        assert str(point.price) == "0.983063"

    @pytest.mark.asyncio
    async def test_composable_rate_provider_mismatch(self, chain) -> None:
        """A pool reporting fewer rate providers than tokens should fail."""
        self.setup_pool_tokens(chain, GHO_POOL, [GHO, GHO_POOL, USDC], [1, 2, 3])
        methods = BALANCER_COMPOSABLE_METHODS
        chain.on(GHO_POOL, methods["getBptIndex"], returns=(1,))
        chain.on(GHO_POOL, methods["getRateProviders"], returns=([ZERO_ADDRESS],))
        chain.on(GHO_POOL, BALANCER_POOL_METHODS["getSwapFeePercentage"], returns=(0,))
        chain.on(GHO_POOL, methods["getAmplificationParameter"], returns=(200000, False, 1000))
        chain.on(GHO_POOL, BALANCER_POOL_METHODS["getScalingFactors"], returns=([ONE] * 3,))
        chain.on(GHO_POOL, methods["getLastJoinExitData"], returns=(0, 0))
        chain.on(GHO_POOL, methods["totalSupply"], returns=(0,))
        chain.on(GHO_POOL, methods["getProtocolFeePercentageCache"], 0, returns=(0,))
        chain.on(GHO_POOL, methods["getProtocolFeePercentageCache"], 2, returns=(0,))
        for token in [GHO, GHO_POOL, USDC]:
            chain.on(GHO_POOL, methods["isTokenExemptFromYieldProtocolFee"], token, returns=(False,))
        origin = BalancerV2Origin(client=chain, composable_pools={"GHO/USDC": GHO_POOL})

        points = await origin.fetch_data_points([Pair("GHO", "USDC")])

        assert "not found proper rate providers in the pool" in str(points[Pair("GHO", "USDC")].error)

    @pytest.mark.asyncio
    async def test_pool_without_tokens(self, chain) -> None:
        """A pool with no registered tokens should fail."""
        self.setup_pool_tokens(chain, WEIGHTED_POOL, [], [])
        origin = BalancerV2Origin(client=chain, weighted_pools={"RDNT/WETH": WEIGHTED_POOL})

        points = await origin.fetch_data_points([Pair("RDNT", "WETH")])

        assert f"no tokens in pool {WEIGHTED_POOL}" in str(points[Pair("RDNT", "WETH")].error)

    @pytest.mark.asyncio
    async def test_block_number_failure(self, failing_chain) -> None:
        """Simulated pools should fail when the latest block is unknown."""
        origin = BalancerV2Origin(client=failing_chain, weighted_pools={"RDNT/WETH": WEIGHTED_POOL})

        points = await origin.fetch_data_points([Pair("RDNT", "WETH")])

        assert "connection refused" in str(points[Pair("RDNT", "WETH")].error)


class FakeFetcher(BaseFetcher):
    """Fetcher answering from a dict of prices."""

    name = "fake"

    def __init__(self, prices: dict[tuple[str, str], str]) -> None:
        super().__init__()
        self.prices = prices

    async def fetch(self, base: str, quote: str) -> Ticker:
        if (base, quote) not in self.prices:
            raise FetcherError(f"[fake] no price for {base}{quote}")
        return self._ticker(self.prices[(base, quote)], "10")


class TestTickOrigin:
    """Test the exchange ticker origin."""

    def test_fetcher_by_name(self) -> None:
        """A registered fetcher name should be instantiated."""
        origin = TickOrigin("binance", timeout=2.0)
        assert isinstance(origin.fetcher, BinanceFetcher)
        assert origin.fetcher.timeout == 2.0

    def test_missing_fetcher(self) -> None:
        """A missing fetcher should raise OriginConfigError."""
        with pytest.raises(OriginConfigError, match=r"\[tick\] fetcher is not set"):
            TickOrigin()

    def test_unknown_fetcher(self) -> None:
        """Unknown fetcher names should raise OriginConfigError."""
        with pytest.raises(OriginConfigError, match="Unknown fetcher 'nope'"):
            TickOrigin("nope")

    @pytest.mark.asyncio
    async def test_fetch_data_points(self) -> None:
        """Tickers should become tick points and failures error points."""
        origin = TickOrigin(FakeFetcher({("ETH", "BTC"): "0.05"}))

        points = await origin.fetch_data_points([Pair("ETH", "BTC"), Pair("ROSE", "USD")])

        eth = points[Pair("ETH", "BTC")]
        eth.validate()
        assert str(eth.price) == "0.05"
        assert str(eth.tick.volume24h) == "10"
        assert eth.meta == {"origin": "fake"}
        rose = points[Pair("ROSE", "USD")]
        with pytest.raises(ValueError, match="no price for ROSEUSD"):
            rose.validate()
        assert rose.pair == Pair("ROSE", "USD")

    @pytest.mark.asyncio
    async def test_no_pairs(self) -> None:
        """An empty request should not reach the fetcher."""
        fetcher = FakeFetcher({})
        with patch.object(fetcher, "fetch_batch", new=AsyncMock()) as mock_batch:
            assert await TickOrigin(fetcher).fetch_data_points([]) == {}
        mock_batch.assert_not_awaited()
