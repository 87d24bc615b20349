"""Unit tests for weighted pool math."""

import pytest

from oracle.src.amm.errors import BalancerMathError
from oracle.src.amm.weighted import WeightedPool, calc_out_given_in, token_index

RDNT = "0x137dDB47Ee24EaA998a535Ab00378d6BFa84F893"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
ONE = 10**18


@pytest.fixture
def pool() -> WeightedPool:
    """RDNT/WETH 80/20 pool state at block of tx 0x74dac995."""
    return WeightedPool(
        tokens=[RDNT, WETH],
        balances=[34043497190382699990148821, 1060514722983166251296],
        swap_fee_percentage=5000000000000000,
        scaling_factors=[ONE, ONE],
        normalized_weights=[800000000000000000, 200000000000000000],
    )


class TestWeightedPool:
    """Test WeightedPool.calc_amount_out."""

    def test_swap_matches_chain(self, pool: WeightedPool) -> None:
        """Swapping 40000 RDNT returns the amount observed on chain."""
        amount_out, fee = pool.calc_amount_out(RDNT, WETH, 40000 * ONE)

        assert amount_out == 4944898525417925727
        assert fee == 200 * ONE

    def test_token_lookup_ignores_case(self, pool: WeightedPool) -> None:
        """Token addresses match regardless of checksum case."""
        amount_out, _ = pool.calc_amount_out(RDNT.lower(), WETH.upper().replace("0X", "0x"), 40000 * ONE)

        assert amount_out == 4944898525417925727

    def test_unknown_token(self, pool: WeightedPool) -> None:
        """Tokens not in the pool are rejected."""
        with pytest.raises(ValueError, match="tokens not found in pool"):
            pool.calc_amount_out(RDNT, "0x0000000000000000000000000000000000000001", ONE)

    def test_same_token(self, pool: WeightedPool) -> None:
        """Swapping a token for itself is rejected."""
        with pytest.raises(ValueError, match="tokens not found in pool"):
            pool.calc_amount_out(RDNT, RDNT, ONE)

    def test_max_in_ratio(self, pool: WeightedPool) -> None:
        """Amounts above 30% of the input balance are rejected."""
        with pytest.raises(BalancerMathError, match="MAX_IN_RATIO"):
            pool.calc_amount_out(WETH, RDNT, 400 * ONE)


class TestWeightedMath:
    """Test the weighted math helpers."""

    def test_equal_weights(self) -> None:
        """Equal weights behave like a constant product pool."""
        amount_out = calc_out_given_in(100 * ONE, ONE // 2, 100 * ONE, ONE // 2, 10 * ONE)

        # 100 - 100 * 100 / 110 = 9.0909...
        assert 9090909090909090000 < amount_out <= 9090909090909090909

    def test_zero_amount(self) -> None:
        """Sending nothing returns nothing."""
        assert calc_out_given_in(100 * ONE, ONE // 2, 100 * ONE, ONE // 2, 0) == 0

    def test_token_index(self) -> None:
        """token_index returns -1 for missing tokens."""
        assert token_index([RDNT, WETH], WETH.lower()) == 1
        assert token_index([RDNT, WETH], "0xdead") == -1
