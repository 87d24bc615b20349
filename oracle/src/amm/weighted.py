"""Weighted pool math and swap simulation.

.. code-block:: python

    >>> pool = WeightedPool(
    ...     tokens=["0xRDNT", "0xWETH"],
    ...     balances=[34043497190382699990148821, 1060514722983166251296],
    ...     swap_fee_percentage=5000000000000000,
    ...     scaling_factors=[10**18, 10**18],
    ...     normalized_weights=[8 * 10**17, 2 * 10**17],
    ... )
    >>> pool.calc_amount_out("0xRDNT", "0xWETH", 40000 * 10**18)[0]
    4944898525417925727
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import fixedpoint as fp
from .errors import MAX_IN_RATIO, BalancerMathError

# Swap limit: amounts swapped may not be larger than this percentage of total balance.
MAX_IN_RATIO_PERCENTAGE = 3 * 10**17


def calc_out_given_in(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_in: int,
) -> int:
    """Compute how many tokens leave the pool when ``amount_in`` is sent.

    ``aO = bO * (1 - (bI / (bI + aI)) ^ (wI / wO))``, rounded down overall:
    the base and the power round up, the exponent rounds down.

    :raises BalancerMathError: MAX_IN_RATIO if amount_in exceeds 30% of balance_in.
    """
    if amount_in > fp.mul_down(balance_in, MAX_IN_RATIO_PERCENTAGE):
        raise BalancerMathError(MAX_IN_RATIO)

    denominator = balance_in + amount_in
    base = fp.div_up(balance_in, denominator)
    exponent = fp.div_down(weight_in, weight_out)
    power = fp.pow_up(base, exponent)

    return fp.mul_down(balance_out, fp.complement(power))


def token_index(tokens: list[str], token: str) -> int:
    """Find a token address in a list, ignoring checksum case.

    :returns: Index of the token or -1 when it is not present.
    """
    token = token.lower()
    for i, address in enumerate(tokens):
        if address.lower() == token:
            return i
    return -1


@dataclass
class WeightedPool:
    """State of a weighted pool as read from chain.

    All amounts are raw integers; weights and the fee are 18 decimal.
    """

    tokens: list[str] = field(default_factory=list)
    balances: list[int] = field(default_factory=list)
    swap_fee_percentage: int = 0
    scaling_factors: list[int] = field(default_factory=list)
    normalized_weights: list[int] = field(default_factory=list)

    def calc_amount_out(self, token_in: str, token_out: str, amount_in: int) -> tuple[int, int]:
        """Simulate a swap given the input amount.

        :param token_in: Address of the token sent to the pool.
        :param token_out: Address of the token taken from the pool.
        :param amount_in: Raw input amount in token_in decimals.
        :returns: Tuple of (amount_out, fee_amount).
        :raises ValueError: If a token is not in the pool or both tokens are the same.
        """
        index_in = token_index(self.tokens, token_in)
        index_out = token_index(self.tokens, token_out)
        if index_in < 0 or index_out < 0 or index_in == index_out:
            raise ValueError(f"tokens not found in pool: {token_in}, {token_out}")
        return self._swap_given_in(index_in, index_out, amount_in)

    def _swap_given_in(self, index_in: int, index_out: int, amount_in: int) -> tuple[int, int]:
        scaling_in = self.scaling_factors[index_in]
        scaling_out = self.scaling_factors[index_out]
        balance_in = fp.mul_down(self.balances[index_in], scaling_in)
        balance_out = fp.mul_down(self.balances[index_out], scaling_out)

        # Fees are subtracted before scaling, rounding the fee up.
        fee_amount = fp.mul_up(amount_in, self.swap_fee_percentage)
        amount = fp.mul_down(fp.sub(amount_in, fee_amount), scaling_in)

        amount_out = calc_out_given_in(
            balance_in,
            self.normalized_weights[index_in],
            balance_out,
            self.normalized_weights[index_out],
            amount,
        )
        return fp.div_down(amount_out, scaling_out), fee_amount
