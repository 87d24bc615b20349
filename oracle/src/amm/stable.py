"""Stable pool invariant math.

The invariant D of a stable pool with n tokens, amplification A and balances
x_i satisfies ``A * n^n * S + D = A * D * n^n + D^(n+1) / (n^n * P)`` where S is
the sum and P the product of the balances. It is solved with Newton's method;
both the invariant and single-token balances are iterated until two
consecutive results differ by at most one wei.

The amplification parameter is scaled by AMP_PRECISION.
"""

from __future__ import annotations

from . import fixedpoint as fp
from .errors import (
    STABLE_GET_BALANCE_DIDNT_CONVERGE,
    STABLE_INVARIANT_DIDNT_CONVERGE,
    BalancerMathError,
)

AMP_PRECISION = 1000

# Newton iterations before giving up.
MAX_ITERATIONS = 255


def calculate_invariant(amplification_parameter: int, balances: list[int]) -> int:
    """Compute the stable invariant, always rounding down.

    :param amplification_parameter: Amplification scaled by AMP_PRECISION.
    :param balances: Upscaled balances, without the BPT.
    :returns: The invariant, or 0 when all balances are zero.
    :raises BalancerMathError: STABLE_INVARIANT_DIDNT_CONVERGE after MAX_ITERATIONS.
    """
    total = sum(balances)
    if total == 0:
        return 0

    num_tokens = len(balances)
    invariant = total
    amp_times_total = amplification_parameter * num_tokens

    for _ in range(MAX_ITERATIONS):
        d_p = invariant
        for balance in balances:
            # (D_P * invariant) / (balance * numTokens)
            d_p = fp.div_down_raw(d_p * invariant, balance * num_tokens)

        prev_invariant = invariant
        numerator = (fp.div_down_raw(amp_times_total * total, AMP_PRECISION) + d_p * num_tokens) * invariant
        denominator = fp.div_down_raw((amp_times_total - AMP_PRECISION) * invariant, AMP_PRECISION) + (
            num_tokens + 1
        ) * d_p
        invariant = fp.div_down_raw(numerator, denominator)

        if abs(invariant - prev_invariant) <= 1:
            return invariant

    raise BalancerMathError(STABLE_INVARIANT_DIDNT_CONVERGE)


def get_token_balance_given_invariant_and_all_other_balances(
    amplification_parameter: int,
    balances: list[int],
    invariant: int,
    token_index: int,
) -> int:
    """Solve for the balance of one token that keeps the invariant.

    Rounds up overall, so the pool never gives out more than it should.

    :raises BalancerMathError: STABLE_GET_BALANCE_DIDNT_CONVERGE after MAX_ITERATIONS.
    """
    num_tokens = len(balances)
    amp_times_total = amplification_parameter * num_tokens
    total = balances[0]
    p_d = balances[0] * num_tokens
    for j in range(1, num_tokens):
        p_d = fp.div_down_raw(p_d * balances[j] * num_tokens, invariant)
        total += balances[j]
    total -= balances[token_index]

    inv2 = invariant * invariant
    # Rounding up c makes the resulting balance larger.
    c = fp.div_up_raw(inv2, amp_times_total * p_d) * AMP_PRECISION * balances[token_index]
    b = total + fp.div_down_raw(invariant, amp_times_total) * AMP_PRECISION

    # Initial approximation: y = (D^2 + c) / (D + b)
    token_balance = fp.div_up_raw(inv2 + c, invariant + b)

    for _ in range(MAX_ITERATIONS):
        prev_token_balance = token_balance
        # y = (y^2 + c) / (2y + b - D)
        token_balance = fp.div_up_raw(
            token_balance * token_balance + c,
            fp.sub(token_balance * 2 + b, invariant),
        )
        if abs(token_balance - prev_token_balance) <= 1:
            return token_balance

    raise BalancerMathError(STABLE_GET_BALANCE_DIDNT_CONVERGE)


def calc_out_given_in(
    amplification_parameter: int,
    balances: list[int],
    token_index_in: int,
    token_index_out: int,
    token_amount_in: int,
    invariant: int,
) -> int:
    """Compute how many tokens leave the pool when ``token_amount_in`` is sent.

    The result is rounded down by subtracting one wei.
    """
    new_balances = list(balances)
    new_balances[token_index_in] += token_amount_in
    final_balance_out = get_token_balance_given_invariant_and_all_other_balances(
        amplification_parameter, new_balances, invariant, token_index_out
    )
    return fp.sub(fp.sub(balances[token_index_out], final_balance_out), 1)


def calc_bpt_out_given_exact_tokens_in(
    amplification_parameter: int,
    balances: list[int],
    amounts_in: list[int],
    bpt_total_supply: int,
    current_invariant: int,
    swap_fee_percentage: int,
) -> tuple[int, int]:
    """Compute the BPT minted for a join with exact token amounts.

    Only the part of each amount that is out of proportion to the pool's
    composition is charged the swap fee.

    :returns: Tuple of (bpt_out, fee_amount).
    """
    sum_balances = sum(balances)

    balance_ratios_with_fee = []
    invariant_ratio_with_fees = 0
    for balance, amount_in in zip(balances, amounts_in):
        current_weight = fp.div_down(balance, sum_balances)
        ratio = fp.div_down(balance + amount_in, balance)
        balance_ratios_with_fee.append(ratio)
        invariant_ratio_with_fees += fp.mul_down(ratio, current_weight)

    fee_amount = 0
    new_balances = []
    for balance, amount_in, ratio in zip(balances, amounts_in, balance_ratios_with_fee):
        if ratio > invariant_ratio_with_fees:
            non_taxable_amount = 0
            if invariant_ratio_with_fees > fp.ONE:
                non_taxable_amount = fp.mul_down(balance, invariant_ratio_with_fees - fp.ONE)
            swap_fee = fp.mul_up(fp.sub(amount_in, non_taxable_amount), swap_fee_percentage)
            amount_in_without_fee = fp.sub(amount_in, swap_fee)
        else:
            amount_in_without_fee = amount_in
        fee_amount += amount_in - amount_in_without_fee
        new_balances.append(balance + amount_in_without_fee)

    new_invariant = calculate_invariant(amplification_parameter, new_balances)
    invariant_ratio = fp.div_down(new_invariant, current_invariant)
    if invariant_ratio > fp.ONE:
        return fp.mul_down(bpt_total_supply, invariant_ratio - fp.ONE), fee_amount
    return 0, fee_amount


def calc_token_out_given_exact_bpt_in(
    amplification_parameter: int,
    balances: list[int],
    token_index: int,
    bpt_amount_in: int,
    bpt_total_supply: int,
    current_invariant: int,
    swap_fee_percentage: int,
) -> tuple[int, int]:
    """Compute the tokens received for burning an exact amount of BPT.

    :returns: Tuple of (amount_out, fee_amount).
    """
    new_invariant = fp.mul_up(
        fp.div_up(fp.sub(bpt_total_supply, bpt_amount_in), bpt_total_supply),
        current_invariant,
    )
    new_balance = get_token_balance_given_invariant_and_all_other_balances(
        amplification_parameter, balances, new_invariant, token_index
    )
    amount_out_without_fee = fp.sub(balances[token_index], new_balance)

    # The fee is charged on the amount the pool would not hold in proportion.
    current_weight = fp.div_down(balances[token_index], sum(balances))
    taxable_percentage = fp.complement(current_weight)

    taxable_amount = fp.mul_up(amount_out_without_fee, taxable_percentage)
    non_taxable_amount = fp.sub(amount_out_without_fee, taxable_amount)
    taxable_after_fee = fp.mul_down(taxable_amount, fp.ONE - swap_fee_percentage)

    return non_taxable_amount + taxable_after_fee, taxable_amount - taxable_after_fee
