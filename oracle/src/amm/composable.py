"""Composable stable pool swap simulation.

A composable stable pool registers its own BPT as one of the pool tokens.
Regular swaps between two non-BPT tokens use plain stable math; swaps where
one side is the BPT behave like single token joins or exits, which first pay
the protocol fees accrued since the last join or exit.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import fixedpoint as fp
from . import stable
from .weighted import token_index

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass
class TokenRateCache:
    """Cached rate of a token with a rate provider, 18 decimal."""

    rate: int = fp.ONE
    old_rate: int = fp.ONE
    duration: int = 0
    expires: int = 0


@dataclass
class ComposableStablePool:
    """State of a composable stable pool as read from chain.

    Lists indexed by token follow the registered token order, which includes
    the BPT at ``bpt_index``.
    """

    address: str
    tokens: list[str] = field(default_factory=list)
    balances: list[int] = field(default_factory=list)
    bpt_index: int = 0
    rate_providers: list[str] = field(default_factory=list)
    total_supply: int = 0
    swap_fee_percentage: int = 0
    amplification_parameter: int = 0
    amplification_precision: int = stable.AMP_PRECISION
    amplification_is_updating: bool = False
    scaling_factors: list[int] = field(default_factory=list)
    last_join_exit_amplification: int = 0
    last_post_join_exit_invariant: int = 0
    tokens_exempt_from_yield_protocol_fee: list[bool] = field(default_factory=list)
    token_rate_caches: list[TokenRateCache] = field(default_factory=list)
    protocol_fee_percentage_cache_swap: int = 0
    protocol_fee_percentage_cache_yield: int = 0

    def calc_amount_out(self, token_in: str, token_out: str, amount_in: int) -> tuple[int, int]:
        """Simulate a swap given the input amount.

        :param token_in: Address of the token sent to the pool.
        :param token_out: Address of the token taken from the pool.
        :param amount_in: Raw input amount in token_in decimals.
        :returns: Tuple of (amount_out, fee_amount).
        :raises ValueError: If a token is not in the pool or both tokens are the same.
        :raises BalancerMathError: If the pool math fails.
        """
        index_in = token_index(self.tokens, token_in)
        index_out = token_index(self.tokens, token_out)
        if index_in < 0 or index_out < 0 or index_in == index_out:
            raise ValueError(f"tokens not found in pool: {token_in}, {token_out}")

        if index_in == self.bpt_index or index_out == self.bpt_index:
            return self._swap_with_bpt_given_in(index_in, index_out, amount_in)
        return self._swap_given_in(index_in, index_out, amount_in)

    def _swap_given_in(self, index_in: int, index_out: int, amount_in: int) -> tuple[int, int]:
        # Fees are subtracted before scaling.
        fee_amount = fp.mul_up(amount_in, self.swap_fee_percentage)
        amount = self._upscale(fp.sub(amount_in, fee_amount), index_in)
        balances = self._upscale_array(self.balances)

        amount_out = self._on_regular_swap(amount, balances, index_in, index_out)
        return fp.div_down(amount_out, self.scaling_factors[index_out]), fee_amount

    def _on_regular_swap(
        self,
        amount_in: int,
        registered_balances: list[int],
        registered_index_in: int,
        registered_index_out: int,
    ) -> int:
        balances = self._drop_bpt_item(registered_balances)
        index_in = self._skip_bpt_index(registered_index_in)
        index_out = self._skip_bpt_index(registered_index_out)

        current_amp = self.amplification_parameter
        invariant = stable.calculate_invariant(current_amp, balances)
        return stable.calc_out_given_in(current_amp, balances, index_in, index_out, amount_in, invariant)

    def _swap_with_bpt_given_in(self, index_in: int, index_out: int, amount_in: int) -> tuple[int, int]:
        balances = self._upscale_array(self.balances)
        amount = self._upscale(amount_in, index_in)

        pre_join_exit_supply, balances, current_amp, pre_join_exit_invariant = self._before_join_exit(balances)

        if index_out == self.bpt_index:
            # Join: token in, BPT out.
            amounts_in = [0] * len(balances)
            amounts_in[self._skip_bpt_index(index_in)] = amount
            amount_out, fee_amount = stable.calc_bpt_out_given_exact_tokens_in(
                current_amp,
                balances,
                amounts_in,
                pre_join_exit_supply,
                pre_join_exit_invariant,
                self.swap_fee_percentage,
            )
        else:
            # Exit: BPT in, token out.
            amount_out, fee_amount = stable.calc_token_out_given_exact_bpt_in(
                current_amp,
                balances,
                self._skip_bpt_index(index_out),
                amount,
                pre_join_exit_supply,
                pre_join_exit_invariant,
                self.swap_fee_percentage,
            )
        return fp.div_down(amount_out, self.scaling_factors[index_out]), fee_amount

    def _before_join_exit(self, registered_balances: list[int]) -> tuple[int, list[int], int, int]:
        """Pay protocol fees and return the values a join or exit needs.

        :returns: Tuple of (pre_join_exit_supply, balances without BPT, current_amp,
            pre_join_exit_invariant).
        """
        supply, balances, old_amp_invariant = self._pay_protocol_fees_before_join_exit(registered_balances)
        current_amp = self.amplification_parameter

        # The invariant computed with the last join/exit amp can be reused when the amp did not change.
        if current_amp == self.last_join_exit_amplification:
            pre_join_exit_invariant = old_amp_invariant
        else:
            pre_join_exit_invariant = stable.calculate_invariant(current_amp, balances)
        return supply, balances, current_amp, pre_join_exit_invariant

    def _pay_protocol_fees_before_join_exit(self, registered_balances: list[int]) -> tuple[int, list[int], int]:
        virtual_supply = self.total_supply - registered_balances[self.bpt_index]
        balances = self._drop_bpt_item(registered_balances)

        ownership, total_growth_invariant = self._get_protocol_pool_ownership_percentage(balances)
        protocol_fee_amount = self._bpt_for_pool_ownership_percentage(virtual_supply, ownership)
        return virtual_supply + protocol_fee_amount, balances, total_growth_invariant

    def _get_protocol_pool_ownership_percentage(self, balances: list[int]) -> tuple[int, int]:
        swap_fee_growth, non_exempt_growth, total_growth = self._get_growth_invariants(balances)

        # Rounding errors may make an invariant smaller than its predecessor.
        swap_fee_delta = max(0, swap_fee_growth - self.last_post_join_exit_invariant)
        non_exempt_yield_delta = max(0, non_exempt_growth - swap_fee_growth)

        protocol_swap_fee_percentage = fp.mul_down(
            fp.div_down(swap_fee_delta, total_growth), self.protocol_fee_percentage_cache_swap
        )
        protocol_yield_percentage = fp.mul_down(
            fp.div_down(non_exempt_yield_delta, total_growth), self.protocol_fee_percentage_cache_yield
        )
        return protocol_swap_fee_percentage + protocol_yield_percentage, total_growth

    def _get_growth_invariants(self, balances: list[int]) -> tuple[int, int, int]:
        """Compute the swap fee, non-exempt and total growth invariants.

        All three use the amplification of the last join or exit.
        """
        amp = self.last_join_exit_amplification
        swap_fee_growth = stable.calculate_invariant(amp, self._get_adjusted_balances(balances, True))

        exempt = self.tokens_exempt_from_yield_protocol_fee
        if not any(exempt):
            non_exempt_growth = stable.calculate_invariant(amp, balances)
            total_growth = non_exempt_growth
        elif all(exempt):
            non_exempt_growth = swap_fee_growth
            total_growth = stable.calculate_invariant(amp, balances)
        else:
            non_exempt_growth = stable.calculate_invariant(amp, self._get_adjusted_balances(balances, False))
            total_growth = stable.calculate_invariant(amp, balances)
        return swap_fee_growth, non_exempt_growth, total_growth

    def _get_adjusted_balances(self, balances: list[int], ignore_exempt_flags: bool) -> list[int]:
        """Apply ``old_rate / rate`` to exempt tokens, or to all rated tokens when ignoring flags."""
        adjusted = []
        for i, balance in enumerate(balances):
            registered = i + 1 if i >= self.bpt_index else i
            if self._is_exempt(registered) or (ignore_exempt_flags and self._has_rate_provider(registered)):
                cache = self.token_rate_caches[registered]
                adjusted.append(balance * cache.old_rate // cache.rate)
            else:
                adjusted.append(balance)
        return adjusted

    def _is_exempt(self, index: int) -> bool:
        flags = self.tokens_exempt_from_yield_protocol_fee
        return index < len(flags) and flags[index]

    def _has_rate_provider(self, index: int) -> bool:
        return index < len(self.rate_providers) and self.rate_providers[index].lower() != ZERO_ADDRESS

    @staticmethod
    def _bpt_for_pool_ownership_percentage(total_supply: int, ownership_percentage: int) -> int:
        # bptAmount = totalSupply * percentage / (1 - percentage)
        return fp.div_down_raw(total_supply * ownership_percentage, fp.complement(ownership_percentage))

    def _drop_bpt_item(self, amounts: list[int]) -> list[int]:
        return amounts[: self.bpt_index] + amounts[self.bpt_index + 1 :]

    def _skip_bpt_index(self, index: int) -> int:
        return index if index < self.bpt_index else index - 1

    def _upscale(self, amount: int, index: int) -> int:
        return fp.mul_down(amount, self.scaling_factors[index])

    def _upscale_array(self, amounts: list[int]) -> list[int]:
        return [fp.mul_down(amount, factor) for amount, factor in zip(amounts, self.scaling_factors)]
