"""
AMM pool math reproducing Balancer V2 contracts.

All values are raw integers; 18 decimal fixed point unless noted:
- fixedpoint: mul/div with explicit rounding direction, complement, pow
- logexpmath: exp, ln, log and pow
- weighted: weighted pool math and WeightedPool swap simulation
- stable: stable invariant and balance solving
- composable: ComposableStablePool swap simulation, including BPT joins/exits
"""

from .composable import ComposableStablePool, TokenRateCache
from .errors import BalancerMathError
from .weighted import WeightedPool

__all__ = [
    "BalancerMathError",
    "ComposableStablePool",
    "TokenRateCache",
    "WeightedPool",
]
