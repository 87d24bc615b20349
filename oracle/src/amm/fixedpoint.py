"""18 decimal fixed point helpers with explicit rounding direction.

Values are raw integers scaled by ONE. The ``*_down`` variants round toward
zero and the ``*_up`` variants away from zero, exactly as the on-chain
FixedPoint library does.
"""

from __future__ import annotations

from ..bn import DecFixedPointNumber
from . import logexpmath
from .errors import SUB_OVERFLOW, ZERO_DIVISION, BalancerMathError

ONE = 10**18
TWO = 2 * ONE
FOUR = 4 * ONE

# Relative error bound of LogExpMath.pow, scaled by ONE.
MAX_POW_RELATIVE_ERROR = 10000

PRECISION = 18


def _fixed(x: int) -> DecFixedPointNumber:
    return DecFixedPointNumber(x, PRECISION)


def sub(a: int, b: int) -> int:
    """Subtract, reverting on underflow.

    :raises BalancerMathError: SUB_OVERFLOW if b > a.
    """
    if b > a:
        raise BalancerMathError(SUB_OVERFLOW)
    return a - b


def mul_down(a: int, b: int) -> int:
    return _fixed(a).mul(_fixed(b)).mantissa


def mul_up(a: int, b: int) -> int:
    product = a * b
    if product == 0:
        return 0
    return (product - 1) // ONE + 1


def div_down(a: int, b: int) -> int:
    """Divide rounding down.

    :raises BalancerMathError: ZERO_DIVISION if b is zero.
    """
    if b == 0:
        raise BalancerMathError(ZERO_DIVISION)
    if a == 0:
        return 0
    return _fixed(a).div(_fixed(b)).mantissa


def div_up(a: int, b: int) -> int:
    """Divide rounding up.

    :raises BalancerMathError: ZERO_DIVISION if b is zero.
    """
    if b == 0:
        raise BalancerMathError(ZERO_DIVISION)
    if a == 0:
        return 0
    return (a * ONE - 1) // b + 1


def div_down_raw(a: int, b: int) -> int:
    """Plain integer division rounding down, without fixed point scaling."""
    if b == 0:
        raise BalancerMathError(ZERO_DIVISION)
    return a // b


def div_up_raw(a: int, b: int) -> int:
    """Plain integer division rounding up, without fixed point scaling."""
    if b == 0:
        raise BalancerMathError(ZERO_DIVISION)
    if a == 0:
        return 0
    return (a - 1) // b + 1


def complement(x: int) -> int:
    """Return ``ONE - x`` clamped at zero."""
    return ONE - x if x < ONE else 0


def pow_down(x: int, y: int) -> int:
    """Power rounded down, with fast paths for exponents 1, 2 and 4."""
    if y == ONE:
        return x
    if y == TWO:
        return mul_down(x, x)
    if y == FOUR:
        square = mul_down(x, x)
        return mul_down(square, square)
    raw = logexpmath.pow(x, y)
    max_error = mul_up(raw, MAX_POW_RELATIVE_ERROR) + 1
    if raw < max_error:
        return 0
    return raw - max_error


def pow_up(x: int, y: int) -> int:
    """Power rounded up, with fast paths for exponents 1, 2 and 4."""
    if y == ONE:
        return x
    if y == TWO:
        return mul_up(x, x)
    if y == FOUR:
        square = mul_up(x, x)
        return mul_up(square, square)
    raw = logexpmath.pow(x, y)
    max_error = mul_up(raw, MAX_POW_RELATIVE_ERROR) + 1
    return raw + max_error
