"""Exponentiation and logarithm with 18 decimal fixed point arguments.

This reproduces Balancer's LogExpMath library operation by operation, so
results match the contracts to the last wei. Exponents are decomposed into
powers of two whose exponentials are tabulated, and the remainder is refined
with a Taylor series. All intermediate values are signed integers and every
division truncates toward zero, as in Solidity.
"""

from __future__ import annotations

from ..bn.number import quo
from .errors import (
    INVALID_EXPONENT,
    OUT_OF_BOUNDS,
    PRODUCT_OUT_OF_BOUNDS,
    X_OUT_OF_BOUNDS,
    Y_OUT_OF_BOUNDS,
    BalancerMathError,
)

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# Bounds for ln_36's argument. Both ln(0.9) and ln(1.1) can be represented with 36 decimal places.
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

MILD_EXPONENT_BOUND = 2**254 // ONE_20

# 18 decimal constants, a0 and a1 have no decimals.
x0 = 128000000000000000000  # 2^7
a0 = 38877084059945950922200000000000000000000000000000000000  # e^(x0)
x1 = 64000000000000000000  # 2^6
a1 = 6235149080811616882910000000  # e^(x1)

# 20 decimal constants
x2 = 3200000000000000000000  # 2^5
a2 = 7896296018268069516100000000000000  # e^(x2)
x3 = 1600000000000000000000  # 2^4
a3 = 888611052050787263676000000  # e^(x3)
x4 = 800000000000000000000  # 2^3
a4 = 298095798704172827474000  # e^(x4)
x5 = 400000000000000000000  # 2^2
a5 = 5459815003314423907810  # e^(x5)
x6 = 200000000000000000000  # 2^1
a6 = 738905609893065022723  # e^(x6)
x7 = 100000000000000000000  # 2^0
a7 = 271828182845904523536  # e^(x7)
x8 = 50000000000000000000  # 2^-1
a8 = 164872127070012814685  # e^(x8)
x9 = 25000000000000000000  # 2^-2
a9 = 128402541668774148407  # e^(x9)
x10 = 12500000000000000000  # 2^-3
a10 = 113314845306682631683  # e^(x10)
x11 = 6250000000000000000  # 2^-4
a11 = 106449445891785942956  # e^(x11)

_EXP_TABLE = ((x2, a2), (x3, a3), (x4, a4), (x5, a5), (x6, a6), (x7, a7), (x8, a8), (x9, a9))
_LN_TABLE = _EXP_TABLE + ((x10, a10), (x11, a11))


def _rem(x: int, y: int) -> int:
    """Remainder with the sign of the dividend."""
    return x - quo(x, y) * y


def pow(x: int, y: int) -> int:
    """Return ``x^y`` with both arguments scaled by 1e18.

    :param x: Base, must be below 2^255.
    :param y: Exponent, must be below MILD_EXPONENT_BOUND.
    :raises BalancerMathError: X_OUT_OF_BOUNDS, Y_OUT_OF_BOUNDS or PRODUCT_OUT_OF_BOUNDS.
    """
    if y == 0:
        return ONE_18
    if x == 0:
        return 0
    if x >> 255 != 0:
        raise BalancerMathError(X_OUT_OF_BOUNDS)
    if y >= MILD_EXPONENT_BOUND:
        raise BalancerMathError(Y_OUT_OF_BOUNDS)

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        # ln_36_x has 36 decimal places, multiplying by y would overflow a uint256
        # on chain, so it is split into its integer and fractional parts.
        logx_times_y = quo(ln_36_x, ONE_18) * y + quo(_rem(ln_36_x, ONE_18) * y, ONE_18)
    else:
        logx_times_y = _ln(x) * y
    logx_times_y = quo(logx_times_y, ONE_18)

    if not MIN_NATURAL_EXPONENT <= logx_times_y <= MAX_NATURAL_EXPONENT:
        raise BalancerMathError(PRODUCT_OUT_OF_BOUNDS)
    return exp(logx_times_y)


def exp(x: int) -> int:
    """Return ``e^x`` for an 18 decimal exponent.

    :raises BalancerMathError: INVALID_EXPONENT outside [-41, 130].
    """
    if not MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT:
        raise BalancerMathError(INVALID_EXPONENT)

    if x < 0:
        return quo(ONE_18 * ONE_18, exp(-x))

    if x >= x0:
        x -= x0
        first_an = a0
    elif x >= x1:
        x -= x1
        first_an = a1
    else:
        first_an = 1

    # Switch to 20 decimals for higher precision.
    x *= 100

    product = ONE_20
    for xn, an in _EXP_TABLE:
        if x >= xn:
            x -= xn
            product = quo(product * an, ONE_20)

    series_sum = ONE_20 + x
    term = x
    for n in range(2, 13):
        term = quo(quo(term * x, ONE_20), n)
        series_sum += term

    return quo(quo(product * series_sum, ONE_20) * first_an, 100)


def log(arg: int, base: int) -> int:
    """Return the logarithm of ``arg`` in ``base``, both 18 decimal."""
    if LN_36_LOWER_BOUND < base < LN_36_UPPER_BOUND:
        log_base = _ln_36(base)
    else:
        log_base = _ln(base) * ONE_18

    if LN_36_LOWER_BOUND < arg < LN_36_UPPER_BOUND:
        log_arg = _ln_36(arg)
    else:
        log_arg = _ln(arg) * ONE_18

    return quo(log_arg * ONE_18, log_base)


def ln(a: int) -> int:
    """Return the natural logarithm of an 18 decimal value.

    :raises BalancerMathError: OUT_OF_BOUNDS if a is not positive.
    """
    if a <= 0:
        raise BalancerMathError(OUT_OF_BOUNDS)
    if LN_36_LOWER_BOUND < a < LN_36_UPPER_BOUND:
        return quo(_ln_36(a), ONE_18)
    return _ln(a)


def _ln(a: int) -> int:
    if a < ONE_18:
        # ln(a) = -ln(1/a), keeps the argument above one.
        return -_ln(quo(ONE_18 * ONE_18, a))

    total = 0
    if a >= a0 * ONE_18:
        a = quo(a, a0)
        total += x0
    if a >= a1 * ONE_18:
        a = quo(a, a1)
        total += x1

    # Switch to 20 decimals for higher precision.
    total *= 100
    a *= 100

    for xn, an in _LN_TABLE:
        if a >= an:
            a = quo(a * ONE_20, an)
            total += xn

    # ln(a) = 2 * artanh(z) with z = (a - 1) / (a + 1)
    z = quo((a - ONE_20) * ONE_20, a + ONE_20)
    z_squared = quo(z * z, ONE_20)

    num = z
    series_sum = num
    for divisor in (3, 5, 7, 9, 11):
        num = quo(num * z_squared, ONE_20)
        series_sum += quo(num, divisor)
    series_sum *= 2

    return quo(total + series_sum, 100)


def _ln_36(x: int) -> int:
    """Natural logarithm with 36 decimal places, for arguments close to one."""
    x *= ONE_18

    z = quo((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = quo(z * z, ONE_36)

    num = z
    series_sum = num
    for divisor in (3, 5, 7, 9, 11, 13, 15):
        num = quo(num * z_squared, ONE_36)
        series_sum += quo(num, divisor)

    return series_sum * 2
