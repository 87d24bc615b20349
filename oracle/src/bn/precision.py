"""Precision policy for dynamic decimal arithmetic.

DecFloatPointNumber picks the working precision of every operation from the
functions below, then strips trailing zero digits from the result.
"""

from __future__ import annotations

from decimal import Decimal

# Maximum number of fractional digits a decimal number can carry.
MAX_PRECISION = 255


def add_precision(x: int, y: int) -> int:
    """Working precision for addition and subtraction."""
    return max(x, y)


def mul_precision(x: int, y: int) -> int:
    """Working precision for multiplication.

    The product of two decimals needs ``x + y`` digits to be exact.
    """
    return min(x + y, MAX_PRECISION)


def div_precision(x: int, y: int) -> int:
    """Working precision for division, always the maximum."""
    return MAX_PRECISION


def decimal_precision(value: Decimal) -> int:
    """Count the fractional digits of a finite decimal, ignoring trailing zeros.

    :param value: Finite decimal value.
    :returns: Number of significant fractional digits, capped at MAX_PRECISION.

    .. code-block:: python

        >>> decimal_precision(Decimal("42.50"))
        1
        >>> decimal_precision(Decimal("1E+3"))
        0
    """
    _, digits, exponent = value.as_tuple()
    trailing = 0
    for digit in reversed(digits):
        if digit != 0:
            break
        trailing += 1
    if trailing == len(digits):
        return 0
    return min(max(0, -(exponent + trailing)), MAX_PRECISION)
