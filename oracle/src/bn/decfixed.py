"""Decimal fixed point number.

A DecFixedPointNumber stores an integer mantissa scaled by ``10**precision``.
All arithmetic happens at the precision of the left operand: the right operand
is first rescaled to it, and every division truncates toward zero. This matches
the way Solidity contracts handle fixed point values.

.. code-block:: python

    >>> x = DecFixedPointNumber(1050, 2)  # 10.50
    >>> str(x.mul(DecFixedPointNumber(225, 2)))
    '23.62'
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .errors import DivisionByZeroError, NumberFormatError
from .number import (
    Number,
    decimal_from_fixed,
    parse_decimal,
    quo,
    rescale,
    round_half_away,
)
from .precision import MAX_PRECISION

# Version byte of the binary encoding.
ENCODING_VERSION = 0


def _check_precision(precision: int) -> int:
    if not 0 <= precision <= MAX_PRECISION:
        raise ValueError(f"precision must be between 0 and {MAX_PRECISION}, got {precision}")
    return precision


def format_fixed(mantissa: int, precision: int) -> str:
    """Render a decimal mantissa without trailing fractional zeros.

    :param mantissa: Scaled integer value.
    :param precision: Number of fractional digits in the mantissa.
    :returns: Text such as ``"0.0000010625"`` or ``"-106"``.
    """
    if mantissa == 0:
        return "0"
    sign = "-" if mantissa < 0 else ""
    digits = str(abs(mantissa))
    if precision == 0:
        return sign + digits
    digits = digits.rjust(precision + 1, "0")
    integer, fraction = digits[:-precision], digits[-precision:].rstrip("0")
    if fraction:
        return f"{sign}{integer}.{fraction}"
    return sign + integer


class DecFixedPointNumber(Number):
    """Fixed point decimal number with an explicit precision.

    :ivar mantissa: Scaled integer value.
    :ivar precision: Number of fractional digits, between 0 and 255.
    """

    __slots__ = ("_n", "_prec")

    def __init__(self, mantissa: int, precision: int) -> None:
        self._n = int(mantissa)
        self._prec = _check_precision(int(precision))

    @property
    def mantissa(self) -> int:
        return self._n

    @property
    def precision(self) -> int:
        return self._prec

    @classmethod
    def from_value(cls, value: Any, precision: int = 18) -> DecFixedPointNumber | None:
        """Convert a value into a fixed point number with the given precision.

        Decimal inputs with more digits than ``precision`` are truncated;
        floating inputs (float, str, Decimal, FloatNumber) are rounded half away
        from zero at the last kept digit.

        :param value: Value to convert.
        :param precision: Target precision.
        :returns: DecFixedPointNumber, or None if the value cannot be converted.
        """
        _check_precision(precision)
        if isinstance(value, Number):
            fixed = value._fixed()
            if fixed is not None:
                return cls(rescale(fixed[0], fixed[1], precision), precision)
            exact = value._exact()
        elif isinstance(value, int) and not isinstance(value, bool):
            return cls(value * 10**precision, precision)
        else:
            exact = parse_decimal(value)
            if exact is None:
                return None
        numerator, denominator = exact.as_integer_ratio()
        return cls(round_half_away(numerator * 10**precision, denominator), precision)

    def _coerce(self, value: Any) -> DecFixedPointNumber:
        if isinstance(value, DecFixedPointNumber) and value._prec == self._prec:
            return value
        result = self.from_value(value, self._prec)
        if result is None:
            raise TypeError(f"cannot convert {value!r} to DecFixedPointNumber")
        return result

    def _exact(self) -> Decimal:
        return decimal_from_fixed(self._n, self._prec)

    def _fixed(self) -> tuple[int, int]:
        return self._n, self._prec

    def set_precision(self, precision: int) -> DecFixedPointNumber:
        """Return the same value at another precision.

        Raising the precision is exact; lowering it truncates toward zero.
        """
        _check_precision(precision)
        return DecFixedPointNumber(rescale(self._n, self._prec, precision), precision)

    def add(self, other: Any) -> DecFixedPointNumber:
        return DecFixedPointNumber(self._n + self._coerce(other)._n, self._prec)

    def sub(self, other: Any) -> DecFixedPointNumber:
        return DecFixedPointNumber(self._n - self._coerce(other)._n, self._prec)

    def mul(self, other: Any) -> DecFixedPointNumber:
        y = self._coerce(other)
        return DecFixedPointNumber(quo(self._n * y._n, 10**self._prec), self._prec)

    def div(self, other: Any) -> DecFixedPointNumber:
        """Divide by another value, truncating the result.

        :raises DivisionByZeroError: If other is zero at this precision.
        """
        y = self._coerce(other)
        if y._n == 0:
            raise DivisionByZeroError()
        return DecFixedPointNumber(quo(self._n * 10**self._prec, y._n), self._prec)

    def inv(self) -> DecFixedPointNumber:
        """Return ``1 / self`` at this precision.

        :raises DivisionByZeroError: If the number is zero.
        """
        if self._n == 0:
            raise DivisionByZeroError()
        return DecFixedPointNumber(quo(10 ** (2 * self._prec), self._n), self._prec)

    def neg(self) -> DecFixedPointNumber:
        return DecFixedPointNumber(-self._n, self._prec)

    def abs(self) -> DecFixedPointNumber:
        return DecFixedPointNumber(abs(self._n), self._prec)

    def to_bytes(self) -> bytes:
        """Encode as ``[version][precision][big-endian mantissa magnitude]``.

        Zero encodes with an empty mantissa.

        :raises ValueError: If the number is negative; the format has no sign.
        """
        if self._n < 0:
            raise ValueError(f"cannot encode negative number {self}")
        length = (self._n.bit_length() + 7) // 8
        return bytes([ENCODING_VERSION, self._prec]) + self._n.to_bytes(length, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> DecFixedPointNumber:
        """Decode a value produced by to_bytes().

        :raises NumberFormatError: If the data is too short or the version is unknown.
        """
        if len(data) < 2:
            raise NumberFormatError("invalid data length")
        if data[0] != ENCODING_VERSION:
            raise NumberFormatError("invalid data format")
        return cls(int.from_bytes(data[2:], "big"), data[1])

    def __int__(self) -> int:
        return quo(self._n, 10**self._prec)

    def __str__(self) -> str:
        return format_fixed(self._n, self._prec)

    def __repr__(self) -> str:
        return f"DecFixedPointNumber({self._n}, {self._prec})"
