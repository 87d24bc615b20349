"""Decimal floating point number.

DecFloatPointNumber is a fixed point decimal whose precision is chosen per
operation by the policy in :mod:`.precision`. After each arithmetic operation
trailing zero digits are removed, so a result's precision reflects its
significant fractional digits. Values built from a mantissa, converted from a
fixed point number or decoded from bytes keep the precision they were given
until the first operation.

.. code-block:: python

    >>> x = DecFloatPointNumber.from_value("10.500")
    >>> y = DecFloatPointNumber.from_value("2.250")
    >>> str(x + y), (x + y).precision
    ('12.75', 2)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .decfixed import DecFixedPointNumber
from .number import Number, parse_decimal, round_half_away
from .precision import add_precision, decimal_precision, div_precision, mul_precision


def _minimize(x: DecFixedPointNumber) -> DecFixedPointNumber:
    """Strip trailing zero digits from the mantissa."""
    n, prec = x.mantissa, x.precision
    if n == 0:
        return DecFixedPointNumber(0, 0)
    while prec > 0 and n % 10 == 0:
        n //= 10
        prec -= 1
    return DecFixedPointNumber(n, prec)


class DecFloatPointNumber(Number):
    """Decimal number with dynamic precision.

    :ivar mantissa: Scaled integer value.
    :ivar precision: Current number of fractional digits.
    """

    __slots__ = ("_x",)

    def __init__(self, mantissa: int, precision: int = 0) -> None:
        self._x = DecFixedPointNumber(mantissa, precision)

    @classmethod
    def _wrap(cls, x: DecFixedPointNumber) -> DecFloatPointNumber:
        result = cls.__new__(cls)
        result._x = x
        return result

    @property
    def mantissa(self) -> int:
        return self._x.mantissa

    @property
    def precision(self) -> int:
        return self._x.precision

    @classmethod
    def from_value(cls, value: Any) -> DecFloatPointNumber | None:
        """Convert a value into a DecFloatPointNumber.

        Integers and decimal numbers keep their mantissa and precision. Strings
        take the number of fractional digits they carry. Floats take the digits
        of their shortest round-trip form and round their exact binary value to
        that precision, so ``0.1`` stays ``0.1``.

        :param value: Value to convert.
        :returns: DecFloatPointNumber, or None if the value cannot be converted.

        .. code-block:: python

            >>> DecFloatPointNumber.from_value(42.5)
            DecFloatPointNumber(425, 1)
        """
        if isinstance(value, DecFloatPointNumber):
            return value
        if isinstance(value, Number):
            fixed = value._fixed()
            if fixed is not None:
                return cls(*fixed)
            exact = value._exact()
        elif isinstance(value, int) and not isinstance(value, bool):
            return cls(value, 0)
        else:
            exact = parse_decimal(value)
            if exact is None:
                return None
        if isinstance(value, float):
            precision = decimal_precision(Decimal(repr(value)))
        else:
            precision = decimal_precision(exact)
        numerator, denominator = exact.as_integer_ratio()
        return cls(round_half_away(numerator * 10**precision, denominator), precision)

    def _exact(self) -> Decimal:
        return self._x._exact()

    def _fixed(self) -> tuple[int, int]:
        return self._x.mantissa, self._x.precision

    def to_fixed(self) -> DecFixedPointNumber:
        """Return the value as a DecFixedPointNumber at its current precision."""
        return self._x

    def set_precision(self, precision: int) -> DecFloatPointNumber:
        """Return the same value at another precision, truncating when narrowing."""
        return self._wrap(self._x.set_precision(precision))

    def add(self, other: Any) -> DecFloatPointNumber:
        y = self._coerce(other)
        prec = add_precision(self.precision, y.precision)
        return self._wrap(_minimize(self._x.set_precision(prec).add(y._x.set_precision(prec))))

    def sub(self, other: Any) -> DecFloatPointNumber:
        y = self._coerce(other)
        prec = add_precision(self.precision, y.precision)
        return self._wrap(_minimize(self._x.set_precision(prec).sub(y._x.set_precision(prec))))

    def mul(self, other: Any) -> DecFloatPointNumber:
        y = self._coerce(other)
        prec = mul_precision(self.precision, y.precision)
        return self._wrap(_minimize(self._x.set_precision(prec).mul(y._x.set_precision(prec))))

    def div(self, other: Any) -> DecFloatPointNumber:
        """Divide by another value at the maximum precision.

        :raises DivisionByZeroError: If other is zero.
        """
        y = self._coerce(other)
        prec = div_precision(self.precision, y.precision)
        return self._wrap(_minimize(self._x.set_precision(prec).div(y._x.set_precision(prec))))

    def inv(self) -> DecFloatPointNumber:
        """Return ``1 / self``.

        :raises DivisionByZeroError: If the number is zero.
        """
        return DecFloatPointNumber(1).div(self)

    def neg(self) -> DecFloatPointNumber:
        return self._wrap(self._x.neg())

    def abs(self) -> DecFloatPointNumber:
        return self._wrap(self._x.abs())

    def to_bytes(self) -> bytes:
        """Encode using the DecFixedPointNumber binary format."""
        return self._x.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> DecFloatPointNumber:
        """Decode a value produced by to_bytes().

        :raises NumberFormatError: If the data is malformed.
        """
        return cls._wrap(DecFixedPointNumber.from_bytes(data))

    def __int__(self) -> int:
        return int(self._x)

    def __str__(self) -> str:
        return str(self._x)

    def __repr__(self) -> str:
        return f"DecFloatPointNumber({self.mantissa}, {self.precision})"
