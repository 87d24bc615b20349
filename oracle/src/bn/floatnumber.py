"""Arbitrary precision floating point number backed by decimal.Decimal."""

from __future__ import annotations

from decimal import Context, Decimal, ROUND_HALF_EVEN
from typing import Any

from .errors import DivisionByZeroError
from .number import Number, parse_decimal, round_half_away

# Significant digits kept by floating arithmetic.
FLOAT_DIGITS = 80

FLOAT_CONTEXT = Context(prec=FLOAT_DIGITS, rounding=ROUND_HALF_EVEN, Emax=999999, Emin=-999999)


class FloatNumber(Number):
    """Floating value with FLOAT_DIGITS significant digits.

    Conversions into FloatNumber are exact; rounding to FLOAT_DIGITS happens
    only when arithmetic produces more digits.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Decimal | int | str = 0) -> None:
        self._value = Decimal(value)

    @property
    def value(self) -> Decimal:
        return self._value

    @classmethod
    def from_value(cls, value: Any) -> FloatNumber | None:
        """Convert a value into a FloatNumber.

        :param value: int, float, str, Decimal or another number.
        :returns: FloatNumber, or None for invalid, NaN or infinite input.
        """
        if isinstance(value, FloatNumber):
            return value
        if isinstance(value, Number):
            return cls(value._exact())
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        parsed = parse_decimal(value)
        if parsed is None:
            return None
        return cls(parsed)

    def _exact(self) -> Decimal:
        return self._value

    def add(self, other: Any) -> FloatNumber:
        return FloatNumber(FLOAT_CONTEXT.add(self._value, self._coerce(other)._value))

    def sub(self, other: Any) -> FloatNumber:
        return FloatNumber(FLOAT_CONTEXT.subtract(self._value, self._coerce(other)._value))

    def mul(self, other: Any) -> FloatNumber:
        return FloatNumber(FLOAT_CONTEXT.multiply(self._value, self._coerce(other)._value))

    def div(self, other: Any) -> FloatNumber:
        """Divide by another value.

        :raises DivisionByZeroError: If other is zero.
        """
        divisor = self._coerce(other)._value
        if divisor == 0:
            raise DivisionByZeroError()
        return FloatNumber(FLOAT_CONTEXT.divide(self._value, divisor))

    def inv(self) -> FloatNumber:
        return FloatNumber(1).div(self)

    def neg(self) -> FloatNumber:
        return FloatNumber(self._value.copy_negate())

    def abs(self) -> FloatNumber:
        return FloatNumber(self._value.copy_abs())

    def __int__(self) -> int:
        numerator, denominator = self._value.as_integer_ratio()
        return round_half_away(numerator, denominator)

    def __str__(self) -> str:
        text = format(self._value, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        if text in ("-0", ""):
            return "0"
        return text

    def __repr__(self) -> str:
        return f"FloatNumber('{self}')"
