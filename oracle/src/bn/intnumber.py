"""Arbitrary precision integer number."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .errors import DivisionByZeroError
from .number import Number, parse_decimal, quo, round_half_away


class IntNumber(Number):
    """Signed integer of arbitrary size.

    Division truncates toward zero.

    :ivar value: The wrapped Python integer.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        self._value = int(value)

    @property
    def value(self) -> int:
        return self._value

    @classmethod
    def from_value(cls, value: Any) -> IntNumber | None:
        """Convert a value into an IntNumber.

        Decimal numbers are truncated, floating values are rounded half away
        from zero.

        :param value: int, float, str, Decimal or another number.
        :returns: IntNumber, or None if the value cannot be converted.
        """
        if isinstance(value, IntNumber):
            return value
        if isinstance(value, Number):
            fixed = value._fixed()
            if fixed is not None:
                mantissa, precision = fixed
                return cls(quo(mantissa, 10**precision))
            numerator, denominator = value._exact().as_integer_ratio()
            return cls(round_half_away(numerator, denominator))
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        parsed = parse_decimal(value)
        if parsed is None:
            return None
        numerator, denominator = parsed.as_integer_ratio()
        return cls(round_half_away(numerator, denominator))

    def _exact(self) -> Decimal:
        return Decimal(self._value)

    def _fixed(self) -> tuple[int, int]:
        return self._value, 0

    def add(self, other: Any) -> IntNumber:
        return IntNumber(self._value + self._coerce(other)._value)

    def sub(self, other: Any) -> IntNumber:
        return IntNumber(self._value - self._coerce(other)._value)

    def mul(self, other: Any) -> IntNumber:
        return IntNumber(self._value * self._coerce(other)._value)

    def div(self, other: Any) -> IntNumber:
        """Divide truncating toward zero.

        :raises DivisionByZeroError: If other is zero.
        """
        divisor = self._coerce(other)._value
        if divisor == 0:
            raise DivisionByZeroError()
        return IntNumber(quo(self._value, divisor))

    def inv(self) -> IntNumber:
        return IntNumber(1).div(self)

    def neg(self) -> IntNumber:
        return IntNumber(-self._value)

    def abs(self) -> IntNumber:
        return IntNumber(abs(self._value))

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"IntNumber({self._value})"
