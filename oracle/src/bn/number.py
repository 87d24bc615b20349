"""Shared base class and helpers for the number types.

Every number type is immutable and converts the right-hand operand through
its own constructor before operating, so ``DecFixedPointNumber(...) + 1.5``
and ``DecFixedPointNumber(...).add("1.5")`` behave the same way.
"""

from __future__ import annotations

import functools
import math
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

from .precision import MAX_PRECISION

# Largest decimal exponent accepted from text. Beyond it a value cannot be
# converted into an integer mantissa in reasonable time.
MAX_EXPONENT = 4 * MAX_PRECISION


def quo(x: int, y: int) -> int:
    """Divide two integers truncating toward zero.

    Python's ``//`` floors, on-chain integer division truncates.
    """
    q = abs(x) // abs(y)
    return q if (x < 0) == (y < 0) else -q


def round_half_away(numerator: int, denominator: int) -> int:
    """Round ``numerator / denominator`` half away from zero."""
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    q, r = divmod(abs(numerator), denominator)
    if 2 * r >= denominator:
        q += 1
    return -q if numerator < 0 else q


def rescale(mantissa: int, precision: int, new_precision: int) -> int:
    """Move a decimal mantissa to another precision, truncating when narrowing."""
    if mantissa == 0 or precision == new_precision:
        return mantissa
    if new_precision > precision:
        return mantissa * 10 ** (new_precision - precision)
    return quo(mantissa, 10 ** (precision - new_precision))


def parse_decimal(value: Any) -> Decimal | None:
    """Convert a primitive (float, str, Decimal) into a finite Decimal.

    Floats enter with their exact binary value, so ``0.1`` becomes
    ``0.1000000000000000055511151231257827021181583404541015625``.

    :returns: The decimal value or None when the value is invalid, not finite
        or its exponent is out of range.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    if result and abs(result.adjusted()) > MAX_EXPONENT:
        return None
    return result


def decimal_from_fixed(mantissa: int, precision: int) -> Decimal:
    """Build the exact Decimal for ``mantissa * 10**-precision``."""
    sign = 1 if mantissa < 0 else 0
    digits = tuple(int(c) for c in str(abs(mantissa)))
    return Decimal((sign, digits, -precision))


def exact_value(value: Any) -> Decimal | None:
    """Exact decimal value of any supported number, used for comparisons."""
    if isinstance(value, Number):
        return value._exact()
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(value) if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    return None


@functools.total_ordering
class Number(ABC):
    """Abstract base for all number types.

    Subclasses implement the named operations; the Python operators are thin
    aliases on top of them.
    """

    __slots__ = ()

    @classmethod
    @abstractmethod
    def from_value(cls, value: Any) -> Number | None:
        """Convert an arbitrary value, returning None when it is invalid."""

    @abstractmethod
    def _exact(self) -> Decimal:
        """Exact value of the number as a Decimal."""

    def _fixed(self) -> tuple[int, int] | None:
        """Mantissa and precision for decimal-backed numbers, None otherwise."""
        return None

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, cls):
            return value
        result = cls.from_value(value)
        if result is None:
            raise TypeError(f"cannot convert {value!r} to {cls.__name__}")
        return result

    @abstractmethod
    def add(self, other: Any) -> Number: ...

    @abstractmethod
    def sub(self, other: Any) -> Number: ...

    @abstractmethod
    def mul(self, other: Any) -> Number: ...

    @abstractmethod
    def div(self, other: Any) -> Number: ...

    @abstractmethod
    def inv(self) -> Number: ...

    @abstractmethod
    def neg(self) -> Number: ...

    @abstractmethod
    def abs(self) -> Number: ...

    def sign(self) -> int:
        """Return -1, 0 or 1 depending on the sign of the number."""
        value = self._exact()
        return (value > 0) - (value < 0)

    def cmp(self, other: Any) -> int:
        """Compare with another value converted through this type.

        :returns: -1 if self < other, 0 if equal, 1 if self > other.
        """
        mine = self._exact()
        theirs = self._coerce(other)._exact()
        return (mine > theirs) - (mine < theirs)

    def __add__(self, other: Any) -> Number:
        try:
            return self.add(other)
        except TypeError:
            return NotImplemented

    def __radd__(self, other: Any) -> Number:
        try:
            return self._coerce(other).add(self)
        except TypeError:
            return NotImplemented

    def __sub__(self, other: Any) -> Number:
        try:
            return self.sub(other)
        except TypeError:
            return NotImplemented

    def __rsub__(self, other: Any) -> Number:
        try:
            return self._coerce(other).sub(self)
        except TypeError:
            return NotImplemented

    def __mul__(self, other: Any) -> Number:
        try:
            return self.mul(other)
        except TypeError:
            return NotImplemented

    def __rmul__(self, other: Any) -> Number:
        try:
            return self._coerce(other).mul(self)
        except TypeError:
            return NotImplemented

    def __truediv__(self, other: Any) -> Number:
        try:
            return self.div(other)
        except TypeError:
            return NotImplemented

    def __rtruediv__(self, other: Any) -> Number:
        try:
            return self._coerce(other).div(self)
        except TypeError:
            return NotImplemented

    def __neg__(self) -> Number:
        return self.neg()

    def __abs__(self) -> Number:
        return self.abs()

    def __bool__(self) -> bool:
        return self.sign() != 0

    def __float__(self) -> float:
        return float(self._exact())

    def __eq__(self, other: object) -> bool:
        theirs = exact_value(other)
        if theirs is None:
            return NotImplemented
        return self._exact() == theirs

    def __lt__(self, other: object) -> bool:
        theirs = exact_value(other)
        if theirs is None:
            return NotImplemented
        return self._exact() < theirs

    def __hash__(self) -> int:
        return hash(self._exact())
