"""Conversion helpers between Python values and the number types.

Every helper returns None when the value cannot be represented (unparsable
string, NaN, infinity, unsupported type); callers must check the result.
"""

from __future__ import annotations

from typing import Any

from .decfixed import DecFixedPointNumber
from .decfloat import DecFloatPointNumber
from .floatnumber import FloatNumber
from .intnumber import IntNumber


def as_int(value: Any) -> IntNumber | None:
    """Convert to IntNumber (truncating decimals, rounding floats)."""
    return IntNumber.from_value(value)


def as_float(value: Any) -> FloatNumber | None:
    """Convert to FloatNumber."""
    return FloatNumber.from_value(value)


def as_dec_fixed(value: Any, precision: int) -> DecFixedPointNumber | None:
    """Convert to DecFixedPointNumber with the given precision."""
    return DecFixedPointNumber.from_value(value, precision)


def as_dec_float(value: Any) -> DecFloatPointNumber | None:
    """Convert to DecFloatPointNumber."""
    return DecFloatPointNumber.from_value(value)
