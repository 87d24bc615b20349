"""
Arbitrary precision decimal numbers.

This package provides the number types used for prices and on-chain math:
- IntNumber: integer of arbitrary size
- FloatNumber: floating value backed by decimal.Decimal
- DecFixedPointNumber: integer mantissa with explicit decimal precision
- DecFloatPointNumber: decimal with precision picked per operation

Usage:
    from oracle.src.bn import as_dec_float

    price = as_dec_float("1850.25")
    inverted = price.inv()
"""

from .convert import as_dec_fixed, as_dec_float, as_float, as_int
from .decfixed import DecFixedPointNumber
from .decfloat import DecFloatPointNumber
from .errors import DivisionByZeroError, NumberError, NumberFormatError
from .floatnumber import FloatNumber
from .intnumber import IntNumber
from .number import Number
from .precision import MAX_PRECISION

__all__ = [
    "DecFixedPointNumber",
    "DecFloatPointNumber",
    "DivisionByZeroError",
    "FloatNumber",
    "IntNumber",
    "MAX_PRECISION",
    "Number",
    "NumberError",
    "NumberFormatError",
    "as_dec_fixed",
    "as_dec_float",
    "as_float",
    "as_int",
]
