"""Exceptions raised by the number library."""


class NumberError(Exception):
    """Base exception for number errors."""

    pass


class DivisionByZeroError(NumberError, ZeroDivisionError):
    """Raised when dividing or inverting a zero value."""

    def __init__(self, message: str = "division by zero"):
        super().__init__(message)


class NumberFormatError(NumberError, ValueError):
    """Raised when a binary encoded number cannot be decoded."""

    pass
