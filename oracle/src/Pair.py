"""Pair: an ordered (base, quote) asset pair.

Symbols are normalized to uppercase so that pairs parsed from configuration
and pairs returned by origins compare equal.

.. code-block:: python

    >>> pair = Pair("eth", "btc")
    >>> str(pair)
    'ETH/BTC'
    >>> Pair.from_string("steth/eth").invert()
    Pair('ETH', 'STETH')
"""

from __future__ import annotations


class Pair:
    """A price pair: how many ``quote`` units one ``base`` unit costs.

    :ivar base: Base asset symbol (uppercase).
    :ivar quote: Quote asset symbol (uppercase).
    """

    __slots__ = ("base", "quote")

    def __init__(self, base: str, quote: str) -> None:
        """Initialize a pair.

        :param base: Base asset symbol (e.g., "ETH", "WSTETH").
        :param quote: Quote asset symbol (e.g., "USD").
        """
        self.base = base.upper()
        self.quote = quote.upper()

    def __str__(self) -> str:
        return f"{self.base}/{self.quote}"

    def __repr__(self) -> str:
        return f"Pair({self.base!r}, {self.quote!r})"

    def __hash__(self) -> int:
        return hash((self.base, self.quote))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pair):
            return NotImplemented
        return self.base == other.base and self.quote == other.quote

    def invert(self) -> Pair:
        """Return the pair with base and quote swapped."""
        return Pair(self.quote, self.base)

    @classmethod
    def from_string(cls, pair_str: str) -> Pair:
        """Parse a pair string in format "BASE/QUOTE".

        :param pair_str: Pair string like "ETH/USD" or "reth/eth".
        :returns: New Pair instance.
        :raises ValueError: If the string does not have exactly one separator.
        """
        parts = pair_str.split("/")
        if len(parts) != 2:
            raise ValueError(f"pair must be formatted as BASE/QUOTE, got {pair_str!r}")
        return cls(parts[0].strip(), parts[1].strip())
