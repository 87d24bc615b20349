"""Data points produced by origins and graph nodes.

A Point wraps a value together with the time it was observed, the points it
was derived from and free-form metadata. A point carrying an ``error`` must
not be treated as authoritative; call :meth:`Point.validate` before reading
its value.

.. code-block:: python

    >>> tick = Tick(Pair("ETH", "USD"), as_dec_float("1850.5"), as_dec_float(1000))
    >>> point = Point(value=tick, time=datetime.now(timezone.utc))
    >>> point.validate()
    >>> point.price
    DecFloatPointNumber(18505, 1)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .bn import DecFloatPointNumber, as_dec_float
from .Pair import Pair


@dataclass(frozen=True)
class Tick:
    """Price of a pair, optionally with the 24h volume in base units.

    :ivar pair: Pair the price is for.
    :ivar price: Price of one base unit in quote units.
    :ivar volume24h: Traded volume over the last 24 hours.
    """

    pair: Pair
    price: DecFloatPointNumber | None = None
    volume24h: DecFloatPointNumber | None = None

    def validate(self) -> None:
        """Check that the tick can be used as a price.

        :raises ValueError: If the pair is incomplete or the price or volume is unusable.
        """
        if not self.pair.base:
            raise ValueError("base is empty")
        if not self.pair.quote:
            raise ValueError("quote is empty")
        if self.price is None:
            raise ValueError("price is nil")
        if self.price.sign() <= 0:
            raise ValueError("price is zero or negative")
        if math.isinf(float(self.price)):
            raise ValueError("price is infinite")
        if self.volume24h is not None and self.volume24h.sign() < 0:
            raise ValueError("volume is negative")

    def number(self) -> DecFloatPointNumber | None:
        return self.price

    def print(self) -> str:
        return f"{self.pair} {self.price}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "pair": str(self.pair),
            "price": None if self.price is None else str(self.price),
            "volume24h": None if self.volume24h is None else str(self.volume24h),
        }


@dataclass(frozen=True)
class StaticValue:
    """A plain number that is not a price, such as a rate or a supply."""

    value: DecFloatPointNumber

    def validate(self) -> None:
        if self.value is None:
            raise ValueError("value is nil")

    def number(self) -> DecFloatPointNumber:
        return self.value

    def print(self) -> str:
        return str(self.value)

    def to_dict(self) -> dict[str, Any]:
        return {"value": str(self.value)}


Value = Tick | StaticValue


@dataclass
class Point:
    """A value observed at a point in time.

    :ivar value: Tick or StaticValue, None when the point only carries an error.
    :ivar time: Observation time, timezone-aware UTC.
    :ivar sub_points: Points this one was derived from.
    :ivar meta: Free-form metadata, e.g. the node type or origin name.
    :ivar error: Failure that produced this point instead of a value.
    """

    value: Value | None = None
    time: datetime | None = None
    sub_points: list[Point] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    error: BaseException | None = None

    @classmethod
    def from_error(cls, error: BaseException | str, pair: Pair | None = None, **meta: Any) -> Point:
        """Build a point that only carries an error.

        :param error: Exception, or a message wrapped in a ValueError.
        :param pair: Pair the failed value was for, kept as an empty tick.
        """
        if isinstance(error, str):
            error = ValueError(error)
        return cls(value=Tick(pair) if pair is not None else None, meta=dict(meta), error=error)

    @property
    def tick(self) -> Tick | None:
        """Value as a Tick, or None for other value kinds."""
        return self.value if isinstance(self.value, Tick) else None

    @property
    def price(self) -> DecFloatPointNumber | None:
        tick = self.tick
        return tick.price if tick is not None else None

    @property
    def pair(self) -> Pair | None:
        tick = self.tick
        return tick.pair if tick is not None else None

    def validate(self) -> None:
        """Check that the point can be consumed.

        :raises ValueError: If the point carries an error, has no value or time,
            or the value itself is invalid.
        """
        if self.error is not None:
            raise ValueError(str(self.error)) from self.error
        if self.value is None:
            raise ValueError("value is not set")
        if self.time is None:
            raise ValueError("time is not set")
        self.value.validate()

    def to_dict(self) -> dict[str, Any]:
        """Serialise the point tree into JSON compatible types."""
        meta = {}
        for key, item in self.meta.items():
            meta[key] = item if item is None or isinstance(item, (str, int, float, bool)) else str(item)
        return {
            "value": None if self.value is None else self.value.to_dict(),
            "time": None if self.time is None else self.time.isoformat(),
            "meta": meta,
            "error": None if self.error is None else str(self.error),
            "sub_points": [p.to_dict() for p in self.sub_points],
        }


def new_tick_point(
    pair: Pair,
    price: Any,
    volume: Any = None,
    time: datetime | None = None,
    **meta: Any,
) -> Point:
    """Build a tick point, converting the price and volume to decimals.

    :param pair: Pair the price is for.
    :param price: Price as a number, string or Number.
    :param volume: Optional 24h volume.
    :param time: Observation time, defaults to now.
    :returns: Point with a Tick value, or an error point if the price cannot be parsed.
    """
    dec_price = as_dec_float(price)
    if dec_price is None:
        return Point.from_error(f"invalid price: {price!r}", pair, **meta)
    return Point(
        value=Tick(pair, dec_price, as_dec_float(volume) if volume is not None else None),
        time=time or datetime.now(timezone.utc),
        meta=dict(meta),
    )
