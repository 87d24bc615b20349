"""Cross-rate node chaining the prices of its children.

Adjacent ticks must share an asset. For ticks ``a`` and ``b``:

==================  ===============  ===========
a, b                result           price
==================  ===============  ===========
A/C, B/C            A/B              a / b
C/A, C/B            A/B              b / a
A/C, C/B            A/B              a * b
C/A, B/C            A/B              1 / b / a
==================  ===============  ===========

The result of each step replaces ``b`` before the next step, so any number of
children can be chained. A single child is forwarded as is.
"""

from __future__ import annotations

from dataclasses import replace

from ..bn import DecFloatPointNumber
from ..DataPoint import Point, Tick
from ..Pair import Pair
from .errors import CrossRateError, GraphError
from .node import Node

ZERO = DecFloatPointNumber(0)


def cross_rate(a: Tick, b: Tick) -> Tick:
    """Combine two adjacent ticks into one.

    A division by a non-positive price yields a zero price, which fails
    validation downstream.

    :raises CrossRateError: If the pairs have no asset in common.
    """
    if a.pair.quote == b.pair.quote:
        pair = Pair(a.pair.base, b.pair.base)
        price = a.price.div(b.price) if b.price.sign() > 0 else ZERO
    elif a.pair.base == b.pair.base:
        pair = Pair(a.pair.quote, b.pair.quote)
        price = b.price.div(a.price) if a.price.sign() > 0 else ZERO
    elif a.pair.quote == b.pair.base:
        pair = Pair(a.pair.base, b.pair.quote)
        price = a.price.mul(b.price)
    elif a.pair.base == b.pair.quote:
        pair = Pair(a.pair.quote, b.pair.base)
        if a.price.sign() > 0 and b.price.sign() > 0:
            price = b.price.inv().div(a.price)
        else:
            price = ZERO
    else:
        raise CrossRateError(
            f"unable to calculate cross rate for {a.pair} and {b.pair} because they have no common parts"
        )
    return Tick(pair, price)


class IndirectNode(Node):
    """Derives a price from a chain of prices sharing assets."""

    node_type = "indirect"

    def data_point(self) -> Point:
        points = [node.data_point() for node in self._nodes]
        if not points:
            return self._error("indirect node has no branches")

        for point in points:
            try:
                point.validate()
            except ValueError as e:
                return self._error(GraphError(f"invalid tick {point.pair}: {e}"), points)
            if point.tick is None:
                return self._error(GraphError(f"expected a tick, got {type(point.value).__name__}"), points)

        resolved = points[0].tick
        time = points[0].time
        for point in points[1:]:
            try:
                resolved = cross_rate(resolved, point.tick)
            except CrossRateError as e:
                return self._error(e, points)
            time = min(time, point.time)

        if resolved.pair != self.pair:
            return self._error(
                GraphError(f"the price was resolved to the {resolved.pair} pair but the {self.pair} pair was expected"),
                points,
            )
        if len(points) == 1:
            return replace(points[0], meta=self.meta())
        return Point(value=resolved, time=time, sub_points=points, meta=self.meta())
