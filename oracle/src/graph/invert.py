"""Node inverting the price of its single child."""

from __future__ import annotations

from ..DataPoint import Point, Tick
from ..Pair import Pair
from .errors import GraphError
from .node import SingleChildNode


class InvertNode(SingleChildNode):
    """Turns a B/A price into an A/B price.

    The 24h volume is converted from base to quote units of the child, so it
    stays expressed in the new base asset.
    """

    node_type = "invert"

    def _expected_child_pair(self) -> Pair:
        return self.pair.invert()

    def data_point(self) -> Point:
        if not self._nodes:
            return self._error("branch is not set")
        point = self._nodes[0].data_point()
        try:
            point.validate()
        except ValueError as e:
            return self._error(GraphError(f"invalid tick {point.pair}: {e}"), [point])
        tick = point.tick
        if tick is None:
            return self._error(GraphError(f"expected a tick, got {type(point.value).__name__}"), [point])

        volume = tick.volume24h.mul(tick.price) if tick.volume24h is not None else None
        return Point(
            value=Tick(tick.pair.invert(), tick.price.inv(), volume),
            time=point.time,
            sub_points=[point],
            meta=self.meta(),
        )
