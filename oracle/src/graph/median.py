"""Median aggregator node."""

from __future__ import annotations

import logging
from typing import Any

from ..bn import DecFloatPointNumber
from ..DataPoint import Point, Tick
from ..Pair import Pair
from ..PriceAggregator import PriceAggregator
from .errors import GraphConfigError, GraphError
from .node import Node

logger = logging.getLogger(__name__)


class MedianNode(Node):
    """Median of the valid prices of its children.

    Children priced for another pair, or whose points fail validation, do not
    take part in the median but stay listed in the sub-points.

    :ivar min_values: Minimum number of valid prices required.
    :ivar aggregator: PriceAggregator computing the median.
    """

    node_type = "aggregator"

    def __init__(self, pair: Pair, min_values: int = 1, max_deviation_percent: float | None = None) -> None:
        """Initialize the node.

        :param pair: Pair the node prices.
        :param min_values: Minimum number of valid prices required.
        :param max_deviation_percent: Exclude prices deviating more than this
            from the initial median. None keeps every valid price.
        :raises GraphConfigError: If the parameters are invalid.
        """
        super().__init__(pair)
        try:
            self.aggregator = PriceAggregator(min_values, max_deviation_percent)
        except ValueError as e:
            raise GraphConfigError(str(e)) from e
        self.min_values = min_values

    def meta(self) -> dict[str, Any]:
        return {"type": self.node_type, "aggregator": "median", "min": self.min_values}

    def add_nodes(self, *nodes: Node) -> None:
        for node in nodes:
            if node.pair != self.pair:
                raise GraphConfigError(f"median branch pair {node.pair} does not match {self.pair}")
        self._nodes.extend(nodes)

    def data_point(self) -> Point:
        points = [node.data_point() for node in self._nodes]

        prices: dict[str, DecFloatPointNumber | None] = {}
        times = []
        for i, point in enumerate(points):
            source = f"{i}:{point.meta.get('origin', point.meta.get('type', ''))}"
            try:
                point.validate()
            except ValueError as e:
                logger.debug(f"[median] Skipping {source} for {self.pair}: {e}")
                continue
            if point.pair != self.pair:
                logger.debug(f"[median] Skipping {source}: expected {self.pair}, got {point.pair}")
                continue
            prices[source] = point.price
            times.append(point.time)

        result = self.aggregator.aggregate(prices)
        if not result.success:
            if result.error == "too_many_outliers":
                error = GraphError("too many outliers to calculate median")
            else:
                error = GraphError("not enough prices to calculate median")
            return self._error(error, points, available=result.metadata.get("available", 0))

        used = result.metadata["sources"]
        return Point(
            value=Tick(self.pair, result.price),
            time=min(t for source, t in zip(prices, times) if source in used),
            sub_points=points,
            meta={**self.meta(), "count": result.metadata["count"]},
        )
