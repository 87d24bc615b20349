"""Circuit breaker comparing a price with a reference price."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..DataPoint import Point
from ..Pair import Pair
from .errors import GraphConfigError, GraphError
from .node import Node


class DeviationCircuitBreakerNode(Node):
    """Forwards the price branch unless it deviates too far from the reference.

    The first child is the price branch and the second the reference branch.
    The deviation is ``|1 - reference / price|``.

    :ivar threshold: Maximum allowed deviation, e.g. 0.05 for 5%.
    """

    node_type = "circuit_breaker"

    def __init__(self, pair: Pair, threshold: float) -> None:
        super().__init__(pair)
        if threshold <= 0:
            raise GraphConfigError(f"threshold must be positive, got {threshold}")
        self.threshold = threshold

    def meta(self) -> dict[str, Any]:
        return {"type": self.node_type, "threshold": self.threshold}

    def add_nodes(self, *nodes: Node) -> None:
        for node in nodes:
            if node.pair != self.pair:
                raise GraphConfigError(f"circuit breaker branch pair {node.pair} does not match {self.pair}")
        if len(self._nodes) + len(nodes) > 2:
            raise GraphConfigError("circuit breaker can only have two branches")
        self._nodes.extend(nodes)

    def data_point(self) -> Point:
        if len(self._nodes) != 2:
            return self._error("circuit breaker must have two branches")
        price_point = self._nodes[0].data_point()
        reference_point = self._nodes[1].data_point()
        points = [price_point, reference_point]
        for point in points:
            try:
                point.validate()
            except ValueError as e:
                return self._error(GraphError(f"invalid tick {point.pair}: {e}"), points)
            if point.tick is None:
                return self._error(GraphError(f"expected a tick, got {type(point.value).__name__}"), points)

        deviation = float((1 - reference_point.price.div(price_point.price)).abs())
        result = replace(price_point, sub_points=points, meta=self.meta())
        if deviation > self.threshold:
            result.error = GraphError(f"deviation {deviation:f} is greater than breaker {self.threshold:f}")
        return result
