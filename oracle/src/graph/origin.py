"""Leaf node holding the latest data point fetched from an origin."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from ..DataPoint import Point, Tick
from ..Pair import Pair
from .errors import GraphConfigError, GraphError
from .node import Node

logger = logging.getLogger(__name__)


class OriginNode(Node):
    """Leaf node updated by the Updater.

    A point younger than ``freshness`` seconds is not refetched; a point older
    than ``expiry`` seconds is reported as an error.

    :ivar origin: Name of the origin to fetch from.
    :ivar fetch_pair: Pair requested from the origin, defaults to ``pair``.
    :ivar freshness: Seconds a point is considered fresh.
    :ivar expiry: Seconds after which a point expires.
    :ivar warning: Problem encountered by the last update, if any.
    """

    node_type = "origin"

    def __init__(
        self,
        origin: str,
        pair: Pair,
        fetch_pair: Pair | None = None,
        freshness: float = 60.0,
        expiry: float = 120.0,
    ) -> None:
        """Initialize the node.

        :raises GraphConfigError: If the thresholds are negative or expiry is below freshness.
        """
        super().__init__(pair)
        if freshness < 0 or expiry < 0:
            raise GraphConfigError("freshness and expiry must not be negative")
        if expiry < freshness:
            raise GraphConfigError(f"expiry {expiry} must not be lower than freshness {freshness}")
        self.origin = origin
        self.fetch_pair = fetch_pair or pair
        self.freshness = freshness
        self.expiry = expiry
        self.warning: BaseException | None = None
        self._point: Point | None = None

    def add_nodes(self, *nodes: Node) -> None:
        if nodes:
            raise GraphConfigError("origin node cannot have branches")

    def meta(self) -> dict[str, Any]:
        return {"type": self.node_type, "origin": self.origin}

    def set_point(self, point: Point) -> None:
        """Replace the current point with a newly fetched one.

        The point is relabelled with the node's pair when it was fetched under
        a different one.

        :raises GraphError: If the point is for another pair, is invalid, or
            is older than the current point.
        """
        if point.pair != self.fetch_pair:
            raise GraphError(f"unable to update origin node: incompatible pair {point.pair}")
        try:
            point.validate()
        except ValueError as e:
            raise GraphError(f"unable to update origin node: invalid tick {point.pair}: {e}") from e
        if self._point is not None and self._point.time > point.time:
            raise GraphError(f"unable to update origin node: tick too old {point.tick.print()}")

        tick = point.tick
        self._point = Point(
            value=Tick(self.pair, tick.price, tick.volume24h),
            time=point.time,
            sub_points=list(point.sub_points),
            meta={**point.meta, **self.meta()},
        )

    def is_fresh(self) -> bool:
        """Whether the current point is young enough to skip an update."""
        if self._point is None:
            return False
        return self._point.time + timedelta(seconds=self.freshness) > datetime.now(timezone.utc)

    def is_expired(self) -> bool:
        """Whether the current point is too old to be used."""
        if self._point is None:
            return False
        return datetime.now(timezone.utc) - self._point.time > timedelta(seconds=self.expiry)

    def data_point(self) -> Point:
        if self._point is None:
            return self._error(self.warning or GraphError(f"no data point fetched from {self.origin}"))
        if self.is_expired():
            return replace(self._point, error=GraphError(f"tick expired: {self._point.tick.print()}"))
        return self._point
