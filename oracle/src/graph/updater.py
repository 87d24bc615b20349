"""Updater refreshing the origin nodes of price graphs."""

from __future__ import annotations

import asyncio
import logging

from ..DataPoint import Point
from ..origins import Origin
from ..Pair import Pair
from ..Retry import RetryPolicy
from .errors import GraphError
from .node import Node, walk
from .origin import OriginNode

logger = logging.getLogger(__name__)

MAX_CONCURRENT_UPDATES = 10


class Updater:
    """Fetches new data points for every stale origin node of the given graphs.

    Pairs are grouped by origin so each origin is queried once per update,
    and origins are queried concurrently.

    :ivar origins: Origins by name.
    :ivar timeout: Seconds allowed for one origin request, None for no limit.
    :ivar retry: Retry policy applied to origin requests.
    """

    def __init__(
        self,
        origins: dict[str, Origin],
        max_concurrency: int = MAX_CONCURRENT_UPDATES,
        timeout: float | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.origins = origins
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def update(self, *graphs: Node) -> None:
        """Update all stale origin nodes reachable from the graphs."""
        nodes: dict[tuple[str, Pair], list[OriginNode]] = {}
        pairs: dict[str, list[Pair]] = {}

        def collect(node: Node) -> None:
            if not isinstance(node, OriginNode) or node.is_fresh():
                return
            nodes.setdefault((node.origin, node.fetch_pair), []).append(node)
            origin_pairs = pairs.setdefault(node.origin, [])
            if node.fetch_pair not in origin_pairs:
                origin_pairs.append(node.fetch_pair)

        walk(collect, *graphs)
        if not nodes:
            return

        names = list(pairs)
        results = await asyncio.gather(*(self._fetch(name, pairs[name]) for name in names))
        points = dict(zip(names, results))

        failed = 0
        for (name, pair), origin_nodes in nodes.items():
            point = points[name].get(pair)
            for node in origin_nodes:
                if point is None:
                    node.warning = GraphError("origin did not return a tick")
                    failed += 1
                    continue
                try:
                    node.set_point(point)
                    node.warning = None
                except GraphError as e:
                    node.warning = e
                    failed += 1
        logger.debug(
            f"[updater] Updated {sum(len(n) for n in nodes.values()) - failed} origin nodes "
            f"from {len(names)} origins, {failed} failed"
        )

    async def _fetch(self, name: str, pairs: list[Pair]) -> dict[Pair, Point]:
        """Fetch pairs from one origin, turning failures into error points."""
        origin = self.origins.get(name)
        if origin is None:
            logger.warning(f"[updater] Unknown origin {name}")
            return {}

        async with self._semaphore:
            try:
                return await asyncio.wait_for(self.retry.run(origin.fetch_data_points, pairs), self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"[{name}] Timed out after {self.timeout}s fetching {len(pairs)} pairs")
                error: Exception = GraphError(f"origin {name} timed out after {self.timeout}s")
            except Exception as e:
                logger.warning(f"[{name}] Failed to fetch {len(pairs)} pairs: {e}")
                error = e
        return {pair: Point.from_error(error, pair, origin=name) for pair in pairs}
