"""Base class of graph nodes and graph traversal helpers.

A model is a directed acyclic graph whose leaves are origin nodes. Every
other node derives its data point from the data points of its children, so
evaluating a model is a plain recursive call of :meth:`Node.data_point`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from ..DataPoint import Point
from ..Pair import Pair
from .errors import GraphConfigError


class Node(ABC):
    """A node of the price graph.

    :ivar pair: Pair the node prices.
    """

    # Value of meta()["type"]
    node_type: str = ""

    def __init__(self, pair: Pair) -> None:
        self.pair = pair
        self._nodes: list[Node] = []

    def nodes(self) -> list[Node]:
        """Children of the node, in the order they were added."""
        return list(self._nodes)

    def add_nodes(self, *nodes: Node) -> None:
        """Attach children to the node.

        :raises GraphConfigError: If the node does not accept the children.
        """
        self._nodes.extend(nodes)

    def meta(self) -> dict[str, Any]:
        """Static description of the node, always containing ``"type"``."""
        return {"type": self.node_type}

    @abstractmethod
    def data_point(self) -> Point:
        """Evaluate the node.

        Errors are reported through ``Point.error``; this method does not raise.
        """
        pass

    def _error(self, error: BaseException | str, sub_points: list[Point] | None = None, **meta: Any) -> Point:
        point = Point.from_error(error, self.pair, **{**self.meta(), **meta})
        point.sub_points = list(sub_points or [])
        return point

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pair})"


class SingleChildNode(Node):
    """Node that accepts exactly one child, added in a single call."""

    def add_nodes(self, *nodes: Node) -> None:
        if self._nodes:
            raise GraphConfigError("branch already exists")
        if len(nodes) != 1:
            raise GraphConfigError(f"expected 1 branch, got {len(nodes)}")
        expected = self._expected_child_pair()
        if nodes[0].pair != expected:
            raise GraphConfigError(f"expected pair {expected}, got {nodes[0].pair}")
        self._nodes.append(nodes[0])

    def _expected_child_pair(self) -> Pair:
        return self.pair


def walk(fn: Callable[[Node], None], *nodes: Node) -> None:
    """Call ``fn`` once for every node reachable from ``nodes``.

    Nodes shared between graphs are visited once. Parents are visited before
    their children.
    """
    visited: set[int] = set()

    def visit(node: Node) -> None:
        if id(node) in visited:
            return
        visited.add(id(node))
        fn(node)
        for child in node.nodes():
            visit(child)

    for node in nodes:
        visit(node)


def detect_cycle(node: Node) -> list[Node]:
    """Find a cycle reachable from ``node``.

    :returns: Path from ``node`` to the node that closes the cycle, or an
        empty list if the graph is acyclic.
    """
    visited: set[int] = set()

    def check(current: Node, path: list[Node]) -> list[Node]:
        if any(parent is current for parent in path):
            return path
        if id(current) in visited:
            return []
        visited.add(id(current))
        path = path + [current]
        for child in current.nodes():
            cycle = check(child, path)
            if cycle:
                return cycle
        return []

    return check(node, [])
