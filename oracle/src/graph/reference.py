"""Node forwarding the data point of its single child.

Useful to give a shared sub-graph a name of its own inside a model.
"""

from __future__ import annotations

from dataclasses import replace

from ..DataPoint import Point
from .node import SingleChildNode


class ReferenceNode(SingleChildNode):
    node_type = "reference"

    def data_point(self) -> Point:
        if not self._nodes:
            return self._error("branch is not set")
        point = self._nodes[0].data_point()
        return replace(point, sub_points=[point], meta=self.meta())
