"""Provider evaluating named price models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..DataPoint import Point
from ..Pair import Pair
from .errors import ModelNotFoundError
from .node import Node
from .updater import Updater


@dataclass
class Model:
    """Structure of a price model, without any data.

    :ivar type: Node type, e.g. "origin" or "aggregator".
    :ivar meta: Node metadata other than the type.
    :ivar pair: Pair the node prices.
    :ivar models: Child nodes.
    """

    type: str
    meta: dict[str, Any]
    pair: Pair
    models: list[Model] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: Node) -> Model:
        meta = node.meta()
        node_type = meta.pop("type")
        return cls(node_type, meta, node.pair, [cls.from_node(child) for child in node.nodes()])

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "meta": self.meta,
            "pair": str(self.pair),
            "models": [m.to_dict() for m in self.models],
        }


class Provider:
    """Serves data points of named models, refreshing their origins first.

    .. code-block:: python

        provider = Provider({"ETH/USD": median_node}, Updater(origins))
        point = await provider.data_point("ETH/USD")
    """

    def __init__(self, models: dict[str, Node], updater: Updater) -> None:
        self._models = models
        self.updater = updater

    def model_names(self) -> list[str]:
        return sorted(self._models)

    def _node(self, name: str) -> Node:
        try:
            return self._models[name]
        except KeyError:
            raise ModelNotFoundError(name) from None

    async def data_point(self, model: str) -> Point:
        """Update and evaluate a single model.

        :raises ModelNotFoundError: If the model does not exist.
        """
        node = self._node(model)
        await self.updater.update(node)
        return node.data_point()

    async def data_points(self, *models: str) -> dict[str, Point]:
        """Update and evaluate several models in one pass.

        Each model fails on its own; errors are reported in its point.

        :raises ModelNotFoundError: If any model does not exist.
        """
        nodes = {model: self._node(model) for model in models}
        await self.updater.update(*nodes.values())
        return {model: node.data_point() for model, node in nodes.items()}

    def model(self, name: str) -> Model:
        """Describe a model without fetching data.

        :raises ModelNotFoundError: If the model does not exist.
        """
        return Model.from_node(self._node(name))

    def models(self, *names: str) -> dict[str, Model]:
        return {name: self.model(name) for name in names}
