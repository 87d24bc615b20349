"""
Composable price graph.

A price model is a directed acyclic graph of nodes:
- OriginNode: leaf holding the latest point fetched from an origin
- IndirectNode: cross rate over a chain of prices sharing assets
- InvertNode: inverse of its child
- MedianNode: median of its children
- ReferenceNode: forwards its child
- DeviationCircuitBreakerNode: fails when a price strays from a reference

The Updater refreshes stale origin nodes; the Provider evaluates models by name.
"""

from .breaker import DeviationCircuitBreakerNode
from .errors import CrossRateError, GraphConfigError, GraphError, ModelNotFoundError
from .indirect import IndirectNode, cross_rate
from .invert import InvertNode
from .median import MedianNode
from .node import Node, detect_cycle, walk
from .origin import OriginNode
from .provider import Model, Provider
from .reference import ReferenceNode
from .updater import Updater

__all__ = [
    "CrossRateError",
    "DeviationCircuitBreakerNode",
    "GraphConfigError",
    "GraphError",
    "IndirectNode",
    "InvertNode",
    "MedianNode",
    "Model",
    "ModelNotFoundError",
    "Node",
    "OriginNode",
    "Provider",
    "ReferenceNode",
    "Updater",
    "cross_rate",
    "detect_cycle",
    "walk",
]
