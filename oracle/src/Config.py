"""Config: JSON configuration of origins and price models.

Example::

    {
      "ethereum": {"rpc_url": "https://eth.llamarpc.com"},
      "origins": {
        "binance": {"type": "tick", "fetcher": "binance"},
        "uniswap": {"type": "uniswapV3", "contract_addresses": {"WETH/USDC": "0x88e6..."}}
      },
      "models": {
        "ETH/USD": {
          "type": "median",
          "min_values": 2,
          "sources": [
            {"type": "origin", "origin": "binance", "fetch_pair": "ETH/USDT"},
            {"type": "origin", "origin": "uniswap", "fetch_pair": "WETH/USDC"}
          ]
        },
        "USD/ETH": {"type": "invert", "source": "ETH/USD"}
      }
    }

A node spec without ``pair`` inherits it from its parent (the model name at
the top level, the inverted pair below an invert node). A string in place of a
node spec refers to another model.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from web3 import Web3

from .graph import (
    DeviationCircuitBreakerNode,
    GraphConfigError,
    IndirectNode,
    InvertNode,
    MedianNode,
    Node,
    OriginNode,
    Provider,
    ReferenceNode,
    Updater,
    detect_cycle,
)
from .origins import (
    MULTICALL3_ADDRESS,
    MulticallClient,
    OnChainOrigin,
    Origin,
    OriginConfigError,
    get_origin_class,
)
from .Pair import Pair
from .Retry import RetryPolicy

logger = logging.getLogger(__name__)

# Node spec keys consumed by the builder rather than passed to the node
_STRUCTURAL_KEYS = {"type", "pair", "source", "sources"}


class ConfigError(Exception):
    """Raised when the configuration is invalid."""

    pass


@dataclass
class EthereumConfig:
    """Connection settings for on-chain origins.

    :ivar rpc_url: JSON-RPC endpoint, overridden by the RPC_URL env var.
    :ivar multicall_address: Address of the Multicall3 contract.
    """

    rpc_url: str | None = None
    multicall_address: str = MULTICALL3_ADDRESS

    def client(self) -> MulticallClient:
        """Connect to the RPC endpoint.

        :raises ConfigError: If no endpoint is configured.
        """
        url = os.environ.get("RPC_URL") or self.rpc_url
        if not url:
            raise ConfigError("ethereum.rpc_url is required by on-chain origins")
        w3 = Web3(Web3.HTTPProvider(url))
        return MulticallClient(w3, self.multicall_address)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a top-level section, treating a missing or null one as empty."""
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be an object")
    return section


@dataclass
class Config:
    """Parsed configuration.

    :ivar ethereum: Connection settings.
    :ivar origins: Origin options by origin name, each with a ``type``.
    :ivar models: Node specs by model name.
    """

    ethereum: EthereumConfig = field(default_factory=EthereumConfig)
    origins: dict[str, dict[str, Any]] = field(default_factory=dict)
    models: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create a config from decoded JSON.

        :raises ConfigError: If a section has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")

        ethereum = _section(data, "ethereum")
        try:
            eth_config = EthereumConfig(**ethereum)
        except TypeError as e:
            raise ConfigError(f"invalid ethereum section: {e}") from e

        origins = _section(data, "origins")
        for name, options in origins.items():
            if not isinstance(options, dict) or "type" not in options:
                raise ConfigError(f"origin {name} must be an object with a type")

        models = _section(data, "models")

        return cls(eth_config, origins, models)

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """Load a config from a JSON file.

        :raises ConfigError: If the file cannot be read or parsed.
        """
        try:
            with open(path, "r") as file:
                data = json.load(file)
        except OSError as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in config {path}: {e}") from e
        return cls.from_dict(data)

    def build_origins(self, client: MulticallClient | None = None) -> dict[str, Origin]:
        """Instantiate every configured origin.

        :param client: Multicall client for on-chain origins. Created from the
            ethereum section when needed and not given.
        :raises ConfigError: If an origin type is unknown or its options are invalid.
        """
        origins: dict[str, Origin] = {}
        for name, options in self.origins.items():
            options = dict(options)
            origin_type = options.pop("type")
            try:
                origin_cls = get_origin_class(origin_type)
            except OriginConfigError as e:
                raise ConfigError(f"origin {name}: {e}") from e

            if issubclass(origin_cls, OnChainOrigin):
                if client is None:
                    client = self.ethereum.client()
                options["client"] = client
            try:
                origins[name] = origin_cls(**options)
            except TypeError as e:
                raise ConfigError(f"origin {name}: invalid options: {e}") from e
            except OriginConfigError as e:
                raise ConfigError(f"origin {name}: {e}") from e
            logger.debug(f"[config] Created origin {name} of type {origin_type}")
        return origins

    def build_models(self) -> dict[str, Node]:
        """Build the node graph of every model.

        Models referring to each other share nodes.

        :raises ConfigError: On unknown names, cycles, or invalid node specs.
        """
        return _ModelBuilder(self.models, set(self.origins)).build()

    def build_provider(
        self,
        client: MulticallClient | None = None,
        timeout: float | None = None,
        retry: RetryPolicy | None = None,
        max_concurrency: int = 10,
    ) -> Provider:
        """Build origins, models and the provider serving them.

        :raises ConfigError: If the configuration is invalid.
        """
        models = self.build_models()
        origins = self.build_origins(client)
        updater = Updater(origins, max_concurrency=max_concurrency, timeout=timeout, retry=retry)
        return Provider(models, updater)


class _ModelBuilder:
    """Resolves model specs into nodes, detecting cycles through model references."""

    def __init__(self, specs: dict[str, Any], origins: set[str]) -> None:
        self.specs = specs
        self.origins = origins
        self.nodes: dict[str, Node] = {}
        self._stack: list[str] = []

    def build(self) -> dict[str, Node]:
        for name in self.specs:
            self._model(name)
        for name, node in self.nodes.items():
            cycle = detect_cycle(node)
            if cycle:
                raise ConfigError(f"model {name} contains a cycle: {' -> '.join(str(n.pair) for n in cycle)}")
        return dict(self.nodes)

    def _model(self, name: str) -> Node:
        if name in self.nodes:
            return self.nodes[name]
        if name not in self.specs:
            raise ConfigError(f"unknown model {name}")
        if name in self._stack:
            path = " -> ".join(self._stack[self._stack.index(name) :] + [name])
            raise ConfigError(f"cycle detected between models: {path}")

        self._stack.append(name)
        try:
            pair = _parse_pair(name) if "/" in name else None
            node = self._node(self.specs[name], pair, name)
        finally:
            self._stack.pop()
        self.nodes[name] = node
        return node

    def _node(self, spec: Any, pair: Pair | None, model: str) -> Node:
        if isinstance(spec, str):
            return self._model(spec)
        if not isinstance(spec, dict) or "type" not in spec:
            raise ConfigError(f"model {model}: node spec must be a model name or an object with a type")

        if "pair" in spec:
            pair = _parse_pair(spec["pair"])
        if pair is None:
            raise ConfigError(f"model {model}: pair is not set for {spec['type']} node")
        options = {k: v for k, v in spec.items() if k not in _STRUCTURAL_KEYS}
        node_type = spec["type"]

        try:
            if node_type == "origin":
                return self._origin_node(options, pair, model)
            if node_type == "indirect":
                node: Node = IndirectNode(pair, **options)
                node.add_nodes(*self._children(spec, None, model))
            elif node_type == "invert":
                node = InvertNode(pair, **options)
                node.add_nodes(*self._children(spec, pair.invert(), model))
            elif node_type == "median":
                node = MedianNode(pair, **options)
                node.add_nodes(*self._children(spec, pair, model))
            elif node_type == "reference":
                node = ReferenceNode(pair, **options)
                node.add_nodes(*self._children(spec, pair, model))
            elif node_type == "circuit_breaker":
                node = DeviationCircuitBreakerNode(pair, **options)
                node.add_nodes(*self._children(spec, pair, model))
            else:
                raise ConfigError(f"model {model}: unknown node type {node_type}")
        except GraphConfigError as e:
            raise ConfigError(f"model {model}: {e}") from e
        except TypeError as e:
            raise ConfigError(f"model {model}: invalid options for {node_type} node: {e}") from e
        return node

    def _origin_node(self, options: dict[str, Any], pair: Pair, model: str) -> OriginNode:
        options = dict(options)
        origin = options.pop("origin", None)
        if origin not in self.origins:
            raise ConfigError(f"model {model}: unknown origin {origin}")
        if "fetch_pair" in options:
            options["fetch_pair"] = _parse_pair(options["fetch_pair"])
        return OriginNode(origin, pair, **options)

    def _children(self, spec: dict[str, Any], pair: Pair | None, model: str) -> list[Node]:
        if "source" in spec:
            children = [spec["source"]]
        else:
            children = spec.get("sources") or []
        if not isinstance(children, list):
            raise ConfigError(f"model {model}: sources must be a list")
        return [self._node(child, pair, model) for child in children]


def _parse_pair(value: Any) -> Pair:
    try:
        return Pair.from_string(value)
    except (ValueError, AttributeError) as e:
        raise ConfigError(f"invalid pair {value!r}") from e
