"""Origin interface, registry and helpers shared by on-chain origins.

An origin answers ``fetch_data_points(pairs)`` with one Point per pair it
could resolve. Neither coverage nor ordering is guaranteed; callers verify the
returned mapping. Failures for a single pair are reported as error points so
one bad pair never hides the others.

.. code-block:: python

    @register_origin
    class MyOrigin(Origin):
        name = "myorigin"

        async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
            return {pair: new_tick_point(pair, 1, origin=self.name) for pair in pairs}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Iterable

from ..bn import DecFloatPointNumber
from ..DataPoint import Point
from ..Pair import Pair

logger = logging.getLogger(__name__)


class OriginError(Exception):
    """Base exception for origin errors."""

    pass


class OriginConfigError(OriginError):
    """Raised when an origin is constructed with invalid options."""

    pass


class Origin(ABC):
    """Abstract base class for data point origins.

    :cvar name: Unique identifier of the origin type (e.g., "curve", "tick").
    """

    name: ClassVar[str] = ""

    @abstractmethod
    async def fetch_data_points(self, pairs: list[Pair]) -> dict[Pair, Point]:
        """Fetch data points for the given pairs.

        :param pairs: Pairs to fetch.
        :returns: Mapping of pair to point; pairs may be missing.
        :raises OriginError: If the whole request failed.
        """
        pass


# Registry of available origin types (populated by subclass imports)
ORIGIN_REGISTRY: dict[str, type[Origin]] = {}


def register_origin(cls: type[Origin]) -> type[Origin]:
    """Decorator to register an origin class in the global registry.

    :param cls: Origin class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If origin has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Origin {cls.__name__} must define a 'name' class variable")
    ORIGIN_REGISTRY[cls.name] = cls
    return cls


def get_origin_class(name: str) -> type[Origin]:
    """Look up an origin type by name.

    :raises OriginConfigError: If the name is unknown.
    """
    if name not in ORIGIN_REGISTRY:
        available = ", ".join(sorted(ORIGIN_REGISTRY.keys()))
        raise OriginConfigError(f"Unknown origin type '{name}'. Available: {available}")
    return ORIGIN_REGISTRY[name]


def get_available_origins() -> list[str]:
    """Get list of registered origin type names."""
    return sorted(ORIGIN_REGISTRY.keys())


class ContractAddresses(dict):
    """Mapping of ``"BASE/QUOTE"`` keys to contract addresses.

    A pair matches its own key or, failing that, the reversed key, in which
    case the contract prices the inverted pair.
    """

    def __init__(self, addresses: dict[str, str] | None = None) -> None:
        super().__init__()
        for key, address in (addresses or {}).items():
            self[key.replace(" ", "").upper()] = address

    def by_pair(self, pair: Pair) -> tuple[str | None, bool, bool]:
        """Find the contract for a pair.

        :returns: Tuple of (address, inverted, found).
        """
        address = self.get(f"{pair.base}/{pair.quote}")
        if address is not None:
            return address, False, True
        address = self.get(f"{pair.quote}/{pair.base}")
        return address, True, address is not None

    def address_by_pair(self, pair: Pair) -> tuple[str, bool]:
        """Find the contract for a pair.

        :returns: Tuple of (address, inverted).
        :raises OriginError: If neither the pair nor its inverse is configured.
        """
        address, inverted, found = self.by_pair(pair)
        if not found:
            raise OriginError(f"failed to get contract address for pair: {pair}")
        return address, inverted


def average(values: Iterable[DecFloatPointNumber]) -> DecFloatPointNumber:
    """Arithmetic mean of the per-block prices."""
    values = list(values)
    total = values[0]
    for value in values[1:]:
        total = total.add(value)
    return total.div(len(values))


def error_points(pairs: Iterable[Pair], error: BaseException, origin: str) -> dict[Pair, Point]:
    """Fail every pair of a batch with the same error."""
    return {pair: Point.from_error(error, pair, origin=origin) for pair in pairs}
