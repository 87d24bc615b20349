"""
Origins supplying raw data points to the price graph.

On-chain origins read contracts through a Multicall3 client; the ``tick``
origin wraps one of the exchange fetchers.

Usage:
    from oracle.src.origins import get_origin_class, MulticallClient

    client = MulticallClient(w3)
    origin = get_origin_class("uniswapV3")(
        client=client,
        contract_addresses={"WETH/USDC": "0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640"},
    )
    points = await origin.fetch_data_points([Pair("WETH", "USDC")])
"""

# Import base classes and utilities
from .base import (
    ORIGIN_REGISTRY,
    ContractAddresses,
    Origin,
    OriginConfigError,
    OriginError,
    get_available_origins,
    get_origin_class,
    register_origin,
)
from .erc20 import ERC20, ERC20Details
from .multicall import MULTICALL3_ADDRESS, AbiMethod, Call, CallResult, MulticallClient, MulticallError
from .onchain import OnChainOrigin

# Import all origin implementations to trigger registration
from .balancer_v2 import BalancerV2Origin
from .curve import CurveOrigin
from .rocketpool import RocketPoolOrigin
from .tick import TickOrigin
from .uniswap_v3 import UniswapV3Origin
from .wsteth import WstETHOrigin

__all__ = [
    # Base classes
    "Origin",
    "OnChainOrigin",
    "OriginError",
    "OriginConfigError",
    "ContractAddresses",
    # Registry functions
    "register_origin",
    "get_origin_class",
    "get_available_origins",
    "ORIGIN_REGISTRY",
    # Multicall
    "AbiMethod",
    "Call",
    "CallResult",
    "MULTICALL3_ADDRESS",
    "MulticallClient",
    "MulticallError",
    "ERC20",
    "ERC20Details",
    # Origin implementations
    "BalancerV2Origin",
    "CurveOrigin",
    "RocketPoolOrigin",
    "TickOrigin",
    "UniswapV3Origin",
    "WstETHOrigin",
]
