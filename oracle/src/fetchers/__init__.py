"""
Ticker fetchers for centralized exchange APIs.

This module provides a unified interface for fetching last prices and 24h
volumes from exchanges. The ``tick`` origin wraps a fetcher so its tickers
can feed the price graph.

Usage:
    from oracle.src.fetchers import get_fetcher, get_available_fetchers

    # Get list of available fetchers
    available = get_available_fetchers()
    # ['binance', 'bitstamp', 'coinbase', 'gemini', 'kraken']

    # Create a fetcher instance
    fetcher = get_fetcher("coinbase")
    ticker = await fetcher.fetch("ETH", "USD")
"""

# Import base classes and utilities
from .base import (
    FETCHER_REGISTRY,
    BaseFetcher,
    FetcherConfigError,
    FetcherError,
    FetcherHTTPError,
    Ticker,
    get_available_fetchers,
    get_fetcher,
    register_fetcher,
)

# Import all fetcher implementations to trigger registration
from .binance import BinanceFetcher
from .bitstamp import BitstampFetcher
from .coinbase import CoinbaseFetcher
from .gemini import GeminiFetcher
from .kraken import KrakenFetcher

__all__ = [
    # Base classes
    "BaseFetcher",
    "FetcherError",
    "FetcherConfigError",
    "FetcherHTTPError",
    "Ticker",
    # Registry functions
    "register_fetcher",
    "get_fetcher",
    "get_available_fetchers",
    "FETCHER_REGISTRY",
    # Fetcher implementations
    "BinanceFetcher",
    "BitstampFetcher",
    "CoinbaseFetcher",
    "GeminiFetcher",
    "KrakenFetcher",
]
