#!/usr/bin/env python3
"""Price Oracle.

Derives prices from exchange tickers and on-chain pools through configurable
price models (medians, cross rates, inversions and circuit breakers).

Configuration is a JSON file describing origins and models; see
oracle/src/Config.py for the format.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.Config import Config, ConfigError
from .src.fetchers import get_available_fetchers
from .src.graph import ModelNotFoundError
from .src.origins import get_available_origins
from .src.PriceOracle import OUTPUT_FORMATS, PriceOracle
from .src.Retry import RetryPolicy

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def parse_models(models_str: str | None) -> list[str]:
    """Parse a comma-separated list of model names.

    :param models_str: Comma-separated model names, e.g. "ETH/USD,BTC/USD".
    :returns: Model names, empty for all models.
    """
    if not models_str:
        return []
    return [m.strip() for m in models_str.split(",") if m.strip()]


def main() -> None:
    """Main entry point for the Price Oracle CLI."""
    parser = argparse.ArgumentParser(
        description="Price Oracle: composable price models over exchange and on-chain origins",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available origin types:
  {', '.join(get_available_origins())}

Available exchange fetchers (origin type "tick"):
  {', '.join(get_available_fetchers())}

Examples:
  # Evaluate all models once
  python -m oracle.main --config config.json

  # Poll two models every 30 seconds as JSON
  python -m oracle.main --config config.json --models ETH/USD,BTC/USD \\
      --interval 30 --format json

Environment variables (CLI args take precedence):
  CONFIG, MODELS, INTERVAL, FETCH_TIMEOUT, RETRY_ATTEMPTS, RETRY_DELAY, RPC_URL
""",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to the JSON configuration file",
        default=os.environ.get("CONFIG") or "config.json",
    )

    parser.add_argument(
        "--models",
        type=str,
        help="Comma-separated models to evaluate (default: all)",
        default=os.environ.get("MODELS"),
    )

    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between evaluations, 0 to run once (default: 0)",
        default=float(os.environ.get("INTERVAL") or "0"),
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout for a single origin request in seconds (default: 10.0)",
        default=float(os.environ.get("FETCH_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "--retry-attempts",
        dest="retry_attempts",
        type=int,
        help="Attempts per origin request (default: 3)",
        default=int(os.environ.get("RETRY_ATTEMPTS") or "3"),
    )

    parser.add_argument(
        "--retry-delay",
        dest="retry_delay",
        type=float,
        help="Seconds between attempts (default: 1.0)",
        default=float(os.environ.get("RETRY_DELAY") or "1.0"),
    )

    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        help="Output format (default: plain)",
        default="plain",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    if args.interval < 0:
        parser.error("--interval must not be negative")

    if args.timeout <= 0:
        parser.error("--timeout must be positive")

    if args.retry_attempts < 1:
        parser.error("--retry-attempts must be at least 1")

    if args.retry_delay < 0:
        parser.error("--retry-delay must not be negative")

    try:
        config = Config.load(args.config)
        provider = config.build_provider(
            timeout=args.timeout,
            retry=RetryPolicy(attempts=args.retry_attempts, delay=args.retry_delay),
        )
        oracle = PriceOracle(
            provider,
            models=parse_models(args.models),
            interval=args.interval,
            output_format=args.format,
        )
    except (ConfigError, ModelNotFoundError) as e:
        parser.error(str(e))

    # Log configuration
    logger.info("=" * 60)
    logger.info("Price Oracle")
    logger.info("=" * 60)
    logger.info(f"Config:            {args.config}")
    logger.info(f"Origins:           {', '.join(config.origins) or '-'}")
    logger.info(f"Models:            {', '.join(oracle.models)}")
    logger.info(f"Interval:          {args.interval}s" if args.interval else "Interval:          run once")
    logger.info(f"Fetch Timeout:     {args.timeout}s")
    logger.info(f"Retry:             {args.retry_attempts} attempts, {args.retry_delay}s delay")
    logger.info("=" * 60)

    try:
        asyncio.run(oracle.run())
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
