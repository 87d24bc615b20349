"""PriceOracle: polling loop evaluating price models and reporting the results.

Architecture:
    - Config builds the origins and the model graphs
    - Provider refreshes stale origin nodes through the Updater, then evaluates
    - Each pass prints one line per model, or the point tree as JSON
    - With a zero interval a single pass is made
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TextIO

from .DataPoint import Point
from .fetchers import BaseFetcher
from .graph import ModelNotFoundError, Provider

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("plain", "json")


def format_point(model: str, point: Point, output_format: str = "plain") -> str:
    """Render the point of a model.

    :param model: Model name.
    :param point: Evaluated point.
    :param output_format: "plain" for one line, "json" for the whole point tree.
    :returns: Rendered text without a trailing newline.
    """
    if output_format == "json":
        return json.dumps({"model": model, "point": point.to_dict()}, sort_keys=True)
    if point.error is not None:
        return f"{model}: error: {point.error}"
    time = point.time.isoformat() if point.time is not None else "-"
    if point.tick is not None:
        value = point.price
    else:
        value = point.value.print() if point.value is not None else "-"
    return f"{model}: {value} at {time}"


class PriceOracle:
    """Periodically evaluates a set of models.

    :ivar provider: Provider serving the models.
    :ivar models: Names of the models to evaluate.
    :ivar interval: Seconds between passes, 0 for a single pass.
    :ivar output_format: "plain" or "json".
    """

    def __init__(
        self,
        provider: Provider,
        models: list[str] | None = None,
        interval: float = 0,
        output_format: str = "plain",
        out: TextIO | None = None,
    ) -> None:
        """Initialize the oracle.

        :param provider: Provider serving the models.
        :param models: Models to evaluate, all of the provider's by default.
        :param interval: Seconds between passes, 0 for a single pass.
        :param output_format: "plain" or "json".
        :param out: Stream results are written to, stdout by default.
        :raises ModelNotFoundError: If a requested model does not exist.
        :raises ValueError: If the interval or format is invalid.
        """
        if interval < 0:
            raise ValueError("interval must not be negative")
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"unknown output format {output_format!r}")

        self.provider = provider
        self.models = models or provider.model_names()
        available = set(provider.model_names())
        for model in self.models:
            if model not in available:
                raise ModelNotFoundError(model)
        self.interval = interval
        self.output_format = output_format
        self.out = out or sys.stdout

    async def poll_once(self) -> dict[str, Point]:
        """Evaluate every model once and write the results."""
        points = await self.provider.data_points(*self.models)
        failed = 0
        for model in self.models:
            point = points[model]
            if point.error is not None:
                failed += 1
            print(format_point(model, point, self.output_format), file=self.out, flush=True)
        if failed:
            logger.warning(f"{failed} of {len(self.models)} models failed")
        return points

    async def run(self) -> None:
        """Run passes until cancelled, or a single pass with a zero interval."""
        logger.info(f"Evaluating {len(self.models)} models every {self.interval}s")
        try:
            while True:
                await self.poll_once()
                if not self.interval:
                    break
                await asyncio.sleep(self.interval)
        finally:
            # Clean up shared HTTP client
            await BaseFetcher.close_shared_client()
