"""Retry policy for idempotent async reads.

Only leaf-level origin calls are retried; graph evaluation and pool math never
are. Cancellation is not retried: a cancelled wait or call propagates at once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an async call a fixed number of times with a fixed delay.

    :ivar attempts: Total number of attempts, at least one.
    :ivar delay: Seconds to wait between attempts.
    :ivar retry_on: Exception types that trigger another attempt.

    .. code-block:: python

        >>> policy = RetryPolicy(attempts=3, delay=0.5)
        >>> result = await policy.run(client.aggregate, calls, block)
    """

    attempts: int = 1
    delay: float = 0.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    async def run(self, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Call ``fn`` until it succeeds or the attempts are exhausted.

        :param fn: Coroutine function to call.
        :returns: The first successful result.
        :raises Exception: The error of the last attempt.
        """
        for attempt in range(1, self.attempts + 1):
            try:
                return await fn(*args, **kwargs)
            except self.retry_on as e:
                if attempt == self.attempts:
                    raise
                logger.debug(f"Attempt {attempt}/{self.attempts} failed: {e}; retrying in {self.delay}s")
            await asyncio.sleep(self.delay)
        raise AssertionError("unreachable")
