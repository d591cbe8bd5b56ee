"""
Pause between catalog entries.

A fixed random sleep keeps the request rate polite toward IGDB. It
does not react to responses: there is no token bucket, backoff, or
429 handling here.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from game_catalog.config import PacingConfig
from game_catalog.logger import get_logger

SleepFunc = Callable[[float], Awaitable[Any]]


@dataclass
class RandomDelay:
    """
    Sleeps for a duration drawn uniformly from the configured bounds.

    Example:
        >>> pacer = RandomDelay(PacingConfig(min_delay_seconds=5, max_delay_seconds=30))
        >>> await pacer.wait()
    """

    config: PacingConfig
    sleep: SleepFunc = asyncio.sleep
    rng: random.Random = field(default_factory=random.Random)
    _logger: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize logger."""
        self._logger = get_logger(__name__, component="pacing")

    def next_delay(self) -> float:
        """Draw the next delay in seconds, within [min, max] inclusive."""
        low = self.config.min_delay_seconds
        high = self.config.max_delay_seconds
        # uniform() can round past ``high`` for some float pairs
        return min(max(self.rng.uniform(low, high), low), high)

    async def wait(self) -> float:
        """
        Sleep for one random delay.

        Returns:
            float: Seconds slept
        """
        delay = self.next_delay()
        self._logger.info("Pausing before next entry", delay_seconds=round(delay, 2))
        await self.sleep(delay)
        return delay
