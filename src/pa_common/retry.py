"""Bounded retry with exponential backoff for async operations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from config.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an operation while `should_retry(error)` holds.

    Attempt i (0-based) that fails with a retry-eligible error is retried only
    if i < max_retries, so max_retries=0 makes the first failure terminal.
    Delay starts at first_delay and is multiplied by delay_multiplier after
    every retry. Ineligible errors propagate immediately.
    """

    should_retry: Callable[[BaseException], bool]
    max_retries: int = 7
    first_delay: float = 1.0
    delay_multiplier: float = 2.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.first_delay < 0 or self.delay_multiplier < 1:
            raise ValueError("first_delay must be >= 0 and delay_multiplier >= 1")

    @classmethod
    def from_settings(cls, should_retry: Callable[[BaseException], bool]) -> "RetryPolicy":
        return cls(
            should_retry=should_retry,
            max_retries=settings.AUCTION_MAX_RETRIES,
            first_delay=settings.RETRY_FIRST_DELAY_SECONDS,
            delay_multiplier=settings.RETRY_DELAY_MULTIPLIER,
        )

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        delay = self.first_delay
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_retries or not self.should_retry(e):
                    raise
                logger.info(
                    "Retrying after %s (attempt %d/%d, sleeping %.2fs)",
                    type(e).__name__, attempt + 1, self.max_retries, delay,
                )
                await self.sleep(delay)
                delay *= self.delay_multiplier
                attempt += 1
