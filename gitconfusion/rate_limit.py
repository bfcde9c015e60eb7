"""Backoff utilities for retrying throttled or failing requests."""

import asyncio
import logging
import random
from typing import Optional

from gitconfusion.utils import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Exponential backoff with jitter and a bounded number of retries."""

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_multiplier: float = 2.0,
        jitter_ratio: float = 0.1,
        max_retries: int = 3
    ):
        """Initialize rate limiter.

        Args:
            base_delay: Delay before the first retry in seconds.
            max_delay: Maximum delay allowed in seconds.
            backoff_multiplier: Multiplier for exponential backoff.
            jitter_ratio: Ratio of jitter to add to delays.
            max_retries: Maximum number of retries per request.
        """
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_multiplier = backoff_multiplier
        self.jitter_ratio = jitter_ratio
        self.max_retries = max_retries

    @classmethod
    def from_config(cls, config) -> "RateLimiter":
        return cls(
            base_delay=config.base_delay,
            max_delay=config.max_delay,
            backoff_multiplier=config.backoff_multiplier,
            jitter_ratio=config.jitter_ratio,
            max_retries=config.max_retries,
        )

    def _generate_jitter(self, delay: float) -> float:
        """Generate decorrelated jitter for delay.

        Args:
            delay: Base delay value.

        Returns:
            Jittered delay value, never negative.
        """
        jitter_amount = delay * self.jitter_ratio
        return max(0.0, delay + (random.random() * 2 - 1) * jitter_amount)

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            attempt: Current attempt number (0-based).

        Returns:
            Calculated delay in seconds.
        """
        delay = self.base_delay * (self.backoff_multiplier ** attempt)
        delay = min(delay, self.max_delay)
        return self._generate_jitter(delay)

    async def handle_retry(
        self,
        label: str,
        attempt: int,
        reason: str,
        retry_after: Optional[float] = None
    ) -> None:
        """Sleep before the next attempt or give up.

        Args:
            label: What is being retried, for log messages.
            attempt: Current attempt number (0-based).
            reason: Why the attempt failed.
            retry_after: Seconds to wait as specified by the server.

        Raises:
            RateLimitError: If max retries exceeded.
        """
        if attempt >= self.max_retries:
            raise RateLimitError(
                f"Max retries ({self.max_retries}) exceeded for {label}: {reason}",
                retry_after=retry_after
            )

        # Use server-specified retry_after if available, otherwise use backoff
        if retry_after is not None:
            delay = min(retry_after, self.max_delay)
        else:
            delay = self._calculate_backoff_delay(attempt)

        logger.warning(
            f"Retrying {label} (attempt {attempt + 1}/{self.max_retries}) "
            f"in {delay:.2f}s: {reason}"
        )

        await asyncio.sleep(delay)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        # HTTP-date form falls back to exponential backoff
        return None
