"""
Start-up Retry Policy

Exponential backoff with jitter for opening the connection pool. Repository
operations are never retried; a failed statement surfaces to the caller.
"""

import logging
import random
from dataclasses import dataclass

from enterprise_registry.application.interfaces.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Backoff settings for a bounded retry loop."""

    max_retries: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: float = 60.0  # seconds
    backoff_multiplier: float = 2.0

    jitter: bool = True
    jitter_range: float = 0.1  # fraction of the delay, 0.1 = +/-10%

    retryable_exceptions: tuple[type[BaseException], ...] = (
        ConnectionError,
        TimeoutError,
        OSError,
    )
    # Checked first; retrying these cannot succeed
    non_retryable_exceptions: tuple[type[BaseException], ...] = (
        AuthenticationError,
        ValueError,
        TypeError,
    )

    def __post_init__(self) -> None:
        checks = (
            (self.max_retries >= 0, "max_retries must be non-negative"),
            (self.initial_delay > 0, "initial_delay must be positive"),
            (self.max_delay > 0, "max_delay must be positive"),
            (self.backoff_multiplier > 1.0, "backoff_multiplier must be greater than 1.0"),
            (0 <= self.jitter_range <= 1, "jitter_range must be between 0 and 1"),
        )
        for valid, message in checks:
            if not valid:
                raise ValueError(message)

    @property
    def max_attempts(self) -> int:
        """Total attempts, the first one included."""
        return self.max_retries + 1


class ExponentialBackoff:
    """Computes the wait between attempts."""

    MIN_DELAY = 0.1

    def __init__(self, config: RetryConfig) -> None:
        self.config = config

    def base_delay(self, attempt: int) -> float:
        """Delay before jitter, capped at max_delay."""
        grown = self.config.initial_delay * self.config.backoff_multiplier**attempt
        return min(grown, self.config.max_delay)

    def get_delay(self, attempt: int) -> float:
        """
        Delay to wait after a failed attempt.

        Args:
            attempt: 0-based number of the attempt that just failed

        Returns:
            Seconds to sleep, 0.0 for a negative attempt
        """
        if attempt < 0:
            return 0.0

        delay = self.base_delay(attempt)
        if not self.config.jitter:
            return delay

        spread = delay * self.config.jitter_range
        return max(self.MIN_DELAY, delay + random.uniform(-spread, spread))

    def get_delays(self, max_attempts: int) -> list[float]:
        return [self.get_delay(attempt) for attempt in range(max_attempts)]


def is_retryable_exception(exception: BaseException, config: RetryConfig) -> bool:
    """Tell whether another attempt may succeed; unknown errors are not retried."""
    if isinstance(exception, config.non_retryable_exceptions):
        return False
    return isinstance(exception, config.retryable_exceptions)
