"""Retry policy configuration.

Defines how many times a delivery is attempted and how long to wait between
attempts.
"""

import random
from dataclasses import dataclass
from typing import Optional


@dataclass
class RetryPolicy:
    """Retry policy for notification delivery.

    Attributes:
        max_attempts: Total send attempts (first try included)
        base_delay_seconds: Base delay for exponential backoff
        max_delay_seconds: Cap for exponential backoff
        attempt_timeout_seconds: Maximum duration of a single attempt

    Example:
        # Default configuration
        policy = RetryPolicy()

        # Fast retries for tests
        policy = RetryPolicy(max_attempts=5, base_delay_seconds=0)
    """

    max_attempts: int = 3
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 30.0
    attempt_timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must be >= 0")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        if self.attempt_timeout_seconds <= 0:
            raise ValueError("attempt_timeout_seconds must be positive")

    def backoff_ceiling(self, attempt: int) -> float:
        """Upper bound of the delay after the given (0-based) attempt.

        ``min(base_delay * 2^attempt, max_delay)``
        """
        return min(self.base_delay_seconds * (2 ** max(0, attempt)), self.max_delay_seconds)

    def compute_delay(
        self,
        attempt: int,
        rng: Optional[random.Random] = None,
        retry_after: Optional[float] = None,
    ) -> float:
        """Full-jitter backoff delay before the next attempt.

        Args:
            attempt: 0-based index of the attempt that just failed
            rng: Random source (defaults to the module-level generator)
            retry_after: Provider hint; the delay is at least this long,
                capped at max_delay_seconds

        Returns:
            Seconds to wait
        """
        ceiling = self.backoff_ceiling(attempt)
        delay = (rng or random).uniform(0, ceiling) if ceiling > 0 else 0.0
        if retry_after is not None:
            delay = max(delay, min(float(retry_after), self.max_delay_seconds))
        return delay
