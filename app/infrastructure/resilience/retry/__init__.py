"""Retry policy for notification delivery.

Usage:
    from infrastructure.resilience.retry import RetryPolicy

    policy = RetryPolicy(max_attempts=3, base_delay_seconds=0.5)
    delay = policy.compute_delay(attempt=0)
"""

from infrastructure.resilience.retry.config import RetryPolicy

__all__ = ["RetryPolicy"]
