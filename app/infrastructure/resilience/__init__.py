"""Resilience patterns for notification delivery.

Circuit breakers per destination and the retry policy applied by the
dispatcher.
"""

from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpenError,
    CircuitState,
)
from infrastructure.resilience.retry import RetryPolicy
from infrastructure.resilience.service import ResilienceService, breaker_name

__all__ = [
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerOpenError",
    "CircuitState",
    # Retry
    "RetryPolicy",
    # Registry
    "ResilienceService",
    "breaker_name",
]
