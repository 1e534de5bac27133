"""Resilience service holding per-destination circuit breakers.

Each dispatcher owns one ResilienceService, so breaker state is scoped to
that dispatcher rather than to the process.
"""

import threading
from typing import Callable, Dict, Optional

import structlog
from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
)

logger = structlog.get_logger()


def breaker_name(provider: str, destination: str) -> str:
    """Registry key for a provider/destination pair."""
    return f"{provider}:{destination}"


class ResilienceService:
    """Registry of circuit breakers keyed by ``provider:destination``.

    Usage:
        service = ResilienceService(CircuitBreakerConfig(failure_threshold=3))
        breaker = service.get_or_create_circuit_breaker("slack:C123")

        # After a successful connection test for the provider
        service.reset_provider("slack")
    """

    def __init__(
        self,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize resilience service.

        Args:
            config: Breaker configuration applied to every new breaker.
            clock: Optional monotonic clock shared by all breakers.
        """
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._circuit_breakers: Dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    def get_or_create_circuit_breaker(self, name: str) -> CircuitBreaker:
        """Get existing circuit breaker or create it from the shared config."""
        with self._lock:
            existing = self._circuit_breakers.get(name)
            if existing is not None:
                return existing

            cb = CircuitBreaker.from_config(name, self.config, clock=self._clock)
            self._circuit_breakers[name] = cb

        logger.info(
            "circuit_breaker_created",
            name=name,
            failure_threshold=self.config.failure_threshold,
            cooldown_seconds=self.config.cooldown_seconds,
        )
        return cb

    def reset_provider(self, provider: str) -> int:
        """Reset every breaker belonging to a provider.

        Returns:
            Number of breakers reset
        """
        prefix = breaker_name(provider, "")
        with self._lock:
            breakers = [
                cb for name, cb in self._circuit_breakers.items() if name.startswith(prefix)
            ]
        for cb in breakers:
            cb.reset()
        if breakers:
            logger.info("provider_circuit_breakers_reset", provider=provider, count=len(breakers))
        return len(breakers)
