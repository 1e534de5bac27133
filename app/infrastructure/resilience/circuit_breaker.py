"""Circuit breaker for delivery destinations.

The circuit breaker stops hammering a destination that keeps failing:
1. CLOSED state: Normal operation, deliveries pass through
2. OPEN state: Fast-fail deliveries without calling the provider
3. HALF_OPEN state: Admit a limited number of trial deliveries

State transitions:
- CLOSED -> OPEN: After failure_threshold consecutive failures inside window_seconds
- OPEN -> HALF_OPEN: After cooldown_seconds expire
- HALF_OPEN -> CLOSED: After a successful delivery
- HALF_OPEN -> OPEN: If the trial delivery fails
- any -> CLOSED: On reset() (e.g. a successful connection test)

Delivery adapters report failures as values rather than exceptions, so the
breaker exposes explicit admission and recording calls instead of wrapping
a callable:

    breaker.before_call()          # raises CircuitBreakerOpenError
    try:
        outcome = adapter.send(...)
    finally:
        ...
    breaker.record_success()  /  breaker.record_failure(reason)  /  breaker.release()
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject deliveries immediately
    HALF_OPEN = "half_open"  # Testing recovery


class CircuitBreakerOpenError(Exception):
    """Raised when the circuit is open and the delivery is rejected.

    Attributes:
        name: Circuit breaker name
        retry_after: Seconds until the circuit admits a trial call
    """

    def __init__(self, name: str, retry_after: int, message: Optional[str] = None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            message
            or f"Circuit breaker '{name}' is OPEN. Retry in {retry_after} seconds."
        )


@dataclass
class CircuitBreakerConfig:
    """Configuration shared by every destination breaker.

    Attributes:
        failure_threshold: Consecutive terminal failures before opening
        window_seconds: Failures older than this no longer count
        cooldown_seconds: How long an open circuit rejects calls
        half_open_max_calls: Trial calls admitted after cool-down
    """

    failure_threshold: int = 5
    window_seconds: float = 300.0
    cooldown_seconds: float = 60.0
    half_open_max_calls: int = 1

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if self.cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be >= 0")
        if self.half_open_max_calls < 1:
            raise ValueError("half_open_max_calls must be at least 1")


class CircuitBreaker:
    """Circuit breaker for a single provider destination.

    Args:
        name: Name of the circuit (``provider:channel``)
        failure_threshold: Consecutive failures before opening
        window_seconds: Rolling window in which failures must occur
        cooldown_seconds: Seconds to wait before attempting recovery
        half_open_max_calls: Max trial calls to allow in HALF_OPEN state
        clock: Monotonic time source (seconds)
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        window_seconds: float = 300.0,
        cooldown_seconds: float = 60.0,
        half_open_max_calls: int = 1,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.window_seconds = window_seconds
        self.cooldown_seconds = cooldown_seconds
        self.half_open_max_calls = half_open_max_calls
        self._clock = clock or time.monotonic

        # State management
        self._state = CircuitState.CLOSED
        self._failures: Deque[float] = deque()
        self._opened_at: Optional[float] = None
        self._half_open_calls = 0
        self._last_error: Optional[str] = None

        # Thread safety
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        name: str,
        config: CircuitBreakerConfig,
        clock: Optional[Callable[[], float]] = None,
    ) -> "CircuitBreaker":
        return cls(
            name=name,
            failure_threshold=config.failure_threshold,
            window_seconds=config.window_seconds,
            cooldown_seconds=config.cooldown_seconds,
            half_open_max_calls=config.half_open_max_calls,
            clock=clock,
        )

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        with self._lock:
            return self._state

    @property
    def failure_count(self) -> int:
        """Consecutive failures currently inside the rolling window."""
        with self._lock:
            self._prune(self._clock())
            return len(self._failures)

    def before_call(self) -> None:
        """Admit or reject a delivery.

        Raises:
            CircuitBreakerOpenError: If the circuit is open, or half-open with
                all trial slots taken
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                remaining = self._cooldown_remaining()
                if remaining > 0:
                    logger.warning(
                        "circuit_breaker_open",
                        name=self.name,
                        retry_in_seconds=int(remaining),
                    )
                    raise CircuitBreakerOpenError(self.name, _ceil(remaining))
                self._transition_to_half_open()

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self.half_open_max_calls:
                    logger.debug(
                        "circuit_breaker_half_open_limit",
                        name=self.name,
                        calls=self._half_open_calls,
                    )
                    raise CircuitBreakerOpenError(
                        self.name,
                        _ceil(self.cooldown_seconds),
                        f"Circuit breaker '{self.name}' is HALF_OPEN "
                        f"(max trial calls reached).",
                    )
                self._half_open_calls += 1

    def record_success(self) -> None:
        """Record a successful delivery; closes the circuit."""
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info("circuit_breaker_success_half_open", name=self.name)
                self._transition_to_closed()
            elif self._failures:
                logger.debug(
                    "circuit_breaker_failure_count_reset",
                    name=self.name,
                    previous_failures=len(self._failures),
                )
                self._failures.clear()

    def record_failure(self, error: Optional[str] = None) -> None:
        """Record a terminal delivery failure."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._failures.append(now)
            self._last_error = error

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(
                    "circuit_breaker_recovery_failed",
                    name=self.name,
                    error=error,
                )
                self._transition_to_open(now)
            elif self._state == CircuitState.CLOSED:
                if len(self._failures) >= self.failure_threshold:
                    logger.error(
                        "circuit_breaker_threshold_exceeded",
                        name=self.name,
                        failure_count=len(self._failures),
                        threshold=self.failure_threshold,
                        error=error,
                    )
                    self._transition_to_open(now)
                else:
                    logger.warning(
                        "circuit_breaker_failure",
                        name=self.name,
                        failure_count=len(self._failures),
                        threshold=self.failure_threshold,
                        error=error,
                    )

    def release(self) -> None:
        """Give back a trial slot for a call that ended without a verdict."""
        with self._lock:
            if self._state == CircuitState.HALF_OPEN and self._half_open_calls > 0:
                self._half_open_calls -= 1

    def _prune(self, now: float) -> None:
        while self._failures and now - self._failures[0] > self.window_seconds:
            self._failures.popleft()

    def _cooldown_remaining(self) -> float:
        if self._opened_at is None:
            return 0.0
        return self.cooldown_seconds - (self._clock() - self._opened_at)

    def _transition_to_closed(self):
        logger.info("circuit_breaker_closed", name=self.name)
        self._state = CircuitState.CLOSED
        self._failures.clear()
        self._opened_at = None
        self._half_open_calls = 0

    def _transition_to_open(self, now: float):
        logger.error(
            "circuit_breaker_opened",
            name=self.name,
            cooldown_seconds=self.cooldown_seconds,
        )
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._half_open_calls = 0

    def _transition_to_half_open(self):
        logger.info("circuit_breaker_half_open", name=self.name)
        self._state = CircuitState.HALF_OPEN
        self._half_open_calls = 0

    def get_stats(self) -> dict:
        """Get circuit breaker statistics."""
        with self._lock:
            self._prune(self._clock())
            return {
                "name": self.name,
                "state": self._state.value,
                "failure_count": len(self._failures),
                "retry_after": (
                    _ceil(max(0.0, self._cooldown_remaining()))
                    if self._state == CircuitState.OPEN
                    else None
                ),
                "last_error": self._last_error,
                "half_open_calls": self._half_open_calls,
            }

    def reset(self):
        """Reset the breaker to CLOSED (connection verified or admin action)."""
        with self._lock:
            logger.info("circuit_breaker_manual_reset", name=self.name)
            self._transition_to_closed()


def _ceil(seconds: float) -> int:
    whole = int(seconds)
    return whole if whole == seconds else whole + 1
