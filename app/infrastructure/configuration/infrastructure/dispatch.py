"""Notification dispatch infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class DispatchSettings(InfrastructureSettings):
    """Delivery policy for the notification dispatcher.

    Controls which provider adapter is used, how failed deliveries are
    retried, how long a single attempt may take, and when a failing
    destination is short-circuited.

    Environment Variables:
        DISPATCH_PROVIDER: Adapter to use - 'messaging_api' or 'slack'
        DISPATCH_MAX_ATTEMPTS: Total send attempts per dispatch (default: 3)
        DISPATCH_BASE_DELAY_SECONDS: Base backoff delay (default: 0.5s)
        DISPATCH_MAX_DELAY_SECONDS: Backoff cap (default: 30s)
        DISPATCH_ATTEMPT_TIMEOUT_SECONDS: Per-attempt timeout (default: 10s)
        DISPATCH_MAX_WORKERS: Threads available for adapter calls (default: 8)
        DISPATCH_CIRCUIT_FAILURE_THRESHOLD: Consecutive terminal failures
            before a destination's circuit opens (default: 5)
        DISPATCH_CIRCUIT_WINDOW_SECONDS: Rolling window for counting those
            failures (default: 300s)
        DISPATCH_CIRCUIT_COOLDOWN_SECONDS: How long an open circuit rejects
            dispatches (default: 60s)
        DISPATCH_CHANNEL_CACHE_TTL_SECONDS: Channel list cache TTL per
            resolver, 0 disables caching (default: 0)

    Exponential Backoff (full jitter):
        delay = uniform(0, min(base_delay * (2 ^ attempt), max_delay))

        Example with defaults (base=0.5s, max=30s):
            Retry 1: up to 0.5s
            Retry 2: up to 1s
            Retry 3: up to 2s

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        max_attempts = settings.dispatch.max_attempts
        ```
    """

    provider: str = Field(
        default="messaging_api",
        alias="DISPATCH_PROVIDER",
        description="Delivery adapter: 'messaging_api' or 'slack'",
    )
    max_attempts: int = Field(
        default=3,
        alias="DISPATCH_MAX_ATTEMPTS",
        description="Total send attempts per dispatch",
    )
    base_delay_seconds: float = Field(
        default=0.5,
        alias="DISPATCH_BASE_DELAY_SECONDS",
        description="Base delay for exponential backoff (seconds)",
    )
    max_delay_seconds: float = Field(
        default=30.0,
        alias="DISPATCH_MAX_DELAY_SECONDS",
        description="Maximum delay for exponential backoff (seconds)",
    )
    attempt_timeout_seconds: float = Field(
        default=10.0,
        alias="DISPATCH_ATTEMPT_TIMEOUT_SECONDS",
        description="Maximum duration of a single adapter call (seconds)",
    )
    max_workers: int = Field(
        default=8,
        alias="DISPATCH_MAX_WORKERS",
        description="Worker threads for adapter calls",
    )
    circuit_failure_threshold: int = Field(
        default=5,
        alias="DISPATCH_CIRCUIT_FAILURE_THRESHOLD",
        description="Consecutive terminal failures before opening a circuit",
    )
    circuit_window_seconds: float = Field(
        default=300.0,
        alias="DISPATCH_CIRCUIT_WINDOW_SECONDS",
        description="Rolling window for counting consecutive failures (seconds)",
    )
    circuit_cooldown_seconds: float = Field(
        default=60.0,
        alias="DISPATCH_CIRCUIT_COOLDOWN_SECONDS",
        description="Cool-down before an open circuit admits a trial call (seconds)",
    )
    channel_cache_ttl_seconds: float = Field(
        default=0.0,
        alias="DISPATCH_CHANNEL_CACHE_TTL_SECONDS",
        description="Channel list cache TTL, 0 disables caching (seconds)",
    )
