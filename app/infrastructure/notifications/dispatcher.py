"""Notification dispatcher for channel-bound delivery.

Drives one notification through validation, channel resolution, rendering
and delivery:
- Rejects dispatches with no channel or missing rule settings up front
- Short-circuits destinations whose circuit breaker is open
- Resolves the selected channel under the same timeout and cancellation as sends
- Sends with a per-attempt timeout, bounded retries and full-jitter backoff
- Honours caller cancellation before, during and between attempts

Every failure comes back as a DeliveryOutcome; nothing is raised to the caller.

Usage Example:
    from infrastructure.notifications import (
        MessagingApiAdapter,
        Notification,
        NotificationDispatcher,
    )

    with NotificationDispatcher(adapter=MessagingApiAdapter()) as dispatcher:
        outcome = dispatcher.deliver(
            Notification(title="New Order", message="Order #1042 was placed"),
            module_settings={"api_url": "...", "api_username": "...", "api_password": "..."},
            notification_settings={"channel": "2", "botname": "Billing Bot"},
        )

    if not outcome.is_success:
        logger.warning("delivery_failed", reason=outcome.reason.value)
"""

import random
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, TYPE_CHECKING

import structlog

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.errors import (
    ChannelNotFoundError,
    ChannelSourceError,
    SettingsValidationError,
)
from infrastructure.notifications.models import (
    DeliveryOutcome,
    ErrorKind,
    Notification,
    Payload,
)
from infrastructure.notifications.renderer import PayloadRenderer
from infrastructure.notifications.resolver import ChannelResolver, NO_CHANNEL_SELECTED
from infrastructure.notifications.schema import (
    CHANNEL_FIELD,
    NOTIFICATION_SETTINGS_SCHEMA,
    FieldSchema,
    is_blank,
)
from infrastructure.operations import OperationResult
from infrastructure.resilience import (
    CircuitBreakerConfig,
    CircuitBreakerOpenError,
    ResilienceService,
    RetryPolicy,
    breaker_name,
)

if TYPE_CHECKING:
    from infrastructure.configuration import DispatchSettings

logger = structlog.get_logger()

# How often a pending worker call or backoff sleep checks for cancellation
POLL_INTERVAL_SECONDS = 0.05

# Results of a bounded worker call
CALL_DONE = "done"
CALL_CANCELLED = "cancelled"
CALL_TIMED_OUT = "timed_out"

# Only these failures count against a destination's circuit breaker
BREAKER_FAILURE_KINDS = frozenset(
    {ErrorKind.TRANSIENT_DELIVERY_ERROR, ErrorKind.PERMANENT_DELIVERY_ERROR}
)


class DispatchState(Enum):
    """Dispatch lifecycle states.

    IDLE -> RESOLVING -> RENDERING -> SENDING -> DELIVERED | FAILED
    """

    IDLE = "idle"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    SENDING = "sending"
    DELIVERED = "delivered"
    FAILED = "failed"


class NotificationDispatcher:
    """Single-adapter notification dispatcher.

    Owns its worker pool, channel resolver and circuit breaker registry, so
    two dispatchers never share state. ``deliver`` may be called from
    several threads at once; only breaker state is shared between calls.

    Attributes:
        adapter: DeliveryAdapter used for channel listing and sends
        resolver: ChannelResolver (defaults to one backed by the adapter)
        renderer: PayloadRenderer
        retry_policy: RetryPolicy for attempts, backoff and timeouts
        resilience: ResilienceService holding ``provider:channel`` breakers
        notification_schema: Rule-level settings schema

    Example:
        dispatcher = NotificationDispatcher(
            adapter=SlackDeliveryAdapter(),
            retry_policy=RetryPolicy(max_attempts=5),
        )
        outcome = dispatcher.deliver(notification, module_settings, rule_settings)
        dispatcher.shutdown()
    """

    def __init__(
        self,
        adapter: DeliveryAdapter,
        resolver: Optional[ChannelResolver] = None,
        renderer: Optional[PayloadRenderer] = None,
        retry_policy: Optional[RetryPolicy] = None,
        resilience: Optional[ResilienceService] = None,
        notification_schema: FieldSchema = NOTIFICATION_SETTINGS_SCHEMA,
        max_workers: int = 8,
        rng: Optional[random.Random] = None,
    ):
        """Initialize notification dispatcher.

        Args:
            adapter: Provider delivery adapter
            resolver: Channel resolver; defaults to the adapter as channel source
            renderer: Payload renderer
            retry_policy: Retry/backoff/timeout policy
            resilience: Circuit breaker registry
            notification_schema: Rule-level settings schema
            max_workers: Worker threads for adapter calls
            rng: Random source for backoff jitter
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.adapter = adapter
        self.resolver = resolver or ChannelResolver(adapter)
        self.renderer = renderer or PayloadRenderer()
        self.retry_policy = retry_policy or RetryPolicy()
        self.resilience = resilience or ResilienceService()
        self.notification_schema = notification_schema
        self._rng = rng
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notification-dispatch"
        )
        self._closed = threading.Event()

        logger.info(
            "initialized_notification_dispatcher",
            provider=adapter.provider_name,
            max_attempts=self.retry_policy.max_attempts,
            attempt_timeout_seconds=self.retry_policy.attempt_timeout_seconds,
            max_workers=max_workers,
        )

    @classmethod
    def from_settings(
        cls,
        adapter: DeliveryAdapter,
        dispatch: "DispatchSettings",
        **kwargs: Any,
    ) -> "NotificationDispatcher":
        """Build a dispatcher from DispatchSettings."""
        kwargs.setdefault(
            "retry_policy",
            RetryPolicy(
                max_attempts=dispatch.max_attempts,
                base_delay_seconds=dispatch.base_delay_seconds,
                max_delay_seconds=dispatch.max_delay_seconds,
                attempt_timeout_seconds=dispatch.attempt_timeout_seconds,
            ),
        )
        kwargs.setdefault(
            "resilience",
            ResilienceService(
                CircuitBreakerConfig(
                    failure_threshold=dispatch.circuit_failure_threshold,
                    window_seconds=dispatch.circuit_window_seconds,
                    cooldown_seconds=dispatch.circuit_cooldown_seconds,
                )
            ),
        )
        kwargs.setdefault(
            "resolver",
            ChannelResolver(adapter, ttl_seconds=dispatch.channel_cache_ttl_seconds),
        )
        kwargs.setdefault("max_workers", dispatch.max_workers)
        return cls(adapter=adapter, **kwargs)

    @property
    def provider(self) -> str:
        return self.adapter.provider_name

    def deliver(
        self,
        notification: Notification,
        module_settings: Optional[Mapping[str, Any]],
        notification_settings: Optional[Mapping[str, Any]],
        cancel_event: Optional[threading.Event] = None,
    ) -> DeliveryOutcome:
        """Deliver a notification to the channel selected in the rule settings.

        Process:
        1. Reject an empty channel selection (no adapter call)
        2. Reject missing required rule settings
        3. Reject the dispatch while the destination's circuit is open
        4. Resolve the channel against the adapter's channel list
        5. Render the payload
        6. Send, retrying retryable failures with backoff

        Args:
            notification: Notification built by the host
            module_settings: Provider credentials, passed through to the adapter
            notification_settings: Rule settings (``channel``, ``botname``)
            cancel_event: Optional event; setting it aborts the dispatch

        Returns:
            DeliveryOutcome (never raises)
        """
        frozen_settings = MappingProxyType(dict(module_settings or {}))
        rule_settings = dict(notification_settings or {})
        channel_value = rule_settings.get(CHANNEL_FIELD)
        self._transition(DispatchState.IDLE, None)

        if is_blank(channel_value):
            return self._fail(
                DeliveryOutcome.failed(ErrorKind.VALIDATION_ERROR, NO_CHANNEL_SELECTED)
            )

        try:
            rule_settings = self.notification_schema.validate(rule_settings)
        except SettingsValidationError as e:
            return self._fail(
                DeliveryOutcome.failed(ErrorKind.VALIDATION_ERROR, e.message)
            )

        destination = str(channel_value).strip()
        if self._is_cancelled(cancel_event):
            return self._fail(self._cancelled(destination, attempts=0))

        breaker = self.resilience.get_or_create_circuit_breaker(
            breaker_name(self.provider, destination)
        )
        try:
            breaker.before_call()
        except CircuitBreakerOpenError as e:
            return self._fail(
                DeliveryOutcome.failed(
                    ErrorKind.CIRCUIT_OPEN,
                    f"Delivery to channel {destination} is temporarily suspended "
                    f"after repeated failures. Retry in {e.retry_after} seconds.",
                    retryable=True,
                    error_code="CIRCUIT_OPEN",
                    retry_after=e.retry_after,
                ),
                channel=destination,
            )

        verdict_recorded = False
        try:
            self._transition(DispatchState.RESOLVING, destination)
            status, future = self._run_bounded(
                cancel_event, self.resolver.resolve, destination, frozen_settings
            )
            if status == CALL_CANCELLED:
                return self._fail(self._cancelled(destination, attempts=0))
            if status == CALL_TIMED_OUT:
                return self._fail(
                    DeliveryOutcome.failed(
                        ErrorKind.TRANSIENT_DELIVERY_ERROR,
                        "Channel lookup timed out after "
                        f"{self.retry_policy.attempt_timeout_seconds} seconds",
                        retryable=True,
                        error_code="TIMEOUT",
                    ),
                    channel=destination,
                )
            try:
                channel = future.result()
            except ChannelNotFoundError as e:
                return self._fail(
                    DeliveryOutcome.failed(
                        ErrorKind.NOT_FOUND, e.message, error_code="CHANNEL_NOT_FOUND"
                    ),
                    channel=destination,
                )
            except ChannelSourceError as e:
                return self._fail(
                    DeliveryOutcome.from_operation_result(e.result),
                    channel=destination,
                )

            self._transition(DispatchState.RENDERING, destination)
            try:
                payload = self.renderer.render(notification, channel, rule_settings)
            except ValueError as e:
                return self._fail(
                    DeliveryOutcome.failed(
                        ErrorKind.VALIDATION_ERROR,
                        f"Notification could not be rendered: {str(e)}",
                    ),
                    channel=destination,
                )

            self._transition(DispatchState.SENDING, destination)
            outcome = self._send_with_retry(payload, frozen_settings, cancel_event)

            if outcome.is_success:
                breaker.record_success()
                verdict_recorded = True
                self._transition(DispatchState.DELIVERED, destination)
                logger.info(
                    "notification_delivered",
                    provider=self.provider,
                    channel=destination,
                    attempts=outcome.attempts,
                    external_id=outcome.external_id,
                )
                return outcome

            if outcome.reason in BREAKER_FAILURE_KINDS:
                breaker.record_failure(outcome.message)
                verdict_recorded = True
            return self._fail(outcome, channel=destination)
        finally:
            if not verdict_recorded:
                breaker.release()

    def test_connection(
        self,
        module_settings: Optional[Mapping[str, Any]],
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Check provider credentials; success closes the provider's circuits.

        The check runs on the worker pool under the attempt timeout. A timeout
        is reported as a retryable TIMEOUT error.
        """
        frozen_settings = MappingProxyType(dict(module_settings or {}))
        timeout = self.retry_policy.attempt_timeout_seconds
        status, future = self._run_bounded(
            cancel_event, self.adapter.test_connection, frozen_settings
        )
        if status == CALL_CANCELLED:
            logger.info("connection_test_cancelled", provider=self.provider)
            return OperationResult.transient_error(
                "Connection test was cancelled.", error_code="CANCELLED"
            )
        if status == CALL_TIMED_OUT:
            logger.warning(
                "connection_test_timed_out",
                provider=self.provider,
                timeout_seconds=timeout,
            )
            return OperationResult.transient_error(
                f"Connection test timed out after {timeout} seconds",
                error_code="TIMEOUT",
            )

        try:
            result = future.result()
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "connection_test_error",
                provider=self.provider,
                error=str(e),
                exc_info=True,
            )
            return OperationResult.transient_error(
                f"Connection test failed: {str(e)}", error_code="CONNECTION_TEST_ERROR"
            )

        if result.is_success:
            self.resilience.reset_provider(self.provider)
        logger.info(
            "connection_tested",
            provider=self.provider,
            status=result.status.value,
            error_code=result.error_code,
        )
        return result

    def shutdown(self, wait_for_pending: bool = False) -> None:
        """Stop accepting dispatches and release the worker pool.

        In-flight dispatches observe the shutdown as a cancellation.
        """
        self._closed.set()
        self._executor.shutdown(wait=wait_for_pending, cancel_futures=True)
        logger.info("notification_dispatcher_shutdown", provider=self.provider)

    def __enter__(self) -> "NotificationDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _send_with_retry(
        self,
        payload: Payload,
        module_settings: Mapping[str, Any],
        cancel_event: Optional[threading.Event],
    ) -> DeliveryOutcome:
        """Run send attempts until delivered, non-retryable, exhausted or cancelled."""
        policy = self.retry_policy
        last_outcome: Optional[DeliveryOutcome] = None
        attempts = 0

        for attempt in range(policy.max_attempts):
            if self._is_cancelled(cancel_event):
                return self._cancelled(payload.channel, attempts)

            attempts += 1
            outcome = self._attempt(payload, module_settings, cancel_event)
            outcome = outcome.model_copy(update={"attempts": attempts})

            if outcome.is_success or not outcome.retryable:
                return outcome

            last_outcome = outcome
            if attempts >= policy.max_attempts:
                break

            delay = policy.compute_delay(
                attempt, rng=self._rng, retry_after=outcome.retry_after
            )
            logger.warning(
                "delivery_retry_scheduled",
                provider=self.provider,
                channel=payload.channel,
                attempt=attempts,
                max_attempts=policy.max_attempts,
                delay_seconds=round(delay, 3),
                error=outcome.message,
                error_code=outcome.error_code,
            )
            if self._sleep(delay, cancel_event):
                return self._cancelled(payload.channel, attempts)

        logger.error(
            "delivery_retries_exhausted",
            provider=self.provider,
            channel=payload.channel,
            attempts=attempts,
            error=last_outcome.message,
        )
        return last_outcome.model_copy(update={"retryable": False})

    def _attempt(
        self,
        payload: Payload,
        module_settings: Mapping[str, Any],
        cancel_event: Optional[threading.Event],
    ) -> DeliveryOutcome:
        """One adapter send, bounded by the attempt timeout."""
        timeout = self.retry_policy.attempt_timeout_seconds
        status, future = self._run_bounded(
            cancel_event, self.adapter.send, payload, module_settings
        )
        if status == CALL_CANCELLED:
            return self._cancelled(payload.channel, attempts=0)

        if status == CALL_TIMED_OUT:
            logger.warning(
                "delivery_attempt_timed_out",
                provider=self.provider,
                channel=payload.channel,
                timeout_seconds=timeout,
            )
            return DeliveryOutcome.failed(
                ErrorKind.TRANSIENT_DELIVERY_ERROR,
                f"Delivery attempt timed out after {timeout} seconds",
                retryable=self.adapter.retry_on_timeout,
                error_code="TIMEOUT",
            )

        try:
            outcome = future.result()
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "delivery_adapter_exception",
                provider=self.provider,
                channel=payload.channel,
                error=str(e),
                exc_info=True,
            )
            return DeliveryOutcome.transient(
                f"Adapter exception: {str(e)}", error_code="ADAPTER_EXCEPTION"
            )

        if not isinstance(outcome, DeliveryOutcome):
            logger.error(
                "delivery_adapter_invalid_outcome",
                provider=self.provider,
                outcome_type=type(outcome).__name__,
            )
            return DeliveryOutcome.permanent(
                "Adapter returned an invalid delivery outcome",
                error_code="INVALID_OUTCOME",
            )
        return outcome

    def _run_bounded(
        self,
        cancel_event: Optional[threading.Event],
        fn: Callable[..., Any],
        *args: Any,
    ) -> Tuple[str, Optional[Future]]:
        """Run ``fn`` on the worker pool, waiting at most the attempt timeout.

        Returns:
            ``(CALL_DONE, future)`` once ``fn`` finished (result or exception),
            ``(CALL_CANCELLED, None)`` if cancelled or shut down while waiting,
            ``(CALL_TIMED_OUT, None)`` if the deadline passed first
        """
        try:
            future: Future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor already shut down
            return CALL_CANCELLED, None

        deadline = time.monotonic() + self.retry_policy.attempt_timeout_seconds
        while not future.done():
            if self._is_cancelled(cancel_event):
                future.cancel()
                return CALL_CANCELLED, None
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            wait([future], timeout=min(POLL_INTERVAL_SECONDS, remaining))

        if not future.done():
            future.cancel()
            return CALL_TIMED_OUT, None
        return CALL_DONE, future

    def _sleep(self, delay: float, cancel_event: Optional[threading.Event]) -> bool:
        """Backoff sleep; returns True if cancelled while waiting."""
        deadline = time.monotonic() + delay
        while True:
            if self._is_cancelled(cancel_event):
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            waiter = cancel_event if cancel_event is not None else self._closed
            waiter.wait(min(remaining, POLL_INTERVAL_SECONDS))

    def _is_cancelled(self, cancel_event: Optional[threading.Event]) -> bool:
        if self._closed.is_set():
            return True
        return cancel_event is not None and cancel_event.is_set()

    def _cancelled(self, channel: str, attempts: int) -> DeliveryOutcome:
        logger.info(
            "dispatch_cancelled", provider=self.provider, channel=channel, attempts=attempts
        )
        return DeliveryOutcome.failed(
            ErrorKind.CANCELLED,
            "Notification dispatch was cancelled.",
            error_code="CANCELLED",
            attempts=attempts,
        )

    def _transition(self, state: DispatchState, channel: Optional[str]) -> None:
        logger.debug(
            "dispatch_state_changed",
            provider=self.provider,
            channel=channel,
            state=state.value,
        )

    def _fail(
        self, outcome: DeliveryOutcome, channel: Optional[str] = None
    ) -> DeliveryOutcome:
        self._transition(DispatchState.FAILED, channel)
        logger.warning(
            "notification_delivery_failed",
            provider=self.provider,
            channel=channel,
            reason=outcome.reason.value if outcome.reason else None,
            error=outcome.message,
            error_code=outcome.error_code,
            retryable=outcome.retryable,
            attempts=outcome.attempts,
        )
        return outcome
