"""Test fixtures for notification infrastructure tests."""

import threading
import time
from typing import Any, List, Mapping, Optional, Sequence, Union

import pytest

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import ChannelOption, DeliveryOutcome, Payload
from infrastructure.notifications.schema import FieldSchema, FieldType, SettingField
from infrastructure.resilience import CircuitBreakerConfig, ResilienceService, RetryPolicy
from tests.factories.notifications import make_channel_options

Scripted = Union[DeliveryOutcome, Exception]


class ScriptedAdapter(DeliveryAdapter):
    """In-memory adapter returning scripted outcomes in order.

    The last scripted outcome repeats once the script runs out; an empty
    script always delivers. Exceptions in the script are raised from send.
    """

    def __init__(
        self,
        outcomes: Optional[Sequence[Scripted]] = None,
        channels: Optional[List[ChannelOption]] = None,
        provider: str = "scripted",
        send_delay: float = 0.0,
        channel_error: Optional[Exception] = None,
        list_delay: float = 0.0,
        verify_delay: float = 0.0,
    ):
        self._outcomes = list(outcomes or [])
        self.channels = channels if channels is not None else make_channel_options()
        self._provider = provider
        self.send_delay = send_delay
        self.channel_error = channel_error
        self.list_delay = list_delay
        self.verify_delay = verify_delay
        # Set to end list/verify delays early
        self.release = threading.Event()
        self.sent: List[Payload] = []
        self.sent_settings: List[Mapping[str, Any]] = []
        self.list_calls = 0
        self._lock = threading.Lock()

    @property
    def provider_name(self) -> str:
        return self._provider

    @property
    def send_count(self) -> int:
        return len(self.sent)

    def settings_schema(self) -> FieldSchema:
        return FieldSchema(
            [
                SettingField(key="api_username", friendly_name="API Username", required=True),
                SettingField(
                    key="api_password",
                    friendly_name="API Password",
                    type=FieldType.PASSWORD,
                    required=True,
                ),
            ]
        )

    def list_channels(self, module_settings):
        with self._lock:
            self.list_calls += 1
        if self.list_delay:
            self.release.wait(self.list_delay)
        if self.channel_error is not None:
            raise self.channel_error
        return list(self.channels)

    def verify_credentials(self, module_settings):
        if self.verify_delay:
            self.release.wait(self.verify_delay)
        return super().verify_credentials(module_settings)

    def send(self, payload, module_settings):
        with self._lock:
            self.sent.append(payload)
            self.sent_settings.append(module_settings)
            if len(self._outcomes) > 1:
                scripted = self._outcomes.pop(0)
            elif self._outcomes:
                scripted = self._outcomes[0]
            else:
                scripted = DeliveryOutcome.delivered(external_id="msg-1")
        if self.send_delay:
            time.sleep(self.send_delay)
        if isinstance(scripted, Exception):
            raise scripted
        return scripted


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def scripted_adapter():
    """Factory for ScriptedAdapter instances.

    Example:
        adapter = scripted_adapter([DeliveryOutcome.transient("boom")])
    """

    def _factory(outcomes=None, **kwargs) -> ScriptedAdapter:
        return ScriptedAdapter(outcomes, **kwargs)

    return _factory


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fast_retry_policy():
    """Three attempts, no backoff delay."""
    return RetryPolicy(
        max_attempts=3,
        base_delay_seconds=0,
        max_delay_seconds=0,
        attempt_timeout_seconds=5,
    )


@pytest.fixture
def dispatcher_factory(fast_retry_policy, fake_clock):
    """Factory for NotificationDispatcher instances with fast retries.

    Breakers share the ``fake_clock`` fixture. Every dispatcher created is
    shut down after the test.
    """
    created: List[NotificationDispatcher] = []

    def _factory(
        adapter: DeliveryAdapter,
        retry_policy: Optional[RetryPolicy] = None,
        breaker_config: Optional[CircuitBreakerConfig] = None,
        **kwargs,
    ) -> NotificationDispatcher:
        kwargs.setdefault(
            "resilience",
            ResilienceService(breaker_config or CircuitBreakerConfig(), clock=fake_clock),
        )
        dispatcher = NotificationDispatcher(
            adapter=adapter,
            retry_policy=retry_policy or fast_retry_policy,
            **kwargs,
        )
        created.append(dispatcher)
        return dispatcher

    yield _factory

    for dispatcher in created:
        dispatcher.shutdown()
