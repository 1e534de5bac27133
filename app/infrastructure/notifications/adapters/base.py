"""Delivery adapter abstract base class.

Every messaging provider implements this interface. The dispatcher only
depends on this contract, so providers can be swapped without touching
dispatch, retry or circuit-breaking code.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from infrastructure.notifications.models import ChannelOption, DeliveryOutcome, Payload
from infrastructure.notifications.schema import FieldSchema
from infrastructure.operations import OperationResult

LOGIN_FAILED_MESSAGE = (
    "API Login Failed. Please check your credentials input and try again."
)


class DeliveryAdapter(ABC):
    """Abstract base class for provider delivery adapters.

    Implementations own all provider-specific authentication and wire
    format concerns. Their main obligation is classification: every failure
    must come back as a DeliveryOutcome marked retryable (timeouts,
    connection errors, 5xx, rate limits) or not (auth failures, malformed
    payloads, other 4xx). Lower-level exceptions must not escape ``send``.

    Attributes:
        retry_on_timeout: Whether the dispatcher may retry an attempt that
            exceeded its timeout. Adapters whose sends are not safe to
            repeat after an unknown result set this to False.

    Example Implementation:
        class EchoAdapter(DeliveryAdapter):

            @property
            def provider_name(self) -> str:
                return "echo"

            def settings_schema(self) -> FieldSchema:
                return FieldSchema([])

            def list_channels(self, module_settings):
                return [ChannelOption(id="1", name="Echo")]

            def send(self, payload, module_settings) -> DeliveryOutcome:
                print(payload.to_json())
                return DeliveryOutcome.delivered()
    """

    retry_on_timeout: bool = True

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier used in circuit breaker keys and logs."""

    @abstractmethod
    def settings_schema(self) -> FieldSchema:
        """Module-level settings (credentials) this provider needs."""

    @abstractmethod
    def list_channels(self, module_settings: Mapping[str, Any]) -> List[ChannelOption]:
        """Enumerate destinations currently available to these credentials.

        Returns an empty list when none exist.

        Raises:
            ChannelSourceError: If the provider cannot be queried
        """

    @abstractmethod
    def send(
        self, payload: Payload, module_settings: Mapping[str, Any]
    ) -> DeliveryOutcome:
        """Deliver a rendered payload.

        Must return a FAILED outcome rather than raise.
        """

    def test_connection(self, module_settings: Mapping[str, Any]) -> OperationResult:
        """Check credentials without sending a notification.

        Fails fast when required module settings are absent, then defers to
        ``verify_credentials`` for the provider's remote check.
        """
        missing = self.missing_credentials(module_settings)
        if missing:
            return OperationResult.unauthorized(
                LOGIN_FAILED_MESSAGE, error_code="MISSING_CREDENTIALS"
            )
        return self.verify_credentials(module_settings)

    def verify_credentials(self, module_settings: Mapping[str, Any]) -> OperationResult:
        """Remote credential verification; presence check only by default."""
        return OperationResult.success(message="Credentials provided")

    def missing_credentials(
        self, module_settings: Optional[Mapping[str, Any]]
    ) -> List[str]:
        return self.settings_schema().missing_required(module_settings)
