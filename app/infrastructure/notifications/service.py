"""Notification service for dependency injection.

Provides the interface a host platform's notification extension point talks
to: settings schemas, dynamic field options, connection testing and
dispatch.
"""

import threading
from typing import Any, List, Mapping, Optional, TYPE_CHECKING

import structlog

from infrastructure.logging import bind_request_context
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.errors import ChannelSourceError
from infrastructure.notifications.models import (
    ChannelOption,
    DeliveryOutcome,
    Notification,
)
from infrastructure.notifications.schema import CHANNEL_FIELD, FieldSchema
from infrastructure.operations import OperationResult

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from infrastructure.notifications.adapters.base import DeliveryAdapter

logger = structlog.get_logger()


class NotificationService:
    """Class-based notification service.

    A thin facade over one NotificationDispatcher. The host asks it for the
    fields to collect, for the options of dynamic fields, to test stored
    credentials and to dispatch notifications.

    Usage:
        # Via provider
        from infrastructure.services import get_notification_service

        service = get_notification_service()
        outcome = service.dispatch(notification, module_settings, rule_settings)

        # Direct instantiation
        from infrastructure.services import get_settings
        from infrastructure.notifications import NotificationService, SlackDeliveryAdapter

        settings = get_settings()
        service = NotificationService(settings, adapter=SlackDeliveryAdapter(settings))
    """

    def __init__(
        self,
        settings: "Settings",
        adapter: Optional["DeliveryAdapter"] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        display_name: str = "Chat Notifications",
        logo_file_name: str = "logo.png",
    ):
        """Initialize notification service.

        Args:
            settings: Settings instance (required, passed from provider).
            adapter: Optional delivery adapter. If not provided, the adapter
                named by ``settings.dispatch.provider`` is created.
            dispatcher: Optional pre-configured NotificationDispatcher.
            display_name: Name shown by the host for this module.
            logo_file_name: Logo file shipped with the module.
        """
        if dispatcher is None:
            if adapter is None:
                adapter = create_adapter(settings)
            dispatcher = NotificationDispatcher.from_settings(
                adapter, settings.dispatch
            )

        self._dispatcher = dispatcher
        self.display_name = display_name
        self.logo_file_name = logo_file_name

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    @property
    def provider(self) -> str:
        return self._dispatcher.provider

    def settings_schema(self) -> FieldSchema:
        """Module-level fields (credentials) for the configured provider."""
        return self._dispatcher.adapter.settings_schema()

    def notification_settings_schema(self) -> FieldSchema:
        """Rule-level fields (bot name, channel)."""
        return self._dispatcher.notification_schema

    def dynamic_field_options(
        self, field_name: str, settings: Optional[Mapping[str, Any]]
    ) -> List[ChannelOption]:
        """Options for a dynamic rule-level field.

        ``channel`` lists the provider's channels; unknown fields have none.
        A provider that cannot be reached also yields no options.
        """
        if field_name != CHANNEL_FIELD:
            return []
        try:
            return self._dispatcher.resolver.list_channels(settings)
        except ChannelSourceError as e:
            logger.warning(
                "dynamic_field_options_unavailable",
                field=field_name,
                provider=self.provider,
                error=e.message,
            )
            return []

    def validate_settings(self, settings: Optional[Mapping[str, Any]]) -> OperationResult:
        """Test the supplied module settings against the provider."""
        with bind_request_context(provider=self.provider, operation="test_connection"):
            return self._dispatcher.test_connection(settings)

    def dispatch(
        self,
        notification: Notification,
        module_settings: Optional[Mapping[str, Any]],
        notification_settings: Optional[Mapping[str, Any]],
        cancel_event: Optional[threading.Event] = None,
    ) -> DeliveryOutcome:
        """Deliver a notification; see NotificationDispatcher.deliver."""
        with bind_request_context(provider=self.provider, operation="dispatch"):
            return self._dispatcher.deliver(
                notification,
                module_settings,
                notification_settings,
                cancel_event=cancel_event,
            )

    def shutdown(self) -> None:
        self._dispatcher.shutdown()


def create_adapter(settings: "Settings") -> "DeliveryAdapter":
    """Build the delivery adapter named by ``settings.dispatch.provider``.

    Raises:
        ValueError: If the provider is unknown
    """
    # Import here to avoid circular dependency at module level
    from infrastructure.notifications.adapters.messaging_api import MessagingApiAdapter
    from infrastructure.notifications.adapters.slack import SlackDeliveryAdapter

    provider = settings.dispatch.provider.strip().lower()
    if provider == "slack":
        return SlackDeliveryAdapter(settings)
    if provider == "messaging_api":
        return MessagingApiAdapter(settings)
    raise ValueError(f"Unknown notification provider: {settings.dispatch.provider}")
