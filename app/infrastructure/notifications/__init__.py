"""Channel-bound notification dispatch.

Validates delivery configuration, renders provider-agnostic notifications
into payloads and delivers them through a provider adapter with:
- Channel resolution against the provider's channel list
- Per-attempt timeouts and bounded retries with jittered backoff
- Per-destination circuit breakers
- Caller-driven cancellation

Usage:
    from infrastructure.notifications import (
        Attribute,
        AttributeStyle,
        Notification,
        NotificationService,
    )

    notification = Notification(
        title="Invoice Paid",
        message="Invoice #1042 was paid in full",
        url="https://billing.example.com/invoices/1042",
        attributes=[
            Attribute(label="Client", value="Acme Ltd"),
            Attribute(label="Amount", value="$120.00", style=AttributeStyle.SUCCESS),
        ],
    )

    outcome = service.dispatch(
        notification,
        module_settings={"api_url": "...", "api_username": "...", "api_password": "..."},
        notification_settings={"channel": "2", "botname": "Billing Bot"},
    )
    if not outcome.is_success:
        logger.warning("notification_failed", reason=outcome.reason.value)
"""

# Models
from infrastructure.notifications.models import (
    Attribute,
    AttributeStyle,
    ChannelOption,
    DeliveryOutcome,
    DeliveryStatus,
    ErrorKind,
    Notification,
    Payload,
    RenderedAttribute,
)

# Errors
from infrastructure.notifications.errors import (
    ChannelNotFoundError,
    ChannelSourceError,
    NotificationError,
    SettingsValidationError,
)

# Settings schemas
from infrastructure.notifications.schema import (
    NOTIFICATION_SETTINGS_SCHEMA,
    FieldSchema,
    FieldType,
    SettingField,
)

# Resolution and rendering
from infrastructure.notifications.resolver import (
    ChannelResolver,
    ChannelSource,
    StaticChannelSource,
)
from infrastructure.notifications.renderer import PayloadRenderer

# Adapters
from infrastructure.notifications.adapters import (
    DeliveryAdapter,
    MessagingApiAdapter,
    SlackDeliveryAdapter,
)

# Dispatcher and service
from infrastructure.notifications.dispatcher import DispatchState, NotificationDispatcher
from infrastructure.notifications.service import NotificationService

# Export all public interfaces
__all__ = [
    # Models
    "Attribute",
    "AttributeStyle",
    "ChannelOption",
    "DeliveryOutcome",
    "DeliveryStatus",
    "ErrorKind",
    "Notification",
    "Payload",
    "RenderedAttribute",
    # Errors
    "ChannelNotFoundError",
    "ChannelSourceError",
    "NotificationError",
    "SettingsValidationError",
    # Settings schemas
    "NOTIFICATION_SETTINGS_SCHEMA",
    "FieldSchema",
    "FieldType",
    "SettingField",
    # Resolution and rendering
    "ChannelResolver",
    "ChannelSource",
    "StaticChannelSource",
    "PayloadRenderer",
    # Adapters
    "DeliveryAdapter",
    "MessagingApiAdapter",
    "SlackDeliveryAdapter",
    # Dispatcher and service
    "DispatchState",
    "NotificationDispatcher",
    "NotificationService",
]
