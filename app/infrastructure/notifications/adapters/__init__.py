"""Provider delivery adapters."""

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.adapters.messaging_api import MessagingApiAdapter
from infrastructure.notifications.adapters.slack import SlackDeliveryAdapter

__all__ = [
    "DeliveryAdapter",
    "MessagingApiAdapter",
    "SlackDeliveryAdapter",
]
