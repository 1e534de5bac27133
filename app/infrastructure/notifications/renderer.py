"""Payload rendering.

Turns a Notification plus rule settings into the provider-neutral Payload
handed to delivery adapters. Rendering is a pure mapping: no I/O, and the
same inputs always produce an identical payload so retries resend exactly
the same content.
"""

from typing import Any, Mapping, Optional

from infrastructure.notifications.models import (
    ChannelOption,
    Notification,
    Payload,
    RenderedAttribute,
)
from infrastructure.notifications.schema import SENDER_FIELD, is_blank


class PayloadRenderer:
    """Render notifications into payloads.

    Args:
        sender_field: Rule setting holding the sender/bot name
    """

    def __init__(self, sender_field: str = SENDER_FIELD):
        self.sender_field = sender_field

    def render(
        self,
        notification: Notification,
        channel: ChannelOption,
        notification_settings: Optional[Mapping[str, Any]] = None,
    ) -> Payload:
        """Build the payload for a resolved channel.

        Args:
            notification: Notification built by the host
            channel: Resolved destination
            notification_settings: Rule settings (sender name)

        Returns:
            Payload with attributes in notification order
        """
        sender = (notification_settings or {}).get(self.sender_field)

        return Payload(
            channel=channel.id,
            title=notification.title,
            message=notification.message,
            url=notification.url or None,
            attributes=tuple(
                RenderedAttribute(
                    label=attribute.label,
                    value=attribute.value,
                    url=attribute.url or None,
                    style=attribute.style.value,
                    icon=attribute.icon or None,
                )
                for attribute in notification.attributes
            ),
            sender=None if is_blank(sender) else str(sender).strip(),
        )
