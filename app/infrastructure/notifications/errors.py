"""Exceptions raised inside the notification core.

The dispatcher converts every one of these into a DeliveryOutcome, so they
never reach the host as uncaught exceptions.
"""

from typing import Optional, Sequence

from infrastructure.operations import OperationResult


class NotificationError(Exception):
    """Base class for notification core errors.

    Attributes:
        message: Human-readable message
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SettingsValidationError(NotificationError):
    """Required settings are missing or invalid."""

    def __init__(self, message: str, missing_fields: Sequence[str] = ()):
        self.missing_fields = list(missing_fields)
        super().__init__(message)


class ChannelNotFoundError(NotificationError):
    """The selected channel is empty or not offered by the channel source."""

    def __init__(self, message: str, channel: Optional[str] = None):
        self.channel = channel
        super().__init__(message)


class ChannelSourceError(NotificationError):
    """The channel source could not enumerate destinations.

    ``result`` carries the classified failure, so an auth rejection stays
    distinguishable from a network blip.
    """

    def __init__(self, message: str, result: Optional[OperationResult] = None):
        self.result = result or OperationResult.transient_error(
            message, error_code="CHANNEL_SOURCE_ERROR"
        )
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.result.is_retryable
