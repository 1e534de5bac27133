"""REST messaging service integration."""

from .client import MessagingApiClient

__all__ = ["MessagingApiClient"]
