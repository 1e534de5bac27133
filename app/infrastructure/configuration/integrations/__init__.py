"""Integration settings __init__ - exports all provider settings."""

from infrastructure.configuration.integrations.slack import SlackSettings
from infrastructure.configuration.integrations.messaging import MessagingApiSettings

__all__ = [
    "SlackSettings",
    "MessagingApiSettings",
]
