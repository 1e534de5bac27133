"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    make_attribute,
    make_attributes,
    make_channel_options,
    make_module_settings,
    make_notification,
    make_notification_settings,
)

__all__ = [
    "make_attribute",
    "make_attributes",
    "make_channel_options",
    "make_module_settings",
    "make_notification",
    "make_notification_settings",
]
