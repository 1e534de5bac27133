"""Fixtures for delivery adapter tests."""

from unittest.mock import MagicMock

import pytest
import requests
from slack_sdk.errors import SlackApiError

from infrastructure.notifications.models import Payload, RenderedAttribute


@pytest.fixture
def mock_settings():
    """Mock Settings instance for testing adapters.

    Returns:
        Mock settings with slack and messaging configurations
    """
    mock = MagicMock()
    mock.slack.SLACK_TOKEN = ""
    mock.slack.SLACK_TIMEOUT_SECONDS = 30
    mock.messaging.MESSAGING_API_URL = "https://chat.example.com/api"
    mock.messaging.MESSAGING_API_TIMEOUT_SECONDS = 5.0
    mock.messaging.MESSAGING_API_VERIFY_TLS = True
    return mock


@pytest.fixture
def payload():
    return Payload(
        channel="2",
        title="New Order",
        message="Order #1042 was placed",
        url="https://billing.example.com/orders/1042",
        attributes=(
            RenderedAttribute(label="Client", value="Acme Ltd", url="https://billing.example.com/clients/7"),
            RenderedAttribute(label="Total", value="$120.00", style="success", icon=":moneybag:"),
        ),
        sender="Billing Bot",
    )


@pytest.fixture
def http_error():
    """Factory for requests.HTTPError carrying a response.

    Example:
        error = http_error(429, headers={"Retry-After": "12"})
    """

    def _factory(status_code: int, headers=None) -> requests.HTTPError:
        response = requests.Response()
        response.status_code = status_code
        response.headers.update(headers or {})
        return requests.HTTPError(f"{status_code} Error", response=response)

    return _factory


@pytest.fixture
def slack_api_error():
    """Factory for SlackApiError with a dict-like response."""

    def _factory(error: str, status_code: int = 200, headers=None) -> SlackApiError:
        response = MagicMock()
        response.status_code = status_code
        response.headers = headers or {}
        response.get.side_effect = {"ok": False, "error": error}.get
        response.__getitem__.side_effect = {"ok": False, "error": error}.__getitem__
        return SlackApiError(f"The request to the Slack API failed: {error}", response)

    return _factory
