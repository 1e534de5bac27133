"""Slack integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class SlackSettings(IntegrationSettings):
    """Slack Web API configuration.

    The bot token normally arrives through module settings (``api_token``);
    ``SLACK_TOKEN`` is used only when the host does not supply one.

    Environment Variables:
        SLACK_TOKEN: Fallback Slack bot token (xoxb-*)
        SLACK_TIMEOUT_SECONDS: HTTP timeout for Web API calls

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        slack_token = settings.slack.SLACK_TOKEN
        ```
    """

    SLACK_TOKEN: str = ""
    SLACK_TIMEOUT_SECONDS: int = Field(default=30, alias="SLACK_TIMEOUT_SECONDS")
