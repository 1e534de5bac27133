"""Notification dispatch configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    SlackSettings,
    MessagingApiSettings,
)

# Infrastructure settings
from infrastructure.configuration.infrastructure import DispatchSettings


class Settings(BaseSettings):
    """Notification dispatch configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object:

    - **Integrations**: Messaging provider configurations (Slack, REST API)
    - **Infrastructure**: Dispatch policy (retry, timeouts, circuit breaking)

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from infrastructure.configuration import settings

        api_url = settings.messaging.MESSAGING_API_URL

        if settings.dispatch.provider == "slack":
            token = settings.slack.SLACK_TOKEN
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    # Integration settings
    slack: SlackSettings
    messaging: MessagingApiSettings

    # Infrastructure settings
    dispatch: DispatchSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "slack": SlackSettings,
            "messaging": MessagingApiSettings,
            "dispatch": DispatchSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the singleton settings instance
settings = Settings()
