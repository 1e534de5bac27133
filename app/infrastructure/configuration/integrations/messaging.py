"""Generic messaging API integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class MessagingApiSettings(IntegrationSettings):
    """REST messaging service configuration.

    Credentials (``api_username``/``api_password``) are supplied per module
    by the host credential store and never read from the environment.

    Environment Variables:
        MESSAGING_API_URL: Default base URL of the messaging service
        MESSAGING_API_TIMEOUT_SECONDS: HTTP timeout for each request
        MESSAGING_API_VERIFY_TLS: Verify TLS certificates (default: True)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        api_url = settings.messaging.MESSAGING_API_URL
        ```
    """

    MESSAGING_API_URL: str = Field(default="", alias="MESSAGING_API_URL")
    MESSAGING_API_TIMEOUT_SECONDS: float = Field(
        default=10.0, alias="MESSAGING_API_TIMEOUT_SECONDS"
    )
    MESSAGING_API_VERIFY_TLS: bool = Field(
        default=True, alias="MESSAGING_API_VERIFY_TLS"
    )
