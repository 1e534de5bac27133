"""Infrastructure configuration module - public API.

Centralized configuration management using Pydantic BaseSettings with
domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    DispatchSettings: Dispatch policy settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    max_attempts = settings.dispatch.max_attempts
    api_url = settings.messaging.MESSAGING_API_URL

    if settings.is_production:
        ...
    ```
"""

from infrastructure.configuration.settings import Settings, settings
from infrastructure.configuration.infrastructure.dispatch import DispatchSettings

__all__ = ["Settings", "settings", "DispatchSettings"]
