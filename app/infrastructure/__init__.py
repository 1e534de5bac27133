"""Infrastructure modules for the notification dispatch core.

Centralized infrastructure components:
- configuration: Settings management (settings, DispatchSettings)
- logging: Structured logging (configure_logging, get_module_logger)
- notifications: Channel-bound notification dispatch
- operations: Operation results and error classification
- resilience: Circuit breakers and retry policy
- services: Dependency injection providers (get_settings, get_notification_service)
"""

# Configuration
from infrastructure.configuration import settings

# Logging
from infrastructure.logging import get_module_logger, logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Dependency Injection Services
from infrastructure.services import (
    get_settings,
    get_notification_service,
)

__all__ = [
    # Configuration
    "settings",
    # Logging
    "get_module_logger",
    "logger",
    # Operations
    "OperationResult",
    "OperationStatus",
    # Dependency Injection Services
    "get_settings",
    "get_notification_service",
]
