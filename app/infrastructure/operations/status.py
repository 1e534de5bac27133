"""Operation status enumeration.

Status codes used to classify provider calls (connection checks, channel
lookups, error classification) so callers can decide whether a retry makes
sense.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, rate limit, 5xx)
        PERMANENT_ERROR: Non-retryable error (validation, malformed request)
        UNAUTHORIZED: Credentials rejected by the provider
        NOT_FOUND: Resource (channel, endpoint) not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"

    @property
    def is_retryable(self) -> bool:
        """Only transient errors are worth another attempt."""
        return self is OperationStatus.TRANSIENT_ERROR
