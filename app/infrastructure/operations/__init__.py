"""Operation result types and status enums.

Standardized result types for provider operations, including status enums,
the result dataclass, and error classifiers for provider exceptions.
"""

from infrastructure.operations.classifiers import (
    classify_http_status,
    classify_requests_error,
    classify_slack_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_http_status",
    "classify_requests_error",
    "classify_slack_error",
]
