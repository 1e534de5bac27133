"""Notification system core models.

Provider-agnostic notification models for channel-bound dispatch.
The host builds the Notification, the dispatcher resolves a destination,
renders a Payload and reports a DeliveryOutcome.

Uses Pydantic BaseModel for:
- Runtime input validation with readable error messages
- Immutability (frozen models) so the core can never alter host data
- Structural equality and deterministic serialization
"""

from typing import Any, Optional, Tuple
from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator

from infrastructure.operations import OperationResult, OperationStatus


class AttributeStyle(Enum):
    """Display style of a notification attribute.

    Adapters map styles to provider colours or emphasis.
    """

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    PRIMARY = "primary"


class DeliveryStatus(Enum):
    """Terminal delivery status."""

    DELIVERED = "delivered"
    FAILED = "failed"


class ErrorKind(Enum):
    """Stable reason codes for failed deliveries.

    Attributes:
        VALIDATION_ERROR: Missing or invalid settings / channel selection
        NOT_FOUND: Selected channel is not offered by the provider
        TRANSIENT_DELIVERY_ERROR: Network, timeout, rate limit, 5xx
        PERMANENT_DELIVERY_ERROR: Auth failure, malformed payload, other 4xx
        CIRCUIT_OPEN: Destination short-circuited after repeated failures
        CANCELLED: Caller aborted the dispatch
    """

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    TRANSIENT_DELIVERY_ERROR = "transient_delivery_error"
    PERMANENT_DELIVERY_ERROR = "permanent_delivery_error"
    CIRCUIT_OPEN = "circuit_open"
    CANCELLED = "cancelled"


def _require_text(value: Any, field_name: str) -> str:
    if value is None:
        raise ValueError(f"{field_name} cannot be empty")
    text = value if isinstance(value, str) else str(value)
    if not text.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return text


class Attribute(BaseModel):
    """Key/value detail attached to a notification.

    Attributes:
        label: Attribute label (required, non-empty)
        value: Attribute value (required, non-empty; numbers are stringified)
        url: Optional link for the value
        style: AttributeStyle (default: INFO)
        icon: Optional icon name/emoji

    Example:
        attribute = Attribute(label="Invoice", value="#1042", url="https://...")
    """

    model_config = ConfigDict(frozen=True)

    label: str
    value: str
    url: Optional[str] = None
    style: AttributeStyle = AttributeStyle.INFO
    icon: Optional[str] = None

    @field_validator("label", mode="before")
    @classmethod
    def validate_label(cls, v: Any) -> str:
        return _require_text(v, "Attribute label")

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: Any) -> str:
        return _require_text(v, "Attribute value")

    @field_validator("style", mode="before")
    @classmethod
    def default_style(cls, v: Any) -> Any:
        """Unspecified style means INFO; names are case-insensitive."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return AttributeStyle.INFO
        if isinstance(v, str):
            return v.strip().lower()
        return v


class Notification(BaseModel):
    """Provider-agnostic notification message built by the host.

    Attributes:
        title: Notification title
        message: Message body (required, non-empty)
        url: Optional link back to the host object
        attributes: Ordered attributes; order is preserved in the payload

    Example:
        notification = Notification(
            title="New Order",
            message="Order #1042 was placed",
            url="https://billing.example.com/orders/1042",
            attributes=[Attribute(label="Client", value="Acme Ltd")],
        )
    """

    model_config = ConfigDict(frozen=True)

    title: str
    message: str
    url: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Ensure message is not empty."""
        if not v or not v.strip():
            raise ValueError("Notification message cannot be empty")
        return v


class ChannelOption(BaseModel):
    """Destination offered for the dynamic ``channel`` field.

    ``id`` is normalised to a string so numeric and string identifiers
    from hosts and providers compare equal.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def normalise_id(cls, v: Any) -> str:
        return _require_text(v, "Channel id").strip()


class RenderedAttribute(BaseModel):
    """Attribute as it appears in a rendered payload."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: str
    url: Optional[str] = None
    style: str = AttributeStyle.INFO.value
    icon: Optional[str] = None


class Payload(BaseModel):
    """Provider-neutral payload handed to a delivery adapter.

    Attributes:
        channel: Resolved destination identifier
        title: Notification title
        message: Message body
        url: Optional notification link
        attributes: Rendered attributes in notification order
        sender: Optional bot/sender name from the notification settings
    """

    model_config = ConfigDict(frozen=True)

    channel: str
    title: str
    message: str
    url: Optional[str] = None
    attributes: Tuple[RenderedAttribute, ...] = ()
    sender: Optional[str] = None

    def to_json(self) -> str:
        """Deterministic JSON serialization."""
        return self.model_dump_json()


class DeliveryOutcome(BaseModel):
    """Result of a dispatch or of a single adapter send.

    Attributes:
        status: DELIVERED or FAILED
        message: Human-readable result message
        reason: ErrorKind for failures (None when delivered)
        retryable: Whether the same request may succeed later
        error_code: Optional provider/machine error code
        retry_after: Seconds to wait before retrying (rate limits, open circuit)
        attempts: Number of adapter send attempts made
        external_id: Provider message ID (Slack ts, API message id)

    Example:
        outcome = DeliveryOutcome.failed(
            ErrorKind.VALIDATION_ERROR,
            "No channel selected for notification delivery.",
        )
    """

    model_config = ConfigDict(frozen=True)

    status: DeliveryStatus
    message: str
    reason: Optional[ErrorKind] = None
    retryable: bool = False
    error_code: Optional[str] = None
    retry_after: Optional[int] = None
    attempts: int = 0
    external_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if delivery was successful."""
        return self.status == DeliveryStatus.DELIVERED

    @classmethod
    def delivered(
        cls,
        message: str = "Notification delivered",
        external_id: Optional[str] = None,
        attempts: int = 0,
    ) -> "DeliveryOutcome":
        return cls(
            status=DeliveryStatus.DELIVERED,
            message=message,
            external_id=external_id,
            attempts=attempts,
        )

    @classmethod
    def failed(
        cls,
        reason: ErrorKind,
        message: str,
        retryable: bool = False,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        attempts: int = 0,
    ) -> "DeliveryOutcome":
        return cls(
            status=DeliveryStatus.FAILED,
            reason=reason,
            message=message,
            retryable=retryable,
            error_code=error_code,
            retry_after=retry_after,
            attempts=attempts,
        )

    @classmethod
    def transient(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "DeliveryOutcome":
        """Retryable delivery failure."""
        return cls.failed(
            ErrorKind.TRANSIENT_DELIVERY_ERROR,
            message,
            retryable=True,
            error_code=error_code,
            retry_after=retry_after,
        )

    @classmethod
    def permanent(
        cls, message: str, error_code: Optional[str] = None
    ) -> "DeliveryOutcome":
        """Non-retryable delivery failure."""
        return cls.failed(
            ErrorKind.PERMANENT_DELIVERY_ERROR, message, error_code=error_code
        )

    @classmethod
    def from_operation_result(cls, result: OperationResult) -> "DeliveryOutcome":
        """Map a classified provider result onto a delivery outcome.

        TRANSIENT_ERROR is retryable, NOT_FOUND keeps its reason, and
        UNAUTHORIZED / PERMANENT_ERROR become permanent delivery errors.
        """
        if result.is_success:
            external_id = None
            if isinstance(result.data, dict):
                external_id = result.data.get("external_id")
            return cls.delivered(message=result.message, external_id=external_id)
        if result.status == OperationStatus.TRANSIENT_ERROR:
            return cls.transient(
                result.message,
                error_code=result.error_code,
                retry_after=result.retry_after,
            )
        if result.status == OperationStatus.NOT_FOUND:
            return cls.failed(
                ErrorKind.NOT_FOUND, result.message, error_code=result.error_code
            )
        return cls.permanent(result.message, error_code=result.error_code)
