"""Delivery adapter for a generic REST messaging service."""

from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

import requests
import structlog

from infrastructure.notifications.adapters.base import DeliveryAdapter, LOGIN_FAILED_MESSAGE
from infrastructure.notifications.errors import ChannelSourceError
from infrastructure.notifications.models import ChannelOption, DeliveryOutcome, Payload
from infrastructure.notifications.schema import FieldSchema, FieldType, SettingField
from infrastructure.operations import OperationResult, classify_requests_error
from integrations.messaging.client import MessagingApiClient

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()

PROVIDER_LABEL = "Messaging API"


class MessagingApiAdapter(DeliveryAdapter):
    """Messaging service adapter authenticating with username/password.

    Wire format (POST {api_url}/messages):
        {
            "channel": "2",
            "botname": "Billing Bot",
            "notification_title": "...",
            "notification_url": "...",
            "notification_message": "...",
            "notification_attributes": [
                {"label": ..., "value": ..., "url": ..., "style": ..., "icon": ...}
            ]
        }

    A response body carrying an ``error`` key is a failed delivery even
    when the HTTP status is 2xx.
    """

    def __init__(self, settings: Optional["Settings"] = None):
        """Initialize the messaging API adapter.

        Args:
            settings: Settings instance; ``settings.messaging`` provides the
                default API URL, timeout and TLS verification.
        """
        messaging = settings.messaging if settings is not None else None
        self._default_api_url = messaging.MESSAGING_API_URL if messaging else ""
        self._timeout = messaging.MESSAGING_API_TIMEOUT_SECONDS if messaging else 10.0
        self._verify_tls = messaging.MESSAGING_API_VERIFY_TLS if messaging else True
        logger.info("initialized_delivery_adapter", provider=self.provider_name)

    @property
    def provider_name(self) -> str:
        return "messaging_api"

    def settings_schema(self) -> FieldSchema:
        return FieldSchema(
            [
                SettingField(
                    key="api_url",
                    friendly_name="API URL",
                    type=FieldType.TEXT,
                    description="Base URL of the messaging service",
                    required=True,
                    default=self._default_api_url or None,
                ),
                SettingField(
                    key="api_username",
                    friendly_name="API Username",
                    type=FieldType.TEXT,
                    description="Required username to authenticate with message service",
                    required=True,
                ),
                SettingField(
                    key="api_password",
                    friendly_name="API Password",
                    type=FieldType.PASSWORD,
                    description="Required password to authenticate with message service",
                    required=True,
                ),
            ]
        )

    def _client(self, module_settings: Mapping[str, Any]) -> MessagingApiClient:
        return MessagingApiClient(
            base_url=str(module_settings.get("api_url") or self._default_api_url),
            username=str(module_settings.get("api_username")),
            password=str(module_settings.get("api_password")),
            timeout=self._timeout,
            verify_tls=self._verify_tls,
        )

    @staticmethod
    def build_body(payload: Payload) -> Dict[str, Any]:
        """Map a payload onto the service's wire format."""
        return {
            "channel": payload.channel,
            "botname": payload.sender,
            "notification_title": payload.title,
            "notification_url": payload.url,
            "notification_message": payload.message,
            "notification_attributes": [
                attribute.model_dump() for attribute in payload.attributes
            ],
        }

    def send(
        self, payload: Payload, module_settings: Mapping[str, Any]
    ) -> DeliveryOutcome:
        if self.missing_credentials(module_settings):
            return DeliveryOutcome.permanent(
                LOGIN_FAILED_MESSAGE, error_code="MISSING_CREDENTIALS"
            )

        client = self._client(module_settings)
        try:
            response = client.post_message(self.build_body(payload))
        except (requests.RequestException, ValueError) as e:
            result = classify_requests_error(e, provider=PROVIDER_LABEL)
            logger.warning(
                "messaging_api_send_failed",
                channel=payload.channel,
                error=result.message,
                error_code=result.error_code,
                retryable=result.is_retryable,
            )
            return DeliveryOutcome.from_operation_result(result)
        finally:
            client.close()

        if isinstance(response, dict) and response.get("error"):
            logger.error(
                "messaging_api_rejected_message",
                channel=payload.channel,
                error=str(response.get("error")),
            )
            return DeliveryOutcome.permanent(
                f"Notification delivery failed: {response.get('error')}",
                error_code="API_ERROR",
            )

        message_id = response.get("id") if isinstance(response, dict) else None
        return DeliveryOutcome.delivered(
            message=f"Sent notification to channel {payload.channel}",
            external_id=str(message_id) if message_id is not None else None,
        )

    def list_channels(self, module_settings: Mapping[str, Any]) -> List[ChannelOption]:
        if self.missing_credentials(module_settings):
            raise ChannelSourceError(
                LOGIN_FAILED_MESSAGE,
                OperationResult.unauthorized(
                    LOGIN_FAILED_MESSAGE, error_code="MISSING_CREDENTIALS"
                ),
            )

        client = self._client(module_settings)
        try:
            raw_channels = client.list_channels()
        except (requests.RequestException, ValueError) as e:
            result = classify_requests_error(e, provider=PROVIDER_LABEL)
            logger.warning("messaging_api_list_channels_failed", error=result.message)
            raise ChannelSourceError(result.message, result) from e
        finally:
            client.close()

        return [
            ChannelOption(
                id=channel.get("id"),
                name=str(channel.get("name") or channel.get("id")),
                description=str(channel.get("description") or "Channel ID"),
            )
            for channel in raw_channels
            if isinstance(channel, dict) and channel.get("id") is not None
        ]

    def verify_credentials(self, module_settings: Mapping[str, Any]) -> OperationResult:
        client = self._client(module_settings)
        try:
            body = client.verify()
        except (requests.RequestException, ValueError) as e:
            result = classify_requests_error(e, provider=PROVIDER_LABEL)
            logger.warning(
                "messaging_api_verify_failed",
                error=result.message,
                error_code=result.error_code,
            )
            if not result.is_retryable:
                return OperationResult.unauthorized(
                    LOGIN_FAILED_MESSAGE, error_code=result.error_code
                )
            return result
        finally:
            client.close()

        if isinstance(body, dict) and body.get("error"):
            return OperationResult.unauthorized(
                LOGIN_FAILED_MESSAGE, error_code="API_ERROR"
            )
        return OperationResult.success(message="Messaging API credentials valid")
