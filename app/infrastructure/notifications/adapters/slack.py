"""Delivery adapter posting channel messages via the Slack Web API."""

from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

import structlog
from slack_sdk.errors import SlackApiError, SlackClientError

from infrastructure.notifications.adapters.base import DeliveryAdapter, LOGIN_FAILED_MESSAGE
from infrastructure.notifications.errors import ChannelSourceError
from infrastructure.notifications.models import ChannelOption, DeliveryOutcome, Payload
from infrastructure.notifications.schema import FieldSchema, FieldType, SettingField
from infrastructure.operations import OperationResult, classify_slack_error
from integrations.slack.channels import get_channels
from integrations.slack.client import SlackClientManager

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()

# Attachment colour per attribute style
STYLE_COLORS = {
    "info": "#439FE0",
    "success": "good",
    "warning": "warning",
    "danger": "danger",
    "primary": "#4A154B",
}


class SlackDeliveryAdapter(DeliveryAdapter):
    """Slack channel delivery.

    The title becomes a header block and the message a section block; each
    attribute is rendered as one attachment coloured by its style, in
    notification order. The sender name is used as the message username.
    """

    def __init__(
        self,
        settings: Optional["Settings"] = None,
        client_manager: Optional[SlackClientManager] = None,
    ):
        """Initialize Slack delivery adapter.

        Args:
            settings: Settings instance; ``settings.slack`` supplies the
                fallback token and timeout.
            client_manager: Optional pre-built client manager.
        """
        slack = settings.slack if settings is not None else None
        self._default_token = slack.SLACK_TOKEN if slack else ""
        self._client_manager = client_manager or SlackClientManager(
            default_token=self._default_token,
            timeout=slack.SLACK_TIMEOUT_SECONDS if slack else 30,
        )
        logger.info("initialized_delivery_adapter", provider=self.provider_name)

    @property
    def provider_name(self) -> str:
        return "slack"

    def settings_schema(self) -> FieldSchema:
        return FieldSchema(
            [
                SettingField(
                    key="api_token",
                    friendly_name="Bot Token",
                    type=FieldType.PASSWORD,
                    description="Slack bot token (xoxb-...) with chat:write and channels:read",
                    required=True,
                    default=self._default_token or None,
                ),
            ]
        )

    def _client(self, module_settings: Mapping[str, Any]):
        return self._client_manager.get_client(module_settings.get("api_token"))

    @staticmethod
    def build_message(payload: Payload) -> Dict[str, Any]:
        """Build chat.postMessage arguments for a payload."""
        title = payload.title.strip()
        blocks: List[Dict[str, Any]] = []
        # Slack rejects header blocks with empty text
        if title:
            blocks.append(
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": title[:150]},
                }
            )
        blocks.append(
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": payload.message},
            }
        )
        if payload.url:
            blocks.append(
                {
                    "type": "context",
                    "elements": [
                        {"type": "mrkdwn", "text": f"<{payload.url}|View details>"}
                    ],
                }
            )

        attachments = []
        for attribute in payload.attributes:
            value = f"<{attribute.url}|{attribute.value}>" if attribute.url else attribute.value
            label = f"{attribute.icon} {attribute.label}" if attribute.icon else attribute.label
            attachments.append(
                {
                    "color": STYLE_COLORS.get(attribute.style, STYLE_COLORS["info"]),
                    "fields": [{"title": label, "value": value, "short": True}],
                }
            )

        message: Dict[str, Any] = {
            "channel": payload.channel,
            "text": f"{title}: {payload.message}" if title else payload.message,
            "blocks": blocks,
            "attachments": attachments,
        }
        if payload.sender:
            message["username"] = payload.sender
        return message

    def send(
        self, payload: Payload, module_settings: Mapping[str, Any]
    ) -> DeliveryOutcome:
        if self.missing_credentials(module_settings):
            return DeliveryOutcome.permanent(
                LOGIN_FAILED_MESSAGE, error_code="MISSING_CREDENTIALS"
            )

        try:
            client = self._client(module_settings)
            response = client.chat_postMessage(**self.build_message(payload))
        except (SlackClientError, OSError) as e:
            result = classify_slack_error(e)
            logger.warning(
                "slack_send_failed",
                channel=payload.channel,
                error=result.message,
                error_code=result.error_code,
                retryable=result.is_retryable,
            )
            return DeliveryOutcome.from_operation_result(result)

        logger.info("slack_message_sent", channel=payload.channel, ts=response.get("ts"))
        return DeliveryOutcome.delivered(
            message=f"Sent Slack message to {payload.channel}",
            external_id=response.get("ts"),
        )

    def list_channels(self, module_settings: Mapping[str, Any]) -> List[ChannelOption]:
        if self.missing_credentials(module_settings):
            raise ChannelSourceError(
                LOGIN_FAILED_MESSAGE,
                OperationResult.unauthorized(
                    LOGIN_FAILED_MESSAGE, error_code="MISSING_CREDENTIALS"
                ),
            )

        try:
            raw_channels = get_channels(self._client(module_settings))
        except (SlackClientError, OSError) as e:
            result = classify_slack_error(e)
            logger.warning("slack_list_channels_failed", error=result.message)
            raise ChannelSourceError(result.message, result) from e

        options = []
        for channel in raw_channels:
            if not channel.get("id"):
                continue
            purpose = (channel.get("purpose") or {}).get("value")
            options.append(
                ChannelOption(
                    id=channel["id"],
                    name=f"#{channel.get('name') or channel['id']}",
                    description=purpose or "Channel ID",
                )
            )
        return options

    def verify_credentials(self, module_settings: Mapping[str, Any]) -> OperationResult:
        try:
            auth_test = self._client(module_settings).auth_test()
        except SlackApiError as e:
            result = classify_slack_error(e)
            logger.warning("slack_auth_test_failed", error=result.message)
            if not result.is_retryable:
                return OperationResult.unauthorized(
                    LOGIN_FAILED_MESSAGE, error_code=result.error_code
                )
            return result
        except (SlackClientError, OSError) as e:
            return classify_slack_error(e)

        return OperationResult.success(
            message="Slack credentials valid",
            data={"team": auth_test.get("team"), "user": auth_test.get("user")},
        )
