"""Slack Channels Module.

Channel enumeration for the Slack integration."""

from typing import Any, Dict, List

from slack_sdk import WebClient


def get_channels(
    client: WebClient,
    types: str = "public_channel,private_channel",
    page_size: int = 200,
) -> List[Dict[str, Any]]:
    """Return every non-archived channel visible to the bot.

    Slack paginates conversations.list; the cursor is followed until
    ``next_cursor`` comes back empty. API errors raise SlackApiError.
    """
    channels: List[Dict[str, Any]] = []
    cursor = None

    while True:
        response = client.conversations_list(
            exclude_archived=True, limit=page_size, types=types, cursor=cursor
        )
        channels.extend(response.get("channels", []))

        cursor = (response.get("response_metadata") or {}).get("next_cursor")
        if not cursor:
            break

    return channels
