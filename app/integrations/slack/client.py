"""Slack Web API client management."""

import hashlib
import threading
from typing import Dict, Optional

from slack_sdk import WebClient


class SlackClientManager:
    """Hands out one WebClient per bot token.

    Module settings may carry different tokens, so clients are cached per
    token (by hash) on the manager instance rather than as a process-wide
    singleton.

    Args:
        default_token: Token used when the caller supplies none
        timeout: HTTP timeout for Web API calls (seconds)
    """

    def __init__(self, default_token: str = "", timeout: int = 30):
        self._default_token = default_token
        self._timeout = timeout
        self._clients: Dict[str, WebClient] = {}
        self._lock = threading.Lock()

    def get_client(self, token: Optional[str] = None) -> WebClient:
        """Returns the WebClient for ``token`` (or the default token).

        Raises:
            ValueError: If no token is available
        """
        effective = (token or self._default_token or "").strip()
        if not effective:
            raise ValueError("Slack token is missing")

        key = hashlib.sha256(effective.encode("utf-8")).hexdigest()
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = WebClient(token=effective, timeout=self._timeout)
                self._clients[key] = client
            return client
