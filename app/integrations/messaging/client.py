"""REST messaging service client."""

from typing import Any, Dict, List, Optional

import requests

from infrastructure.logging import get_module_logger

logger = get_module_logger()


class MessagingApiClient:
    """Thin client for a REST chat/messaging service.

    Authenticates with HTTP basic auth and exchanges JSON. Non-2xx
    responses raise ``requests.HTTPError``; callers classify the exception.

    Endpoints:
        POST {base_url}/messages     deliver a message
        GET  {base_url}/channels     list available channels
        GET  {base_url}/auth/verify  verify credentials

    Args:
        base_url: Service base URL
        username: API username
        password: API password
        timeout: Per-request timeout (seconds)
        verify_tls: Verify TLS certificates
        session: Optional pre-built requests Session
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 10.0,
        verify_tls: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, password)
        self.session.verify = verify_tls
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _json(self, response: requests.Response) -> Any:
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()

    def post_message(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Deliver a message and return the decoded response body.

        A 2xx response means the message was accepted; a body that is not
        JSON decodes to an empty dict.
        """
        response = self.session.post(
            self._url("messages"), json=body, timeout=self.timeout
        )
        logger.debug(
            "messaging_api_response",
            endpoint="messages",
            status_code=response.status_code,
        )
        try:
            return self._json(response)
        except ValueError as e:
            logger.warning(
                "messaging_api_unreadable_response",
                endpoint="messages",
                status_code=response.status_code,
                error=str(e),
            )
            return {}

    def list_channels(self) -> List[Dict[str, Any]]:
        """Return the raw channel list.

        Accepts either a bare JSON list or ``{"channels": [...]}``.
        """
        data = self._json(self.session.get(self._url("channels"), timeout=self.timeout))
        if isinstance(data, dict):
            data = data.get("channels") or data.get("values") or []
        return list(data)

    def verify(self) -> Dict[str, Any]:
        """Verify credentials; returns the decoded response body."""
        return self._json(
            self.session.get(self._url("auth/verify"), timeout=self.timeout)
        )

    def close(self) -> None:
        self.session.close()
