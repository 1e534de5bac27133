"""Error classifiers for provider exceptions.

Converts provider-specific failures (HTTP status codes, ``requests``
exceptions, Slack Web API errors) into standardized OperationResult objects.
Delivery adapters use these at their boundary so no lower-level I/O
exception reaches the dispatcher uncategorized.

Key Functions:
- classify_http_status(): HTTP status code → OperationResult
- classify_requests_error(): requests exceptions → OperationResult
- classify_slack_error(): slack_sdk exceptions → OperationResult

Usage:
    from infrastructure.operations.classifiers import classify_requests_error

    try:
        response = session.post(url, json=body, timeout=10)
        response.raise_for_status()
    except requests.RequestException as exc:
        return classify_requests_error(exc)
"""

from typing import Any, Mapping, Optional

import requests
from slack_sdk.errors import SlackApiError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Status codes that signal "try again later" rather than "never going to work"
RETRYABLE_STATUS_CODES = frozenset({408, 425, 429})

DEFAULT_RETRY_AFTER_SECONDS = 30

SLACK_AUTH_ERRORS = frozenset(
    {
        "invalid_auth",
        "not_authed",
        "token_revoked",
        "token_expired",
        "account_inactive",
        "missing_scope",
        "no_permission",
    }
)

SLACK_NOT_FOUND_ERRORS = frozenset(
    {
        "channel_not_found",
        "not_in_channel",
        "is_archived",
    }
)

SLACK_TRANSIENT_ERRORS = frozenset(
    {
        "ratelimited",
        "internal_error",
        "fatal_error",
        "service_unavailable",
        "request_timeout",
    }
)


def parse_retry_after(
    headers: Optional[Mapping[str, Any]], default: Optional[int] = None
) -> Optional[int]:
    """Extract a Retry-After value (seconds) from response headers.

    Header lookup is case-insensitive. Malformed values fall back to
    ``default``.
    """
    if not headers:
        return default
    for key, value in headers.items():
        if str(key).lower() != "retry-after":
            continue
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return default
    return default


def classify_http_status(
    status_code: int,
    provider: str = "Messaging API",
    headers: Optional[Mapping[str, Any]] = None,
) -> OperationResult:
    """Classify a non-2xx HTTP status code into an OperationResult.

    Status Code Mapping:
    - 408/425/429: Timeout / too early / rate limited → TRANSIENT_ERROR
    - 401/403: Credentials rejected → UNAUTHORIZED
    - 404: Not found → NOT_FOUND
    - 5xx: Server error → TRANSIENT_ERROR
    - Other 4xx: Rejected request → PERMANENT_ERROR

    Args:
        status_code: HTTP status code returned by the provider
        provider: Provider name used in messages
        headers: Optional response headers (for Retry-After)

    Returns:
        OperationResult with appropriate status, message and error_code
    """
    if status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"{provider} rate limited",
            error_code="RATE_LIMITED",
            retry_after=parse_retry_after(headers, DEFAULT_RETRY_AFTER_SECONDS),
        )

    if status_code in RETRYABLE_STATUS_CODES:
        return OperationResult.transient_error(
            f"{provider} request timed out ({status_code})",
            error_code=f"HTTP_{status_code}",
            retry_after=parse_retry_after(headers),
        )

    if status_code in (401, 403):
        return OperationResult.unauthorized(
            f"{provider} rejected the supplied credentials ({status_code})",
            error_code="UNAUTHORIZED" if status_code == 401 else "FORBIDDEN",
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"{provider} resource not found",
            error_code="NOT_FOUND",
        )

    if 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"{provider} server error ({status_code})",
            error_code="SERVER_ERROR",
            retry_after=parse_retry_after(headers),
        )

    return OperationResult.permanent_error(
        f"{provider} rejected the request ({status_code})",
        error_code=f"HTTP_{status_code}",
    )


def classify_requests_error(
    exc: Exception, provider: str = "Messaging API"
) -> OperationResult:
    """Classify ``requests`` exceptions into OperationResult.

    HTTPError responses are classified by status code. Timeouts and
    connection failures are transient. Invalid URLs and other request
    construction errors can never succeed and are permanent.

    Args:
        exc: Exception raised by requests (or while decoding its response)
        provider: Provider name used in messages

    Returns:
        OperationResult describing the failure
    """
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return classify_http_status(
            exc.response.status_code,
            provider=provider,
            headers=exc.response.headers,
        )

    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"{provider} request timed out",
            error_code="TIMEOUT",
        )

    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(
            f"Connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    if isinstance(
        exc,
        (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema),
    ):
        return OperationResult.permanent_error(
            f"{provider} URL is invalid: {str(exc)}",
            error_code="INVALID_URL",
        )

    if isinstance(exc, ValueError):
        # Covers JSONDecodeError from response.json()
        return OperationResult.permanent_error(
            f"{provider} returned a malformed response",
            error_code="MALFORMED_RESPONSE",
        )

    # Unknown transport errors are usually temporary
    return OperationResult.transient_error(
        f"{provider} error: {type(exc).__name__}: {str(exc)}",
        error_code="REQUEST_ERROR",
    )


def classify_slack_error(exc: Exception) -> OperationResult:
    """Classify slack_sdk exceptions into OperationResult.

    Error Mapping:
    - ratelimited / HTTP 429: TRANSIENT_ERROR with Retry-After
    - invalid_auth, not_authed, token_revoked, ...: UNAUTHORIZED
    - channel_not_found, not_in_channel, is_archived: NOT_FOUND
    - internal_error, service_unavailable, HTTP 5xx: TRANSIENT_ERROR
    - Other API errors: PERMANENT_ERROR
    - Non-API errors (connection, timeout): TRANSIENT_ERROR

    Args:
        exc: Exception raised by the Slack WebClient

    Returns:
        OperationResult describing the failure
    """
    if not isinstance(exc, SlackApiError):
        return OperationResult.transient_error(
            f"Slack connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    response = exc.response
    error = "unknown_error"
    if response is not None and hasattr(response, "get"):
        error = response.get("error") or error
    status_code = getattr(response, "status_code", None)
    headers = getattr(response, "headers", None)

    if error == "ratelimited" or status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "Slack API rate limited",
            error_code="RATE_LIMITED",
            retry_after=parse_retry_after(headers, DEFAULT_RETRY_AFTER_SECONDS),
        )

    if error in SLACK_AUTH_ERRORS:
        return OperationResult.unauthorized(
            f"Slack rejected the supplied token: {error}",
            error_code=error,
        )

    if error in SLACK_NOT_FOUND_ERRORS:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"Slack channel unavailable: {error}",
            error_code=error,
        )

    if error in SLACK_TRANSIENT_ERRORS or (
        status_code is not None and 500 <= status_code < 600
    ):
        return OperationResult.transient_error(
            f"Slack API error: {error}",
            error_code=error,
        )

    return OperationResult.permanent_error(
        f"Slack API error: {error}",
        error_code=error,
    )
