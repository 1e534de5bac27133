"""Unit tests for provider error classifiers."""

from unittest.mock import MagicMock

import pytest
import requests
from slack_sdk.errors import SlackApiError

from infrastructure.operations import (
    OperationStatus,
    classify_http_status,
    classify_requests_error,
    classify_slack_error,
)
from infrastructure.operations.classifiers import parse_retry_after


def _http_error(status_code, headers=None):
    response = requests.Response()
    response.status_code = status_code
    response.headers.update(headers or {})
    return requests.HTTPError(f"{status_code} Error", response=response)


def _slack_error(error, status_code=200, headers=None):
    body = {"ok": False, "error": error}
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.get.side_effect = body.get
    return SlackApiError(f"Slack API error: {error}", response)


@pytest.mark.unit
class TestParseRetryAfter:
    def test_reads_header_case_insensitively(self):
        assert parse_retry_after({"retry-after": "9"}) == 9
        assert parse_retry_after({"Retry-After": "3"}) == 3

    def test_missing_header_uses_default(self):
        assert parse_retry_after({}, 30) == 30
        assert parse_retry_after(None) is None

    def test_malformed_header_uses_default(self):
        assert parse_retry_after({"Retry-After": "soon"}, 30) == 30

    def test_negative_value_is_clamped(self):
        assert parse_retry_after({"Retry-After": "-5"}) == 0


@pytest.mark.unit
class TestClassifyHttpStatus:
    @pytest.mark.parametrize(
        "status_code,status,error_code",
        [
            (429, OperationStatus.TRANSIENT_ERROR, "RATE_LIMITED"),
            (408, OperationStatus.TRANSIENT_ERROR, "HTTP_408"),
            (425, OperationStatus.TRANSIENT_ERROR, "HTTP_425"),
            (500, OperationStatus.TRANSIENT_ERROR, "SERVER_ERROR"),
            (502, OperationStatus.TRANSIENT_ERROR, "SERVER_ERROR"),
            (401, OperationStatus.UNAUTHORIZED, "UNAUTHORIZED"),
            (403, OperationStatus.UNAUTHORIZED, "FORBIDDEN"),
            (404, OperationStatus.NOT_FOUND, "NOT_FOUND"),
            (400, OperationStatus.PERMANENT_ERROR, "HTTP_400"),
            (409, OperationStatus.PERMANENT_ERROR, "HTTP_409"),
        ],
    )
    def test_status_mapping(self, status_code, status, error_code):
        result = classify_http_status(status_code)

        assert result.status == status
        assert result.error_code == error_code

    def test_rate_limit_defaults_retry_after(self):
        assert classify_http_status(429).retry_after == 30

    def test_rate_limit_uses_header(self):
        assert classify_http_status(429, headers={"Retry-After": "4"}).retry_after == 4

    def test_provider_name_in_message(self):
        assert "Acme Chat" in classify_http_status(500, provider="Acme Chat").message


@pytest.mark.unit
class TestClassifyRequestsError:
    def test_http_error_uses_status(self):
        result = classify_requests_error(_http_error(503))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.is_retryable

    def test_timeout(self):
        result = classify_requests_error(requests.Timeout("read timed out"))

        assert result.error_code == "TIMEOUT"
        assert result.is_retryable

    def test_connection_error(self):
        result = classify_requests_error(requests.ConnectionError("refused"))

        assert result.error_code == "CONNECTION_ERROR"
        assert result.is_retryable

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.InvalidURL("bad"),
            requests.exceptions.MissingSchema("no scheme"),
        ],
    )
    def test_invalid_url_is_permanent(self, exc):
        result = classify_requests_error(exc)

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "INVALID_URL"

    def test_malformed_json_is_permanent(self):
        result = classify_requests_error(ValueError("Expecting value"))

        assert result.error_code == "MALFORMED_RESPONSE"
        assert not result.is_retryable

    def test_unknown_request_error_is_transient(self):
        result = classify_requests_error(requests.RequestException("weird"))

        assert result.error_code == "REQUEST_ERROR"
        assert result.is_retryable


@pytest.mark.unit
class TestClassifySlackError:
    @pytest.mark.parametrize("error", ["invalid_auth", "not_authed", "token_revoked", "missing_scope"])
    def test_auth_errors(self, error):
        result = classify_slack_error(_slack_error(error))

        assert result.status == OperationStatus.UNAUTHORIZED
        assert result.error_code == error

    @pytest.mark.parametrize("error", ["channel_not_found", "not_in_channel", "is_archived"])
    def test_channel_errors(self, error):
        assert classify_slack_error(_slack_error(error)).status == OperationStatus.NOT_FOUND

    def test_rate_limited(self):
        result = classify_slack_error(
            _slack_error("ratelimited", status_code=429, headers={"Retry-After": "20"})
        )

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "RATE_LIMITED"
        assert result.retry_after == 20

    def test_server_error_status_is_transient(self):
        result = classify_slack_error(_slack_error("unknown_error", status_code=502))

        assert result.is_retryable

    def test_other_api_error_is_permanent(self):
        result = classify_slack_error(_slack_error("invalid_blocks"))

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "invalid_blocks"

    def test_non_api_error_is_transient(self):
        result = classify_slack_error(TimeoutError("timed out"))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "CONNECTION_ERROR"
