"""
tests/test_transmitter.py — URL joining, request shape and response mapping.

requests.post is patched; no network access.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from secevent import (
    DeliveryTarget,
    SetDefaults,
    TransmissionError,
    TransmissionResult,
    TransmissionStatus,
    build_url,
    transmit_set,
)
from secevent.transmitter import build_headers

TOKEN = "header.payload.signature"
ADDRESS = "https://receiver.example.com/events"


def _response(status_code: int, reason: str, text: str) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    return response


@pytest.fixture
def mock_post():
    with patch("secevent.transmitter.requests.post") as mock:
        mock.return_value = _response(200, "OK", '{"success":true}')
        yield mock


# ---------------------------------------------------------------------------
# build_url
# ---------------------------------------------------------------------------


class TestBuildUrl:
    @pytest.mark.parametrize(
        ("address", "suffix"),
        [
            ("https://h/p/", "/s"),
            ("https://h/p", "s"),
            ("https://h/p/", "s"),
            ("https://h/p", "/s"),
        ],
    )
    def test_single_separator(self, address: str, suffix: str) -> None:
        assert build_url(address, suffix) == "https://h/p/s"

    @pytest.mark.parametrize("suffix", [None, ""])
    def test_no_suffix_returns_address(self, suffix) -> None:
        assert build_url("https://h/p", suffix) == "https://h/p"
        assert build_url("https://h/p/", suffix) == "https://h/p/"

    def test_only_one_slash_stripped(self) -> None:
        assert build_url("https://h/p//", "//s") == "https://h/p///s"

    def test_no_encoding(self) -> None:
        assert build_url("https://h/p", "a b?x=1") == "https://h/p/a b?x=1"


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequest:
    def test_post_shape(self, mock_post: MagicMock) -> None:
        transmit_set(TOKEN, DeliveryTarget(address=ADDRESS, suffix="/v1/events"))

        mock_post.assert_called_once_with(
            "https://receiver.example.com/events/v1/events",
            data=TOKEN,
            headers={
                "Content-Type": "application/secevent+jwt",
                "Accept": "application/json",
                "User-Agent": "SGNL-Action-Framework/1.0",
            },
            timeout=None,
        )

    def test_custom_user_agent_and_timeout(self, mock_post: MagicMock) -> None:
        transmit_set(
            TOKEN,
            DeliveryTarget(address=ADDRESS, user_agent="CustomAgent/1.0"),
            SetDefaults(timeout_seconds=5.0),
        )
        kwargs = mock_post.call_args.kwargs
        assert kwargs["headers"]["User-Agent"] == "CustomAgent/1.0"
        assert kwargs["timeout"] == 5.0

    def test_bearer_token_passed_through(self) -> None:
        headers = build_headers(DeliveryTarget(address=ADDRESS, auth_token="Bearer test-token"))
        assert headers["Authorization"] == "Bearer test-token"

    def test_bare_token_gets_bearer_prefix(self) -> None:
        headers = build_headers(DeliveryTarget(address=ADDRESS, auth_token="test-token"))
        assert headers["Authorization"] == "Bearer test-token"

    def test_no_authorization_without_token(self) -> None:
        assert "Authorization" not in build_headers(DeliveryTarget(address=ADDRESS))


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------


class TestResponses:
    def test_success(self, mock_post: MagicMock) -> None:
        result = transmit_set(TOKEN, DeliveryTarget(address=ADDRESS))
        assert result == TransmissionResult(
            status=TransmissionStatus.SUCCESS, status_code=200, body='{"success":true}'
        )
        assert result.to_dict() == {
            "status": "success",
            "statusCode": 200,
            "body": '{"success":true}',
            "retryable": False,
        }

    def test_accepted_is_success(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(202, "Accepted", "")
        assert transmit_set(TOKEN, DeliveryTarget(address=ADDRESS)).status == "success"

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 500, 501])
    def test_non_retryable_returned_as_failed(self, mock_post: MagicMock, status_code) -> None:
        mock_post.return_value = _response(status_code, "Nope", '{"error":"Invalid request"}')
        result = transmit_set(TOKEN, DeliveryTarget(address=ADDRESS))
        assert result.to_dict() == {
            "status": "failed",
            "statusCode": status_code,
            "body": '{"error":"Invalid request"}',
            "retryable": False,
        }

    @pytest.mark.parametrize(
        ("status_code", "reason"),
        [
            (429, "Too Many Requests"),
            (502, "Bad Gateway"),
            (503, "Service Unavailable"),
            (504, "Gateway Timeout"),
        ],
    )
    def test_retryable_raises(self, mock_post: MagicMock, status_code, reason) -> None:
        mock_post.return_value = _response(status_code, reason, "Rate limited")
        with pytest.raises(TransmissionError) as exc_info:
            transmit_set(TOKEN, DeliveryTarget(address=ADDRESS))

        err = exc_info.value
        assert str(err) == f"SET transmission failed: {status_code} {reason}"
        assert err.status_code == status_code
        assert err.retryable is True
        assert err.body == "Rate limited"

    def test_transport_errors_propagate(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(requests.ConnectionError):
            transmit_set(TOKEN, DeliveryTarget(address=ADDRESS))
