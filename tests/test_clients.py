"""Unit tests for the shared HTTP client base."""

from unittest.mock import MagicMock

import pytest
import requests

from comment_notify.clients import (
    ClientConfigurationError,
    ClientHTTPError,
    ClientResponseError,
    ClientTimeoutError,
    HTTPClient,
    redact_url,
)
from comment_notify.config.models import AdvancedConfig


def make_response(status_code=200, json_body=None, text="", reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    if isinstance(json_body, Exception):
        response.json.side_effect = json_body
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def session():
    return MagicMock()


def test_user_agent_is_set_on_session(session):
    """Test that the session carries the configured User-Agent."""
    HTTPClient(user_agent="  MyBlog/2.0 ", session=session)

    session.headers.update.assert_called_once_with({"User-Agent": "MyBlog/2.0"})


@pytest.mark.parametrize("timeout", [0, 121])
def test_timeout_range_is_validated(timeout):
    """Test that timeouts outside 1-120 seconds are rejected."""
    with pytest.raises(ClientConfigurationError):
        HTTPClient(timeout=timeout)


def test_empty_user_agent_is_rejected():
    """Test that a blank User-Agent is rejected."""
    with pytest.raises(ClientConfigurationError):
        HTTPClient(user_agent="   ")


def test_from_config(session):
    """Test that timeout and User-Agent come from the advanced settings."""
    client = HTTPClient.from_config(
        AdvancedConfig(http_request_timeout=3, user_agent="Custom/1.0"), session=session
    )

    assert client.timeout == 3
    assert client.user_agent == "Custom/1.0"


def test_json_request(session):
    """Test a successful JSON request passes through every argument."""
    session.request.return_value = make_response(json_body={"ok": True})
    client = HTTPClient(timeout=7, session=session)

    data = client._make_request(
        "https://api.example.com/send",
        method="POST",
        params={"key": "k"},
        json_data={"title": "t"},
    )

    assert data == {"ok": True}
    session.request.assert_called_once_with(
        method="POST",
        url="https://api.example.com/send",
        headers=None,
        params={"key": "k"},
        json={"title": "t"},
        data=None,
        timeout=7,
    )


def test_text_request(session):
    """Test that expect_json=False returns the stripped body."""
    session.request.return_value = make_response(text=" valid\n")
    client = HTTPClient(session=session)

    assert client._make_request("https://x", form_data={"a": "b"}, expect_json=False) == "valid"


def test_http_error_status(session):
    """Test that 4xx/5xx statuses raise ClientHTTPError."""
    session.request.return_value = make_response(status_code=503, reason="Service Unavailable")
    client = HTTPClient(session=session)

    with pytest.raises(ClientHTTPError) as exc_info:
        client._make_request("https://x")

    assert exc_info.value.status_code == 503
    assert exc_info.value.url == "https://x"


def test_invalid_json(session):
    """Test that an unparsable JSON body raises ClientResponseError."""
    session.request.return_value = make_response(json_body=ValueError("Expecting value"))
    client = HTTPClient(session=session)

    with pytest.raises(ClientResponseError):
        client._make_request("https://x")


def test_timeout(session):
    """Test that request timeouts raise ClientTimeoutError."""
    session.request.side_effect = requests.exceptions.Timeout("slow")
    client = HTTPClient(session=session)

    with pytest.raises(ClientTimeoutError):
        client._make_request("https://x")


def test_connection_error(session):
    """Test that connection failures raise ClientHTTPError with status 0."""
    session.request.side_effect = requests.exceptions.ConnectionError("refused")
    client = HTTPClient(session=session)

    with pytest.raises(ClientHTTPError) as exc_info:
        client._make_request("https://x")

    assert exc_info.value.status_code == 0


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://api.telegram.org/bot123456:AAE-token/sendMessage", "https://api.telegram.org/***/sendMessage"),
        ("https://sctapi.ftqq.com/SCT12345abcdefghijklmnop.send", "https://sctapi.ftqq.com/***"),
        ("https://oapi.dingtalk.com/robot/send?access_token=secret", "https://oapi.dingtalk.com/robot/send"),
        ("https://rest.akismet.com/1.1/verify-key", "https://rest.akismet.com/1.1/verify-key"),
        ("https://x", "https://x"),
    ],
)
def test_redact_url(url, expected):
    """Test that credentials in paths and query strings are masked."""
    assert redact_url(url) == expected


def test_connection_error_message_hides_url_secrets(session):
    """Test that the exception message does not repeat the raw URL."""
    session.request.side_effect = requests.exceptions.ConnectionError(
        "Max retries exceeded with url: /bot123456:AAE-token/sendMessage"
    )
    client = HTTPClient(session=session)

    with pytest.raises(ClientHTTPError) as exc_info:
        client._make_request("https://api.telegram.org/bot123456:AAE-token/sendMessage")

    assert "AAE-token" not in str(exc_info.value)
    assert "ConnectionError" in str(exc_info.value)
