"""
Tests for the HTTP transport.

Tests cover:
- Request construction (URL, method, headers, JSON body)
- JSON decoding and empty bodies
- HTTP, network and decode error categorization
"""

import io
import json
import socket
from unittest.mock import MagicMock
from urllib.error import HTTPError, URLError

import pytest

from gpt_trainer.api.transport import USER_AGENT, HttpTransport
from gpt_trainer.errors import (
    DecodeError,
    ExitCode,
    HttpError,
    NetworkDNSError,
    NetworkOfflineError,
    NetworkTimeoutError,
)


def make_response(body, status=200):
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.read.return_value = body.encode() if isinstance(body, str) else body
    mock_response.__enter__ = MagicMock(return_value=mock_response)
    mock_response.__exit__ = MagicMock(return_value=False)
    return mock_response


def make_transport(opener):
    return HttpTransport("https://app.gpt-trainer.com/api/v1/", "secret-token", timeout=12, opener=opener)


class TestRequest:
    """Tests for successful requests."""

    def test_get_decodes_json(self):
        opener = MagicMock(return_value=make_response(json.dumps([{"uuid": "tg-1"}])))

        result = make_transport(opener).request("GET", "/tag/list")

        assert result == [{"uuid": "tg-1"}]
        req = opener.call_args.args[0]
        assert req.full_url == "https://app.gpt-trainer.com/api/v1/tag/list"
        assert req.get_method() == "GET"
        assert req.data is None
        assert opener.call_args.kwargs["timeout"] == 12

    def test_headers(self):
        opener = MagicMock(return_value=make_response("{}"))

        make_transport(opener).request("GET", "/chatbots")

        req = opener.call_args.args[0]
        assert req.get_header("Authorization") == "Bearer secret-token"
        assert req.get_header("Content-type") == "application/json"
        assert req.get_header("Accept") == "application/json"
        assert req.get_header("User-agent") == USER_AGENT

    def test_post_sends_json_body(self):
        opener = MagicMock(return_value=make_response('{"uuid": "tg-9"}'))

        make_transport(opener).request("post", "/tag/create", {"name": "Beta"})

        req = opener.call_args.args[0]
        assert req.get_method() == "POST"
        assert json.loads(req.data) == {"name": "Beta"}

    def test_empty_body_is_empty_dict(self):
        opener = MagicMock(return_value=make_response("  "))
        assert make_transport(opener).request("DELETE", "/tag/t1/delete") == {}


class TestErrors:
    """Tests for error categorization."""

    def test_http_error_carries_status_and_body(self):
        http_error = HTTPError(
            url="https://app.gpt-trainer.com/api/v1/tag/list",
            code=500,
            msg="Internal Server Error",
            hdrs={},
            fp=io.BytesIO(b'{"error": "boom"}'),
        )
        opener = MagicMock(side_effect=http_error)

        with pytest.raises(HttpError) as exc_info:
            make_transport(opener).request("GET", "/tag/list")

        error = exc_info.value
        assert error.status_code == 500
        assert error.body == '{"error": "boom"}'
        assert error.message == 'HTTP Error: 500 - {"error": "boom"}'
        assert error.code == ExitCode.API_SERVER_ERROR

    @pytest.mark.parametrize(
        "status,code",
        [(401, ExitCode.API_AUTH_ERROR), (403, ExitCode.API_AUTH_ERROR), (404, ExitCode.API_NOT_FOUND)],
    )
    def test_http_error_codes(self, status, code):
        http_error = HTTPError(url="u", code=status, msg="x", hdrs={}, fp=None)
        opener = MagicMock(side_effect=http_error)

        with pytest.raises(HttpError) as exc_info:
            make_transport(opener).request("GET", "/chatbot/x")

        assert exc_info.value.code == code
        assert exc_info.value.get_suggestion()

    def test_error_status_without_exception(self):
        opener = MagicMock(return_value=make_response("nope", status=418))
        with pytest.raises(HttpError) as exc_info:
            make_transport(opener).request("GET", "/chatbots")
        assert exc_info.value.status_code == 418

    def test_invalid_json(self):
        opener = MagicMock(return_value=make_response("<html>oops</html>"))
        with pytest.raises(DecodeError) as exc_info:
            make_transport(opener).request("GET", "/chatbots")
        assert exc_info.value.message.startswith("Invalid JSON response")

    @pytest.mark.parametrize(
        "reason,error_type",
        [
            ("timed out", NetworkTimeoutError),
            ("[Errno -2] Name or service not known", NetworkDNSError),
            ("[Errno 111] Connection refused", NetworkOfflineError),
            ("something else", NetworkOfflineError),
        ],
    )
    def test_url_errors(self, reason, error_type):
        opener = MagicMock(side_effect=URLError(reason))
        with pytest.raises(error_type):
            make_transport(opener).request("GET", "/chatbots")

    def test_socket_timeout(self):
        opener = MagicMock(side_effect=socket.timeout("read timed out"))
        with pytest.raises(NetworkTimeoutError):
            make_transport(opener).request("GET", "/chatbots")
