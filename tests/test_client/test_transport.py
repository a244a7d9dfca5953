"""Tests for the httpx-backed transport."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from reqcache.client import HttpxTransport, Transport
from reqcache.exceptions import (
    AuthError,
    ClientError,
    ConnectionError_,
    NotFoundError,
    ServerError,
)
from reqcache.models import RequestConfig


def _transport(handler, max_retries: int = 0) -> HttpxTransport:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpxTransport(RequestConfig(max_retries=max_retries), client=client)


class TestContract:
    def test_satisfies_transport_protocol(self) -> None:
        assert isinstance(HttpxTransport(), Transport)


# ------------------------------------------------------------------ #
# Body encoding and argument forwarding
# ------------------------------------------------------------------ #


class TestRequests:
    def test_get_returns_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": True})

        response = _transport(handler).request("GET", "https://api.example.com/users")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_dict_body_sent_as_json(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["type"] = request.headers["content-type"]
            return httpx.Response(201)

        _transport(handler).request("POST", "https://api.example.com/users", {"name": "ada"})
        assert seen == {"body": {"name": "ada"}, "type": "application/json"}

    def test_str_body_sent_raw(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content
            return httpx.Response(200)

        _transport(handler).request("PUT", "https://api.example.com/doc", "plain text")
        assert seen["body"] == b"plain text"

    def test_kwargs_forwarded(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["page"] = request.url.params.get("page")
            return httpx.Response(200)

        _transport(handler).request(
            "get",
            "https://api.example.com/users",
            headers={"Authorization": "Bearer t"},
            params={"page": "2"},
        )
        assert seen == {"auth": "Bearer t", "page": "2"}


# ------------------------------------------------------------------ #
# Error mapping
# ------------------------------------------------------------------ #


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status,exc_type",
        [
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (409, ClientError),
            (422, ClientError),
            (500, ServerError),
        ],
    )
    def test_status_maps_to_exception(self, status: int, exc_type: type) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"message": "nope"})

        with pytest.raises(exc_type) as excinfo:
            _transport(handler).request("GET", "https://api.example.com/x")
        assert excinfo.value.status_code == status
        assert "nope" in str(excinfo.value)
        assert excinfo.value.response is not None

    def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="bad input")

        with pytest.raises(ClientError, match="bad input"):
            _transport(handler).request("GET", "https://api.example.com/x")


# ------------------------------------------------------------------ #
# Retry
# ------------------------------------------------------------------ #


class TestRetry:
    @patch("reqcache.client.transport.time.sleep")
    def test_retry_on_503_then_success(self, mock_sleep: MagicMock) -> None:
        responses = iter([httpx.Response(503), httpx.Response(200)])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses)

        response = _transport(handler, max_retries=2).request("GET", "https://api.example.com/x")
        assert response.status_code == 200
        mock_sleep.assert_called_once_with(1)

    @patch("reqcache.client.transport.time.sleep")
    def test_exponential_backoff_then_server_error(self, mock_sleep: MagicMock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(ServerError):
            _transport(handler, max_retries=3).request("GET", "https://api.example.com/x")
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2, 4]

    @patch("reqcache.client.transport.time.sleep")
    def test_connect_error_exhausted(self, mock_sleep: MagicMock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ConnectionError_):
            _transport(handler, max_retries=1).request("GET", "https://api.example.com/x")
        assert mock_sleep.call_count == 1

    def test_4xx_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404)

        with pytest.raises(NotFoundError):
            _transport(handler, max_retries=3).request("GET", "https://api.example.com/x")
        assert len(calls) == 1


class TestLifecycle:
    def test_does_not_close_injected_client(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with HttpxTransport(client=client):
            pass
        assert not client.is_closed

    def test_closes_own_client(self) -> None:
        transport = HttpxTransport()
        transport.close()
        assert transport._client.is_closed
