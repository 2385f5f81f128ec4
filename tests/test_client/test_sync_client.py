"""Tests for the synchronous JSON transport."""

from __future__ import annotations

import json

import httpx
import pytest

from yggauth.client import YggdrasilClient
from yggauth.config import Settings
from yggauth.exceptions import RequestError
from yggauth.exit_codes import EXIT_CONNECTION_ERROR


def _client(handler) -> YggdrasilClient:  # noqa: ANN001
    return YggdrasilClient(http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestPostJson:
    def test_sends_json_and_returns_response(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        with _client(handler) as client:
            response = client.post_json("https://drasl.example.com/auth/refresh", {"a": 1})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"a": 1}
        assert seen[0].headers["content-type"] == "application/json"

    def test_error_status_is_returned_not_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": "E", "errorMessage": "M"})

        with _client(handler) as client:
            response = client.post_json("https://drasl.example.com/auth/authenticate", {})

        assert response.status_code == 403
        assert str(response.url) == "https://drasl.example.com/auth/authenticate"

    def test_network_error_is_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(RequestError) as exc_info:
                client.post_json("https://drasl.example.com/auth/authenticate", {})

        assert exc_info.value.status_code is None
        assert exc_info.value.url == "https://drasl.example.com/auth/authenticate"
        assert exc_info.value.exit_code == EXIT_CONNECTION_ERROR

    def test_timeout_is_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with _client(handler) as client:
            with pytest.raises(RequestError, match="timed out"):
                client.post_json("https://drasl.example.com/auth/refresh", {})


class TestLifecycle:
    def test_builds_client_from_settings(self) -> None:
        client = YggdrasilClient(Settings(timeout=7, user_agent="launcher/1.0"))
        try:
            assert client._client.timeout.read == 7
            assert client._client.headers["User-Agent"] == "launcher/1.0"
        finally:
            client.close()

    def test_does_not_close_borrowed_client(self) -> None:
        inner = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with YggdrasilClient(http_client=inner):
            pass
        assert not inner.is_closed
        inner.close()
