"""
Tests for the HTTP command client (app.client) using httpx.MockTransport.
"""

import json

import httpx
import pytest

from app.client import (
    CommandClient,
    DeviceInfo,
    DeviceNotRegisteredError,
    DeviceOfflineError,
    ServerUnreachableError,
    UnexpectedResponseError,
)
from app.devices.commands import FORCE, PULSE

_BASE = "http://wake.local:8080"


def _client(handler) -> CommandClient:
    return CommandClient(_BASE, transport=httpx.MockTransport(handler))


# ── set_command ───────────────────────────────────────────────────────────────


def test_set_command_posts_wire_value():
    """set_command POSTs id and wire command to /set-command."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = json.loads(request.content)
        return httpx.Response(200, json={"status": "queued", **body})

    with _client(handler) as client:
        result = client.set_command("bedroom", PULSE)

    assert result == {"status": "queued", "id": "bedroom", "command": "pulse"}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/set-command"


@pytest.mark.parametrize(
    "status_code, error",
    [
        (404, DeviceNotRegisteredError),
        (503, DeviceOfflineError),
        (500, UnexpectedResponseError),
    ],
)
def test_set_command_error_statuses(status_code, error):
    """404, 503 and other failures map to distinct errors."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"detail": "nope"})

    with _client(handler) as client:
        with pytest.raises(error):
            client.set_command("attic", FORCE)


def test_set_command_connection_failure():
    """Transport errors become ServerUnreachableError naming the URL."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(ServerUnreachableError) as exc_info:
            client.set_command("attic", FORCE)

    assert _BASE in str(exc_info.value)


# ── list_devices ──────────────────────────────────────────────────────────────


def test_list_devices_parses_response():
    """The /list payload is parsed into DeviceInfo records."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/list"
        return httpx.Response(
            200,
            json={
                "esps": [
                    {"id": "bedroom", "online": True, "last_seen": "3s ago"},
                    {"id": "attic", "online": False, "last_seen": "2m0s ago"},
                ]
            },
        )

    with _client(handler) as client:
        devices = client.list_devices()

    assert devices == [
        DeviceInfo(id="bedroom", online=True, last_seen="3s ago"),
        DeviceInfo(id="attic", online=False, last_seen="2m0s ago"),
    ]


def test_list_devices_bad_payload():
    """A non-JSON /list response raises UnexpectedResponseError."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"})

    with _client(handler) as client:
        with pytest.raises(UnexpectedResponseError):
            client.list_devices()


def test_health_returns_payload():
    """health() returns the decoded /health body."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"status": "ok", "version": "1.0.0", "esps": {"total": 0, "online": 0}},
        )

    with _client(handler) as client:
        assert client.health()["status"] == "ok"


def test_base_url_trailing_slash_is_stripped():
    """A trailing slash on the base URL is dropped."""
    client = CommandClient(_BASE + "/")
    try:
        assert client.base == _BASE
    finally:
        client.close()
