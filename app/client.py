"""
HTTP client for a running Wake-On-Demand server.

Used by the ``on`` / ``off`` / ``status`` / ``list`` CLI commands.  It holds
no state beyond the base URL; every call is one request.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.devices.commands import Command

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 10.0


class ClientError(Exception):
    """Base class for client-side failures."""


class ServerUnreachableError(ClientError):
    def __init__(self, base_url: str) -> None:
        super().__init__(f"Could not connect to server at {base_url}")
        self.base_url = base_url


class DeviceNotRegisteredError(ClientError):
    def __init__(self, device_id: str) -> None:
        super().__init__(f"ESP '{device_id}' not registered")
        self.device_id = device_id


class DeviceOfflineError(ClientError):
    def __init__(self, device_id: str) -> None:
        super().__init__(f"ESP '{device_id}' is offline")
        self.device_id = device_id


class UnexpectedResponseError(ClientError):
    def __init__(self, status_code: int, reason: str = "") -> None:
        super().__init__(f"Error: {status_code} {reason}".rstrip())
        self.status_code = status_code


@dataclass(frozen=True)
class DeviceInfo:
    id: str
    online: bool
    last_seen: str


class CommandClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self._http = httpx.Client(
            base_url=self.base, timeout=timeout, transport=transport
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CommandClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.debug("Request to %s%s failed: %s", self.base, path, exc)
            raise ServerUnreachableError(self.base) from exc

    def set_command(self, device_id: str, command: Command) -> dict:
        """Queue *command* for *device_id*; returns the server's echo."""
        r = self._request(
            "POST",
            "/set-command",
            json={"id": device_id, "command": command.wire},
        )
        if r.status_code == 200:
            return r.json()
        if r.status_code == 404:
            raise DeviceNotRegisteredError(device_id)
        if r.status_code == 503:
            raise DeviceOfflineError(device_id)
        raise UnexpectedResponseError(r.status_code, r.reason_phrase)

    def list_devices(self) -> list[DeviceInfo]:
        r = self._request("GET", "/list")
        if r.status_code != 200:
            raise UnexpectedResponseError(r.status_code, r.reason_phrase)
        try:
            payload = r.json()
            return [
                DeviceInfo(id=e["id"], online=bool(e["online"]), last_seen=e["last_seen"])
                for e in payload.get("esps", [])
            ]
        except (ValueError, KeyError, TypeError) as exc:
            raise UnexpectedResponseError(r.status_code, "Error decoding response") from exc

    def health(self) -> dict:
        r = self._request("GET", "/health")
        if r.status_code != 200:
            raise UnexpectedResponseError(r.status_code, r.reason_phrase)
        return r.json()
