"""
Operator endpoints — queue commands and inspect the fleet.

POST /set-command
-----------------
Body ``{"id": "<device-id>", "command": "pulse" | "force" | "status" | ...}``.
Replaces whatever command is still waiting for the device; the previous one
is dropped.  Unknown command strings are stored verbatim.

GET /list
---------
Every known device with its online flag and time since last contact.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from app.api.deps import client_address, get_registry, json_body
from app.devices.commands import Command
from app.devices.errors import DeviceNotFoundError, DeviceUnavailableError
from app.devices.registry import DeviceRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


class SetCommandRequest(BaseModel):
    id: str
    command: str = ""


class SetCommandResponse(BaseModel):
    status: str
    id: str
    command: str


class DeviceListItem(BaseModel):
    id: str
    online: bool
    last_seen: str


class DeviceListResponse(BaseModel):
    esps: list[DeviceListItem]


@router.post("/set-command", response_model=SetCommandResponse)
def set_command(
    request: Request,
    data: SetCommandRequest = Depends(json_body(SetCommandRequest)),
    registry: DeviceRegistry = Depends(get_registry),
) -> SetCommandResponse:
    """
    Queue a command for a device.

    Returns **400** for an empty id, **404** if the device never registered
    and **503** if it is registered but currently offline.
    """
    addr = client_address(request)
    if not data.id:
        logger.warning("Set-command rejected: empty id from %s", addr)
        raise HTTPException(status_code=400, detail="id cannot be empty")

    try:
        accepted = registry.set_command(data.id, Command.parse(data.command))
    except DeviceNotFoundError as exc:
        logger.warning("Set-command for unknown device - id=%s, addr=%s", data.id, addr)
        raise HTTPException(status_code=404, detail=str(exc))
    except DeviceUnavailableError as exc:
        logger.warning("Set-command for offline device - id=%s, addr=%s", data.id, addr)
        raise HTTPException(status_code=503, detail=str(exc))

    logger.info(
        "Command queued - id=%s, command=%s (%s), addr=%s",
        data.id,
        accepted,
        accepted.kind.value,
        addr,
    )
    return SetCommandResponse(status="queued", id=data.id, command=accepted.wire)


@router.get("/list", response_model=DeviceListResponse)
def list_devices(
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
) -> DeviceListResponse:
    """List every device the server has seen since it started."""
    snapshots = registry.list_devices()
    logger.info("Listed %d device(s) for %s", len(snapshots), client_address(request))
    return DeviceListResponse(
        esps=[
            DeviceListItem(id=s.device_id, online=s.online, last_seen=s.last_seen)
            for s in snapshots
        ]
    )
