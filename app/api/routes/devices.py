"""
Device endpoints — called by the ESPs themselves.

POST /register
--------------
Body ``{"id": "<device-id>"}``.  Creates the device or refreshes its
liveness.  Always returns ``{"status": "registered"}``.

GET /command?id=<device-id>
---------------------------
Poll for a pending command.  Renews liveness and atomically takes the
command, returning ``{"command": ""}`` when nothing is queued.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from app.api.deps import client_address, get_registry, json_body
from app.devices.errors import DeviceNotFoundError, InvalidDeviceIdError
from app.devices.registry import DeviceRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    id: str


class RegisterResponse(BaseModel):
    status: str


class PollResponse(BaseModel):
    command: str


@router.post("/register", response_model=RegisterResponse)
def register_device(
    request: Request,
    data: RegisterRequest = Depends(json_body(RegisterRequest)),
    registry: DeviceRegistry = Depends(get_registry),
) -> RegisterResponse:
    """
    Register a device, or refresh it if it is already known.

    Returns **400** if ``id`` is empty.
    """
    addr = client_address(request)
    try:
        created = registry.register(data.id)
    except InvalidDeviceIdError as exc:
        logger.warning("Register rejected: empty id from %s", addr)
        raise HTTPException(status_code=400, detail=str(exc))

    if created:
        logger.info("New device registered - id=%s, addr=%s", data.id, addr)
    else:
        logger.info("Device re-registered - id=%s, addr=%s", data.id, addr)

    return RegisterResponse(status="registered")


@router.get("/command", response_model=PollResponse)
def poll_command(
    request: Request,
    id: str | None = Query(default=None),
    registry: DeviceRegistry = Depends(get_registry),
) -> PollResponse:
    """
    Take the device's pending command.

    Returns **400** if ``id`` is missing and **404** if the device never
    registered.
    """
    addr = client_address(request)
    if not id:
        logger.warning("Poll rejected: missing id from %s", addr)
        raise HTTPException(status_code=400, detail="missing id")

    try:
        command = registry.poll(id)
    except DeviceNotFoundError as exc:
        logger.warning("Poll from unregistered device - id=%s, addr=%s", id, addr)
        raise HTTPException(status_code=404, detail=str(exc))

    if not command.is_none:
        logger.info("Command delivered - id=%s, command=%s, addr=%s", id, command, addr)

    return PollResponse(command=command.wire)
