"""
Shared FastAPI dependencies.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from fastapi import HTTPException, Request
from pydantic import BaseModel, ValidationError

from app.devices.registry import DeviceRegistry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_registry(request: Request) -> DeviceRegistry:
    """
    FastAPI dependency returning the registry created by ``create_app``.

    The registry lives on ``app.state`` for the lifetime of the process.
    """
    return request.app.state.registry


def client_address(request: Request) -> str:
    """Best-effort ``host:port`` of the caller, used in log lines."""
    if request.client is None:
        return "unknown"
    return f"{request.client.host}:{request.client.port}"


def json_body(model: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    """
    Build a dependency that decodes the raw request body as JSON into *model*.

    ESP firmware does not always send ``Content-Type: application/json``, so
    the header is ignored and the body is parsed as-is.  Anything that is not
    a JSON object of the right shape is a **400**.
    """

    async def _parse(request: Request) -> ModelT:
        raw = await request.body()
        try:
            return model.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Invalid JSON body on %s from %s: %s",
                request.url.path,
                client_address(request),
                exc.errors(include_url=False),
            )
            raise HTTPException(status_code=400, detail="invalid JSON")

    return _parse
