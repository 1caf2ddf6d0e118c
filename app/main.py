"""
Wake-On-Demand — FastAPI application entry point.

Run with:
    uvicorn app.main:app --host 0.0.0.0 --port 8080

or through the CLI:
    wake-on-demand server
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.routes import commands as commands_router
from app.api.routes import devices as devices_router
from app.api.routes import health as health_router
from app.config import VERSION, Settings, settings as default_settings
from app.devices.registry import DeviceRegistry
from app.workers.liveness_monitor import run_liveness_monitor

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


class _PollNoiseFilter(logging.Filter):
    """Drop uvicorn access lines for ``GET /command`` polls.

    Every device polls every few seconds, which would otherwise drown the
    access log.  Poll outcomes worth seeing are logged by the route itself.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            return not str(args[2]).startswith("/command")
        return True


def install_log_filters() -> None:
    """Attach the poll filter to ``uvicorn.access`` once per process."""
    access_logger = logging.getLogger("uvicorn.access")
    if any(isinstance(f, _PollNoiseFilter) for f in access_logger.filters):
        return
    access_logger.addFilter(_PollNoiseFilter())


def configure_log_level(settings: Settings) -> None:
    """``DEBUG=true`` turns on debug output for the application loggers."""
    logging.getLogger("app").setLevel(logging.DEBUG if settings.debug else logging.INFO)


def _log_banner(settings: Settings) -> None:
    logger.info("=" * 46)
    logger.info("Wake-On-Demand Server v%s", VERSION)
    logger.info("=" * 46)
    logger.info("Listening on: %s:%d", settings.api_host, settings.api_port)
    logger.info("ESP timeout: %.0fs", settings.device_timeout)
    logger.info("=" * 46)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the liveness monitor on startup; cancel it on shutdown."""
    _log_banner(app.state.settings)

    monitor_task = asyncio.create_task(
        run_liveness_monitor(app.state.registry), name="liveness_monitor"
    )
    logger.info("Background workers started")
    try:
        yield
    finally:
        monitor_task.cancel()
        try:
            await monitor_task
        except asyncio.CancelledError:
            pass
        logger.info("Background workers stopped")


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are a plain 400, not FastAPI's default 422."""
    logger.warning(
        "Invalid request to %s from %s: %s",
        request.url.path,
        request.client.host if request.client else "unknown",
        exc.errors(),
    )
    return JSONResponse(
        status_code=400,
        content={"detail": "invalid request body", "errors": _jsonable_errors(exc)},
    )


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application and the one registry it owns.

    The registry is created here and lives on ``app.state`` until the process
    exits; nothing is persisted.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Wake-On-Demand API",
        description="Remote server power control through polling ESP devices.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = DeviceRegistry(timeout=settings.device_timeout)

    install_log_filters()
    configure_log_level(settings)

    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(health_router.router, tags=["health"])
    app.include_router(devices_router.router, tags=["devices"])
    app.include_router(commands_router.router, tags=["commands"])

    return app


app = create_app()
