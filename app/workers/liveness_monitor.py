"""
Liveness monitor — background task that recomputes every device's online
flag at a fixed interval and logs the devices that changed state.

Design
------
- The interval is a constant, independent of the configurable device timeout.
- Each pass calls ``DeviceRegistry.refresh_liveness()`` in a worker thread so
  the event loop never blocks on the registry lock.
- This is the only code path that marks a device offline.
- Exponential back-off if a pass raises.
"""

import asyncio
import logging

from app.devices.durations import format_elapsed
from app.devices.registry import DeviceRegistry, LivenessTransition

logger = logging.getLogger(__name__)

MONITOR_INTERVAL_SECONDS: float = 10.0

_BACKOFF_BASE: float = 2.0
_BACKOFF_MAX: float = 60.0


def _log_transition(transition: LivenessTransition) -> None:
    if transition.online:
        logger.info("Device is back ONLINE - id=%s", transition.device_id)
    else:
        logger.warning(
            "Device went OFFLINE - id=%s (last seen %s ago)",
            transition.device_id,
            format_elapsed(transition.elapsed_seconds),
        )


async def check_liveness_once(registry: DeviceRegistry) -> list[LivenessTransition]:
    """Run a single monitor pass and log every transition."""
    transitions = await asyncio.to_thread(registry.refresh_liveness)
    for transition in transitions:
        _log_transition(transition)
    return transitions


async def run_liveness_monitor(
    registry: DeviceRegistry, interval: float = MONITOR_INTERVAL_SECONDS
) -> None:
    """
    Long-running coroutine: recompute liveness every *interval* seconds.

    Intended to be launched as a background task from the FastAPI lifespan and
    cancelled on shutdown.
    """
    logger.info(
        "Liveness monitor starting (interval=%ds, timeout=%.0fs)",
        int(interval),
        registry.timeout,
    )
    backoff: float = _BACKOFF_BASE

    while True:
        try:
            await asyncio.sleep(interval)
            await check_liveness_once(registry)
            backoff = _BACKOFF_BASE

        except asyncio.CancelledError:
            logger.info("Liveness monitor cancelled, shutting down")
            break

        except Exception as exc:
            logger.error("Liveness pass failed: %s, retrying in %.0fs", exc, backoff)
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, _BACKOFF_MAX)

    logger.info("Liveness monitor stopped")
