"""
In-memory device registry.

The registry is the single source of truth for every device that has ever
contacted the server.  It is created once by the application factory and
shared by every request handler and the liveness monitor.

Thread safety
-------------
Route handlers run in Starlette's thread pool and the liveness monitor runs
its pass in a worker thread, so every operation takes one coarse
``threading.Lock`` for its whole critical section.  No I/O happens while the
lock is held.

Online state
------------
``online`` has two writers with opposite policies:

- ``_mark_contact`` (register / poll) can only set it ``True``.
- ``_recompute_online`` (liveness monitor) sets it from elapsed time, and is
  the only place a device is ever marked offline.

Readers see the stored flag AND'ed with the elapsed-time check, so a device
that went quiet is reported offline even before the next monitor pass.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.devices.commands import NO_COMMAND, Command
from app.devices.durations import format_elapsed
from app.devices.errors import (
    DeviceNotFoundError,
    DeviceUnavailableError,
    InvalidDeviceIdError,
)


@dataclass
class _DeviceRecord:
    device_id: str
    last_seen_at: float
    online: bool = True
    pending_command: Command = NO_COMMAND


@dataclass(frozen=True)
class DeviceSnapshot:
    device_id: str
    online: bool
    elapsed_seconds: float

    @property
    def last_seen(self) -> str:
        return f"{format_elapsed(self.elapsed_seconds)} ago"


@dataclass(frozen=True)
class HealthSummary:
    total: int
    online: int


@dataclass(frozen=True)
class LivenessTransition:
    """A device whose online flag flipped during a monitor pass."""

    device_id: str
    online: bool
    elapsed_seconds: float


def _mark_contact(record: _DeviceRecord, now: float) -> None:
    record.last_seen_at = now
    record.online = True


def _recompute_online(record: _DeviceRecord, now: float, timeout: float) -> bool:
    """Recompute ``online`` from elapsed time. Returns True if it flipped."""
    was_online = record.online
    record.online = (now - record.last_seen_at) < timeout
    return was_online != record.online


class DeviceRegistry:
    def __init__(
        self,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._devices: dict[str, _DeviceRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        with self._lock:
            return device_id in self._devices

    def _is_online(self, record: _DeviceRecord, now: float) -> bool:
        return record.online and (now - record.last_seen_at) < self.timeout

    def _get(self, device_id: str) -> _DeviceRecord:
        record = self._devices.get(device_id)
        if record is None:
            raise DeviceNotFoundError(device_id)
        return record

    # ── Device-facing operations ─────────────────────────────────────────────

    def register(self, device_id: str) -> bool:
        """
        Register *device_id* or refresh its liveness if already known.

        Returns ``True`` when a new record was created and ``False`` on a
        re-registration.  A pending command survives re-registration.
        """
        if not device_id:
            raise InvalidDeviceIdError(device_id)

        with self._lock:
            now = self._clock()
            record = self._devices.get(device_id)
            if record is None:
                self._devices[device_id] = _DeviceRecord(
                    device_id=device_id, last_seen_at=now
                )
                return True
            _mark_contact(record, now)
            return False

    def poll(self, device_id: str) -> Command:
        """
        Refresh liveness and take the pending command, leaving ``NO_COMMAND``.

        The read is destructive: if the caller never receives the response
        the command is gone.
        """
        with self._lock:
            record = self._get(device_id)
            _mark_contact(record, self._clock())
            command = record.pending_command
            record.pending_command = NO_COMMAND
            return command

    # ── Operator-facing operations ───────────────────────────────────────────

    def set_command(self, device_id: str, command: Command) -> Command:
        """Queue *command*, replacing any command not yet polled."""
        with self._lock:
            record = self._get(device_id)
            if not self._is_online(record, self._clock()):
                raise DeviceUnavailableError(device_id)
            record.pending_command = command
            return command

    def list_devices(self) -> list[DeviceSnapshot]:
        with self._lock:
            now = self._clock()
            return [
                DeviceSnapshot(
                    device_id=record.device_id,
                    online=self._is_online(record, now),
                    elapsed_seconds=now - record.last_seen_at,
                )
                for record in self._devices.values()
            ]

    def health_summary(self) -> HealthSummary:
        with self._lock:
            now = self._clock()
            online = sum(
                1 for record in self._devices.values() if self._is_online(record, now)
            )
            return HealthSummary(total=len(self._devices), online=online)

    # ── Liveness monitor ─────────────────────────────────────────────────────

    def refresh_liveness(self) -> list[LivenessTransition]:
        """Recompute every device's online flag in one critical section."""
        transitions: list[LivenessTransition] = []
        with self._lock:
            now = self._clock()
            for record in self._devices.values():
                if _recompute_online(record, now, self.timeout):
                    transitions.append(
                        LivenessTransition(
                            device_id=record.device_id,
                            online=record.online,
                            elapsed_seconds=now - record.last_seen_at,
                        )
                    )
        return transitions
