"""
Command values that can be queued for a device.

Devices understand three commands: ``pulse`` (short power-on pulse),
``force`` (long force-shutdown pulse) and ``status`` (connectivity check).
The server never rejects other strings; they are carried verbatim as
``UNRECOGNIZED`` so the device firmware decides what to do with them.
"""

from dataclasses import dataclass
from enum import Enum


class CommandKind(str, Enum):
    NONE = "none"
    PULSE = "pulse"
    FORCE = "force"
    STATUS = "status"
    UNRECOGNIZED = "unrecognized"


_KNOWN: dict[str, CommandKind] = {
    "": CommandKind.NONE,
    "pulse": CommandKind.PULSE,
    "force": CommandKind.FORCE,
    "status": CommandKind.STATUS,
}


@dataclass(frozen=True)
class Command:
    """A single pending command; ``raw`` is what goes over the wire."""

    kind: CommandKind
    raw: str = ""

    @classmethod
    def parse(cls, raw: str) -> "Command":
        kind = _KNOWN.get(raw, CommandKind.UNRECOGNIZED)
        return cls(kind=kind, raw=raw)

    @property
    def is_none(self) -> bool:
        return self.kind is CommandKind.NONE

    @property
    def wire(self) -> str:
        return self.raw

    def __str__(self) -> str:
        return self.raw


NO_COMMAND = Command(CommandKind.NONE, "")
PULSE = Command(CommandKind.PULSE, "pulse")
FORCE = Command(CommandKind.FORCE, "force")
STATUS = Command(CommandKind.STATUS, "status")

# CLI verb -> command sent to the device
CLI_COMMANDS: dict[str, Command] = {
    "on": PULSE,
    "off": FORCE,
    "status": STATUS,
}
